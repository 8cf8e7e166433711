"""用户 CRUD 操作"""
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from marketplace.api.errors import AppError
from marketplace.models import User, utc_now


def get_by_token_identifier(*, session: Session, token_identifier: str) -> User | None:
    """根据外部身份标识查询用户"""
    statement = select(User).where(User.token_identifier == token_identifier)
    return session.exec(statement).first()


def create(
    *, session: Session, token_identifier: str, username: str, full_name: str | None = None
) -> User:
    """创建新用户，用户名被占用时返回 409"""
    user = User(token_identifier=token_identifier, username=username, full_name=full_name)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AppError(code=409001, message="Username already taken", status_code=409)
    session.refresh(user)
    return user


def get_or_create_by_token_identifier(
    *, session: Session, token_identifier: str, username: str, full_name: str | None = None
) -> User:
    """根据外部身份标识获取或创建用户"""
    user = get_by_token_identifier(session=session, token_identifier=token_identifier)
    if user:
        return user
    return create(
        session=session,
        token_identifier=token_identifier,
        username=username,
        full_name=full_name,
    )


def get_stripe_account_id(*, session: Session, user_id: int) -> str | None:
    """卖家的 Stripe 连接账户 ID，用户不存在或未开通收款时返回 None"""
    user = session.get(User, user_id)
    if not user:
        return None
    return user.stripe_account_id or None


def update_stripe_setup(
    *,
    session: Session,
    user: User,
    stripe_account_id: str | None = None,
    setup_complete: bool | None = None,
) -> User:
    """更新用户的收款账户信息"""
    if stripe_account_id is not None:
        user.stripe_account_id = stripe_account_id
    if setup_complete is not None:
        user.stripe_account_setup_complete = setup_complete
    user.updated_at = utc_now()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
