"""卖家收款账户（Stripe Connect）开通"""
import logging

from sqlmodel import Session

from marketplace import crud
from marketplace.api.errors import AppError
from marketplace.models import User
from marketplace.services.stripe_gateway import StripeGateway

logger = logging.getLogger(__name__)


def link_account(
    *, session: Session, gateway: StripeGateway, user: User, stripe_account_id: str | None
) -> User:
    """绑定已有的连接账户，未提供时新建一个 express 账户"""
    if stripe_account_id is None:
        stripe_account_id = gateway.create_express_account()
        logger.info(f"Created express account {stripe_account_id} for user {user.id}")
    return crud.update_user_stripe_setup(
        session=session, user=user, stripe_account_id=stripe_account_id, setup_complete=False
    )


def mark_setup_complete(*, session: Session, gateway: StripeGateway, user: User) -> User:
    """
    连接账户可以收款（charges_enabled）后标记开通完成

    Raises:
        AppError: 用户没有连接账户，或账户尚未完成开通
    """
    if not user.stripe_account_id:
        raise AppError(code=404401, message="Stripe account not found", status_code=404)
    if not gateway.account_charges_enabled(user.stripe_account_id):
        raise AppError(code=400402, message="Stripe account not setup", status_code=400)
    return crud.update_user_stripe_setup(session=session, user=user, setup_complete=True)
