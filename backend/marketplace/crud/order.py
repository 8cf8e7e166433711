"""
订单查询操作

这里只有读操作：订单的唯一写入路径是 services/order_reconciler.py。
"""
from sqlmodel import Session, func, select

from marketplace.models import Order


def get_by_stripe_session_id(*, session: Session, stripe_session_id: str) -> Order | None:
    statement = select(Order).where(Order.stripe_session_id == stripe_session_id)
    return session.exec(statement).first()


def _page(session: Session, where, *, offset: int, limit: int) -> tuple[list[Order], int]:
    count = session.exec(select(func.count()).select_from(Order).where(where)).one()
    rows = session.exec(
        select(Order)
        .where(where)
        .order_by(Order.order_date.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return list(rows), count


def list_by_buyer(
    *, session: Session, buyer_id: int, offset: int = 0, limit: int = 20
) -> tuple[list[Order], int]:
    return _page(session, Order.buyer_id == buyer_id, offset=offset, limit=limit)


def list_by_seller(
    *, session: Session, seller_id: int, offset: int = 0, limit: int = 20
) -> tuple[list[Order], int]:
    return _page(session, Order.seller_id == seller_id, offset=offset, limit=limit)


def list_by_gig(
    *, session: Session, gig_id: int, offset: int = 0, limit: int = 20
) -> tuple[list[Order], int]:
    return _page(session, Order.gig_id == gig_id, offset=offset, limit=limit)
