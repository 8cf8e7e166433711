"""Gig CRUD 操作"""
from sqlmodel import Session

from marketplace.api.errors import AppError
from marketplace.models import Gig


def create(*, session: Session, seller_id: int, title: str, description: str = "") -> Gig:
    gig = Gig(seller_id=seller_id, title=title, description=description)
    session.add(gig)
    session.commit()
    session.refresh(gig)
    return gig


def get_or_404(*, session: Session, gig_id: int) -> Gig:
    gig = session.get(Gig, gig_id)
    if not gig:
        raise AppError(code=404101, message="Gig not found", status_code=404)
    return gig


def get_owned_or_403(*, session: Session, gig_id: int, seller_id: int) -> Gig:
    """获取 gig 并校验当前用户是卖家本人"""
    gig = get_or_404(session=session, gig_id=gig_id)
    if gig.seller_id != seller_id:
        raise AppError(code=403101, message="Not the seller of this gig", status_code=403)
    return gig
