"""报价 CRUD 操作"""
from sqlmodel import Session, select

from marketplace.enums import OfferTier
from marketplace.models import Offer


def get_by_gig_and_tier(*, session: Session, gig_id: int, tier: OfferTier) -> Offer | None:
    """按 (gig_id, tier) 查询报价，webhook 对账时使用"""
    statement = select(Offer).where(Offer.gig_id == gig_id, Offer.tier == tier.value)
    return session.exec(statement).first()


def list_by_gig(*, session: Session, gig_id: int) -> list[Offer]:
    statement = select(Offer).where(Offer.gig_id == gig_id).order_by(Offer.price)
    return list(session.exec(statement).all())
