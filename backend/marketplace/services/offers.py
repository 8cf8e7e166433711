"""
报价发布服务

卖家为 gig 发布某个档位的报价时，先在 Stripe 创建对应的 Price，
再把 Price ID 和报价一起保存。买家结账时用这个 Price ID 取单价。
"""
import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from marketplace import crud
from marketplace.api.errors import AppError
from marketplace.api.schemas import OfferCreateRequest
from marketplace.core.config import settings
from marketplace.models import Gig, Offer
from marketplace.services.stripe_gateway import StripeGateway

logger = logging.getLogger(__name__)


def to_minor_units(price: Decimal) -> int:
    """主货币单位换算成最小单位（美元 -> 美分）"""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def price_product_name(tier: str, title: str) -> str:
    return f"[{tier}] {title}"


def publish_offer(
    *, session: Session, gateway: StripeGateway, gig: Gig, body: OfferCreateRequest
) -> Offer:
    """
    发布报价

    Raises:
        AppError: 该档位已存在（409）
    """
    if crud.get_offer_by_gig_and_tier(session=session, gig_id=gig.id, tier=body.tier):
        raise AppError(code=409102, message="Offer for this tier already exists", status_code=409)

    price_id = gateway.create_price(
        name=price_product_name(body.tier.value, body.title),
        unit_amount=to_minor_units(body.price),
        currency=settings.CHECKOUT_CURRENCY,
    )
    offer = Offer(
        gig_id=gig.id,
        title=body.title,
        description=body.description,
        tier=body.tier.value,
        price=body.price,
        delivery_days=body.delivery_days,
        revisions=body.revisions,
        stripe_price_id=price_id,
    )
    session.add(offer)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning(f"Stripe price {price_id} orphaned by concurrent offer publish")
        raise AppError(code=409102, message="Offer for this tier already exists", status_code=409)
    session.refresh(offer)
    logger.info(f"Offer {offer.id} ({body.tier.value}) published for gig {gig.id}")
    return offer
