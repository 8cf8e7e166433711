"""
结账会话服务

买家选择报价后，在卖家的 Stripe 连接账户下创建 Checkout Session，返回跳转 URL。
这里不创建订单：订单只在支付完成的 webhook 里生成（见 order_reconciler.py）。

结果类型：
- CheckoutSessionCreated: 成功，带跳转 URL
- OfferMismatch: price_id / 卖家 / 档位与报价不一致
- PriceInvalid: Price 不存在或单价不是正数
- SellerPayoutNotConfigured: 卖家没有连接账户
- PaymentSessionCreationFailed: Stripe 创建会话失败
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import stripe
from sqlmodel import Session

from marketplace import crud
from marketplace.api.schemas import CheckoutSessionRequest
from marketplace.core.config import settings
from marketplace.models import Gig
from marketplace.services.stripe_gateway import StripeGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSessionCreated:
    session_id: str
    url: str


@dataclass(frozen=True)
class PriceInvalid:
    price_id: str


@dataclass(frozen=True)
class OfferMismatch:
    offer_id: int


@dataclass(frozen=True)
class SellerPayoutNotConfigured:
    seller_id: int


@dataclass(frozen=True)
class PaymentSessionCreationFailed:
    reason: str


CheckoutResult = (
    CheckoutSessionCreated
    | OfferMismatch
    | PriceInvalid
    | SellerPayoutNotConfigured
    | PaymentSessionCreationFailed
)


def platform_fee(unit_amount: int, percent: int | None = None) -> int:
    """
    平台抽成（最小货币单位，向下取整）

    示例：
        >>> platform_fee(1999)
        199
    """
    if percent is None:
        percent = settings.PLATFORM_FEE_PERCENT
    return unit_amount * percent // 100


def build_session_metadata(body: CheckoutSessionRequest) -> dict[str, str]:
    """写入 session metadata 的订单关联信息，Stripe 只接受字符串值"""
    return {
        "offerId": str(body.offer_id),
        "gigId": str(body.gig_id),
        "buyerId": str(body.buyer_id),
        "sellerId": str(body.seller_id),
        "tier": body.tier.value,
    }


def _matches_offer(session: Session, body: CheckoutSessionRequest) -> bool:
    """
    请求里的报价信息必须和库里的报价一致

    webhook 对账按 metadata 里的 gig + tier 取订单快照，收费用的 price_id 必须属于同一个报价。
    """
    offer = crud.get_offer_by_gig_and_tier(session=session, gig_id=body.gig_id, tier=body.tier)
    gig = session.get(Gig, body.gig_id)
    return (
        offer is not None
        and gig is not None
        and offer.id == body.offer_id
        and offer.stripe_price_id == body.price_id
        and gig.seller_id == body.seller_id
    )


def create_checkout_session(
    session: Session, gateway: StripeGateway, body: CheckoutSessionRequest
) -> CheckoutResult:
    if not _matches_offer(session, body):
        return OfferMismatch(offer_id=body.offer_id)

    try:
        unit_amount = gateway.retrieve_price_unit_amount(body.price_id)
    except stripe.StripeError as e:
        logger.error(f"Failed to retrieve price {body.price_id}: {e}")
        return PaymentSessionCreationFailed(reason=str(e))
    if unit_amount is None or unit_amount <= 0:
        return PriceInvalid(price_id=body.price_id)

    stripe_account_id = crud.get_stripe_account_id(session=session, user_id=body.seller_id)
    if stripe_account_id is None:
        return SellerPayoutNotConfigured(seller_id=body.seller_id)

    try:
        session_id, url = gateway.create_checkout_session(
            stripe_account=stripe_account_id,
            title=body.title,
            unit_amount=unit_amount,
            currency=settings.CHECKOUT_CURRENCY,
            application_fee_amount=platform_fee(unit_amount),
            metadata=build_session_metadata(body),
            success_url=settings.CHECKOUT_SUCCESS_URL,
            cancel_url=settings.CHECKOUT_CANCEL_URL,
        )
    except stripe.StripeError as e:
        logger.error(f"Failed to create checkout session for offer {body.offer_id}: {e}")
        return PaymentSessionCreationFailed(reason=str(e))

    if not url:
        return PaymentSessionCreationFailed(reason=f"Session {session_id} has no redirect URL")
    return CheckoutSessionCreated(session_id=session_id, url=url)
