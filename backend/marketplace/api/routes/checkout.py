"""
结账路由模块

买家在 gig 页面选择报价后调用，返回 Stripe Checkout 的跳转 URL。
"""
from __future__ import annotations

from fastapi import APIRouter

from marketplace.api import errors
from marketplace.api.deps import CurrentUser, GatewayDep, SessionDep
from marketplace.api.errors import AppError
from marketplace.api.schemas import ApiEnvelope, CheckoutSessionData, CheckoutSessionRequest
from marketplace.services.checkout import (
    CheckoutSessionCreated,
    OfferMismatch,
    PriceInvalid,
    SellerPayoutNotConfigured,
    create_checkout_session,
)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/session", response_model=ApiEnvelope)
def create_session(
    session: SessionDep,
    gateway: GatewayDep,
    current_user: CurrentUser,
    body: CheckoutSessionRequest,
) -> ApiEnvelope:
    """
    创建 Checkout Session

    请求路径: POST /api/v1/checkout/session

    Raises:
        AppError: buyer_id 不是当前用户（403）；与报价不一致、价格无效、卖家未开通收款、
                  Stripe 创建失败（400，提示给用户）
    """
    if body.buyer_id != current_user.id:
        raise AppError(code=403301, message="Cannot check out for another user", status_code=403)

    result = create_checkout_session(session, gateway, body)
    if isinstance(result, CheckoutSessionCreated):
        return ApiEnvelope(data=CheckoutSessionData(url=result.url))
    if isinstance(result, OfferMismatch):
        raise errors.offer_mismatch()
    if isinstance(result, PriceInvalid):
        raise errors.price_invalid()
    if isinstance(result, SellerPayoutNotConfigured):
        raise errors.seller_payout_not_configured()
    # PaymentSessionCreationFailed
    raise errors.payment_session_creation_failed()
