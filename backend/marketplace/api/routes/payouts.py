"""
收款账户路由模块

卖家开通 Stripe Connect 连接账户；开通完成后买家才能对其 gig 发起结账。
"""
from __future__ import annotations

from fastapi import APIRouter

from marketplace.api.deps import CurrentUser, GatewayDep, SessionDep
from marketplace.api.schemas import ApiEnvelope, PayoutAccountRequest, PayoutStatusData
from marketplace.models import User
from marketplace.services import payouts

router = APIRouter(prefix="/payouts", tags=["payouts"])


def _to_status(user: User) -> PayoutStatusData:
    return PayoutStatusData(
        stripe_account_id=user.stripe_account_id,
        stripe_account_setup_complete=user.stripe_account_setup_complete,
    )


@router.post("/account", response_model=ApiEnvelope)
def link_account(
    session: SessionDep, gateway: GatewayDep, current_user: CurrentUser, body: PayoutAccountRequest
) -> ApiEnvelope:
    user = payouts.link_account(
        session=session,
        gateway=gateway,
        user=current_user,
        stripe_account_id=body.stripe_account_id,
    )
    return ApiEnvelope(data=_to_status(user))


@router.post("/setup-complete", response_model=ApiEnvelope)
def setup_complete(session: SessionDep, gateway: GatewayDep, current_user: CurrentUser) -> ApiEnvelope:
    user = payouts.mark_setup_complete(session=session, gateway=gateway, user=current_user)
    return ApiEnvelope(data=_to_status(user))
