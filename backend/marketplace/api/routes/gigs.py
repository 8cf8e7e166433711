"""
Gig 路由模块

- 创建 gig
- 发布报价（同时创建 Stripe Price）
- 查询 gig 的报价列表
"""
from __future__ import annotations

from fastapi import APIRouter

from marketplace import crud
from marketplace.api.deps import CurrentUser, GatewayDep, SessionDep
from marketplace.api.schemas import (
    ApiEnvelope,
    GigCreateRequest,
    GigData,
    OfferCreateRequest,
    OfferData,
)
from marketplace.models import Offer
from marketplace.services.offers import publish_offer

router = APIRouter(prefix="/gigs", tags=["gigs"])


def _to_offer_data(offer: Offer) -> OfferData:
    return OfferData(
        id=offer.id,
        gig_id=offer.gig_id,
        tier=offer.tier,
        title=offer.title,
        description=offer.description,
        price=offer.price,
        delivery_days=offer.delivery_days,
        revisions=offer.revisions,
        stripe_price_id=offer.stripe_price_id,
    )


@router.post("", response_model=ApiEnvelope)
def create_gig(session: SessionDep, current_user: CurrentUser, body: GigCreateRequest) -> ApiEnvelope:
    gig = crud.create_gig(
        session=session, seller_id=current_user.id, title=body.title, description=body.description
    )
    return ApiEnvelope(
        data=GigData(
            id=gig.id,
            seller_id=gig.seller_id,
            title=gig.title,
            description=gig.description,
            published=gig.published,
        )
    )


@router.post("/{gig_id}/offers", response_model=ApiEnvelope)
def create_offer(
    session: SessionDep,
    gateway: GatewayDep,
    current_user: CurrentUser,
    gig_id: int,
    body: OfferCreateRequest,
) -> ApiEnvelope:
    """
    发布报价

    请求路径: POST /api/v1/gigs/{gig_id}/offers

    Raises:
        AppError: gig 不存在（404）、不是卖家本人（403）、档位已存在（409）
    """
    gig = crud.get_owned_gig_or_403(session=session, gig_id=gig_id, seller_id=current_user.id)
    offer = publish_offer(session=session, gateway=gateway, gig=gig, body=body)
    return ApiEnvelope(data=_to_offer_data(offer))


@router.get("/{gig_id}/offers", response_model=ApiEnvelope)
def list_offers(session: SessionDep, gig_id: int) -> ApiEnvelope:
    crud.get_gig_or_404(session=session, gig_id=gig_id)
    offers = crud.list_offers_by_gig(session=session, gig_id=gig_id)
    return ApiEnvelope(data=[_to_offer_data(o) for o in offers])
