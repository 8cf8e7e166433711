"""
订单路由模块

只读查询：买家的订单、卖家的订单、某个 gig 的订单、订单详情。
订单由 Stripe webhook 对账创建，这里没有创建接口。
"""
from __future__ import annotations

from fastapi import APIRouter, Query

from marketplace import crud
from marketplace.api.deps import CurrentUser, SessionDep
from marketplace.api.errors import AppError
from marketplace.api.schemas import ApiEnvelope, OrderData, OrdersData
from marketplace.models import Order

router = APIRouter(prefix="/orders", tags=["orders"])


def _to_order_data(order: Order) -> OrderData:
    return OrderData(
        id=order.id,
        offer_id=order.offer_id,
        gig_id=order.gig_id,
        buyer_id=order.buyer_id,
        seller_id=order.seller_id,
        tier=order.tier,
        title=order.title,
        price=order.price,
        delivery_days=order.delivery_days,
        revisions=order.revisions,
        fulfillment_status=order.fulfillment_status,
        payment_status=order.payment_status,
        order_date=order.order_date,
    )


def _to_orders_data(rows: list[Order], count: int) -> OrdersData:
    return OrdersData(data=[_to_order_data(o) for o in rows], count=count)


@router.get("/buying", response_model=ApiEnvelope)
def list_buying(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ApiEnvelope:
    """当前用户作为买家的订单，按下单时间倒序"""
    rows, count = crud.list_orders_by_buyer(
        session=session, buyer_id=current_user.id, offset=(page - 1) * page_size, limit=page_size
    )
    return ApiEnvelope(data=_to_orders_data(rows, count))


@router.get("/selling", response_model=ApiEnvelope)
def list_selling(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ApiEnvelope:
    """当前用户作为卖家的订单"""
    rows, count = crud.list_orders_by_seller(
        session=session, seller_id=current_user.id, offset=(page - 1) * page_size, limit=page_size
    )
    return ApiEnvelope(data=_to_orders_data(rows, count))


@router.get("/gig/{gig_id}", response_model=ApiEnvelope)
def list_for_gig(
    session: SessionDep,
    current_user: CurrentUser,
    gig_id: int,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ApiEnvelope:
    """某个 gig 的订单，仅 gig 的卖家可查"""
    crud.get_owned_gig_or_403(session=session, gig_id=gig_id, seller_id=current_user.id)
    rows, count = crud.list_orders_by_gig(
        session=session, gig_id=gig_id, offset=(page - 1) * page_size, limit=page_size
    )
    return ApiEnvelope(data=_to_orders_data(rows, count))


@router.get("/{order_id}", response_model=ApiEnvelope)
def get_order(session: SessionDep, current_user: CurrentUser, order_id: int) -> ApiEnvelope:
    """
    订单详情

    只有订单的买家或卖家可以查看，其他人一律返回 404。
    """
    order = session.get(Order, order_id)
    if not order or current_user.id not in (order.buyer_id, order.seller_id):
        raise AppError(code=404201, message="Order not found", status_code=404)
    return ApiEnvelope(data=_to_order_data(order))
