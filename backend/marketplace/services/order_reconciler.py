"""
订单对账服务

处理 checkout.session.completed：根据 session metadata 找到报价，写入订单。
这是系统里唯一创建订单的代码路径。

每种结果都是一个独立的类型，调用方（webhook 路由）必须逐一处理：
- OrderCreated: 新订单已写入
- AlreadyReconciled: 同一个 Checkout Session 已经有订单（重复推送）
- MetadataMissing: metadata 缺字段
- OfferNotFound: 找不到对应报价

去重依赖 orders.stripe_session_id 的唯一约束。写入前会先查一次，
并发推送时先查询拦不住的那一次由唯一约束兜底，回滚后按重复处理。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from marketplace import crud
from marketplace.enums import FulfillmentStatus, PaymentStatus
from marketplace.models import Gig, Offer, Order, utc_now
from marketplace.services.stripe_events import (
    CheckoutSession,
    MetadataMissing,
    OrderMetadata,
    extract_order_metadata,
)
from marketplace.services.webhook_log import WebhookLogger, WebhookStage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderCreated:
    order_id: int


@dataclass(frozen=True)
class AlreadyReconciled:
    order_id: int


@dataclass(frozen=True)
class OfferNotFound:
    gig_id: int
    tier: str


ReconcileResult = OrderCreated | AlreadyReconciled | MetadataMissing | OfferNotFound


def _log(webhook_log: WebhookLogger | None, stage: str, data: dict) -> None:
    if webhook_log is not None:
        webhook_log.log(stage, data)


def reconcile_checkout_session(
    session: Session,
    checkout: CheckoutSession,
    webhook_log: WebhookLogger | None = None,
) -> ReconcileResult:
    """
    为一次支付成功的 Checkout Session 创建订单

    Args:
        session: 数据库会话
        checkout: 已通过签名验证并解析的 Checkout Session
        webhook_log: 诊断日志（可选）

    Returns:
        ReconcileResult 中的一种

    Raises:
        SQLAlchemyError: 数据库写入失败（唯一约束冲突除外），由调用方转换为非 2xx 响应
    """
    meta = extract_order_metadata(checkout)
    if isinstance(meta, MetadataMissing):
        return meta
    _log(
        webhook_log,
        WebhookStage.metadata_extracted,
        {
            "session_id": checkout.id,
            "offer_id": str(meta.offer_id),
            "gig_id": str(meta.gig_id),
            "tier": meta.tier.value,
            "payment_status": checkout.payment_status,
        },
    )
    if checkout.payment_status not in (None, "paid"):
        # 延迟到账的支付方式：订单仍按已支付创建
        logger.warning(
            f"Checkout session {checkout.id} completed with payment_status="
            f"{checkout.payment_status}; order is recorded as paid"
        )

    existing = crud.get_order_by_stripe_session_id(session=session, stripe_session_id=checkout.id)
    if existing:
        return AlreadyReconciled(order_id=existing.id)

    offer = crud.get_offer_by_gig_and_tier(session=session, gig_id=meta.gig_id, tier=meta.tier)
    gig = session.get(Gig, meta.gig_id)
    if (
        offer is None
        or offer.id != meta.offer_id
        or gig is None
        or gig.seller_id != meta.seller_id
    ):
        return OfferNotFound(gig_id=meta.gig_id, tier=meta.tier.value)
    _log(
        webhook_log,
        WebhookStage.offer_resolved,
        {"session_id": checkout.id, "offer_id": str(offer.id), "price": str(offer.price)},
    )

    order = _build_order(meta, checkout, offer)
    order_id = order.id
    session.add(order)
    try:
        session.commit()
    except IntegrityError:
        # 并发推送：另一个请求已经写入了同一个 session 的订单
        session.rollback()
        existing = crud.get_order_by_stripe_session_id(
            session=session, stripe_session_id=checkout.id
        )
        if existing is None:
            raise
        return AlreadyReconciled(order_id=existing.id)

    logger.info(f"Order {order_id} created for checkout session {checkout.id}")
    return OrderCreated(order_id=order_id)


def _build_order(meta: OrderMetadata, checkout: CheckoutSession, offer: Offer) -> Order:
    return Order(
        offer_id=meta.offer_id,
        gig_id=meta.gig_id,
        buyer_id=meta.buyer_id,
        seller_id=meta.seller_id,
        tier=meta.tier.value,
        title=offer.title,
        price=offer.price,
        delivery_days=offer.delivery_days,
        revisions=offer.revisions,
        fulfillment_status=FulfillmentStatus.pending.value,
        payment_status=PaymentStatus.paid.value,
        stripe_session_id=checkout.id,
        order_date=utc_now(),
    )
