"""
Stripe webhook 路由

处理流程：
1. 记录收到推送
2. 验证 Stripe-Signature，失败直接 400（此前不解析请求体）
3. 解析事件；非 checkout.session.completed 的事件直接确认
4. 对账创建订单；重复推送按成功处理

任何失败都会记录阶段日志并返回 400，由 Stripe 负责重试。
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Header
from pydantic import ValidationError

from marketplace.api import errors
from marketplace.api.deps import GatewayDep, RawBodyDep, SessionDep, WebhookLogDep
from marketplace.api.errors import AppError
from marketplace.api.schemas import ApiEnvelope
from marketplace.services.order_reconciler import (
    AlreadyReconciled,
    OfferNotFound,
    OrderCreated,
    ReconcileResult,
    reconcile_checkout_session,
)
from marketplace.services.stripe_events import (
    CHECKOUT_SESSION_COMPLETED,
    MetadataMissing,
    parse_checkout_session,
    parse_event,
)
from marketplace.services.webhook_log import WebhookLogger, WebhookStage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe", response_model=ApiEnvelope)
def stripe_webhook(
    session: SessionDep,
    gateway: GatewayDep,
    webhook_log: WebhookLogDep,
    payload: RawBodyDep,
    stripe_signature: str | None = Header(default=None),
) -> ApiEnvelope:
    webhook_log.log(
        WebhookStage.received,
        {"has_signature": bool(stripe_signature), "payload_length": len(payload)},
    )

    if not stripe_signature:
        webhook_log.log(WebhookStage.failed, {"reason": "signature_missing"})
        raise errors.signature_missing()
    if not gateway.verify_webhook_signature(payload, stripe_signature):
        webhook_log.log(WebhookStage.failed, {"reason": "signature_invalid"})
        raise errors.signature_invalid()
    webhook_log.log(WebhookStage.signature_verified, {"payload_length": len(payload)})

    try:
        event = parse_event(payload)
    except ValidationError:
        webhook_log.log(WebhookStage.failed, {"reason": "invalid_payload"})
        raise errors.invalid_webhook_payload()

    if event.type != CHECKOUT_SESSION_COMPLETED:
        webhook_log.log(WebhookStage.ignored, {"event_id": event.id, "event_type": event.type})
        return ApiEnvelope(data={"received": True})

    try:
        checkout = parse_checkout_session(event)
        result = reconcile_checkout_session(session, checkout, webhook_log)
    except ValidationError:
        webhook_log.log(WebhookStage.failed, {"event_id": event.id, "reason": "invalid_session"})
        raise errors.invalid_webhook_payload()
    except Exception as e:
        # 数据库等意外错误：回滚并返回 400，让 Stripe 重试
        logger.exception(f"Failed to reconcile event {event.id}")
        session.rollback()
        webhook_log.log(
            WebhookStage.failed,
            {"event_id": event.id, "reason": "exception", "error": str(e)},
        )
        raise errors.webhook_processing_failed(str(e))

    return _acknowledge(event.id, checkout.id, result, webhook_log)


def _acknowledge(
    event_id: str, session_id: str, result: ReconcileResult, webhook_log: WebhookLogger
) -> ApiEnvelope:
    if isinstance(result, OrderCreated):
        webhook_log.log(
            WebhookStage.order_inserted,
            {"event_id": event_id, "session_id": session_id, "order_id": str(result.order_id)},
        )
        webhook_log.log(WebhookStage.acknowledged, {"event_id": event_id})
        return ApiEnvelope(data={"received": True, "order_id": result.order_id})

    if isinstance(result, AlreadyReconciled):
        webhook_log.log(
            WebhookStage.duplicate,
            {"event_id": event_id, "session_id": session_id, "order_id": str(result.order_id)},
        )
        return ApiEnvelope(
            data={"received": True, "duplicate": True, "order_id": result.order_id}
        )

    if isinstance(result, MetadataMissing):
        webhook_log.log(
            WebhookStage.failed,
            {"event_id": event_id, "reason": "metadata_missing", "missing": result.missing},
        )
        raise errors.metadata_missing(result.missing)

    if isinstance(result, OfferNotFound):
        webhook_log.log(
            WebhookStage.failed,
            {
                "event_id": event_id,
                "reason": "offer_not_found",
                "gig_id": str(result.gig_id),
                "tier": result.tier,
            },
        )
        raise errors.offer_not_found()

    raise AppError(code=400199, message=f"Unhandled reconcile result: {result!r}")
