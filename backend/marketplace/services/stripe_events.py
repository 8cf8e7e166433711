"""
Stripe webhook 事件解析

签名验证通过后，请求体在这里一次性解析成带类型的事件对象；
之后的代码只接触这些对象，不再传递原始的 key-value。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from marketplace.enums import OfferTier

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"

# 发起结账时写入 metadata 的键（与 services/checkout.py 保持一致）
METADATA_KEYS = ("offerId", "gigId", "buyerId", "sellerId", "tier")


class StripeEventData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: dict[str, Any]


class StripeEvent(BaseModel):
    """Stripe Event 外层结构，只保留用到的字段"""
    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    data: StripeEventData


class CheckoutSession(BaseModel):
    """checkout.session.completed 事件里的 Checkout Session"""
    model_config = ConfigDict(extra="ignore")

    id: str
    metadata: dict[str, Any] | None = None
    payment_status: str | None = None


@dataclass(frozen=True)
class OrderMetadata:
    """session metadata 解析后的订单关联信息"""
    offer_id: int
    gig_id: int
    buyer_id: int
    seller_id: int
    tier: OfferTier


@dataclass(frozen=True)
class MetadataMissing:
    """metadata 缺少必填键，或者值无法解析"""
    missing: list[str] = field(default_factory=list)


def parse_event(payload: bytes) -> StripeEvent:
    """
    解析事件外层结构

    只能在签名验证通过之后调用。

    Raises:
        pydantic.ValidationError: 请求体不是合法的事件 JSON
    """
    return StripeEvent.model_validate_json(payload)


def parse_checkout_session(event: StripeEvent) -> CheckoutSession:
    """
    Raises:
        pydantic.ValidationError: data.object 不是 Checkout Session
    """
    return CheckoutSession.model_validate(event.data.object)


def _as_id(value: Any) -> int | None:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return None


def extract_order_metadata(checkout: CheckoutSession) -> OrderMetadata | MetadataMissing:
    metadata = checkout.metadata or {}
    missing = [k for k in METADATA_KEYS if not str(metadata.get(k) or "").strip()]
    if missing:
        return MetadataMissing(missing=missing)

    ids = {k: _as_id(metadata[k]) for k in ("offerId", "gigId", "buyerId", "sellerId")}
    invalid = [k for k, v in ids.items() if v is None]
    try:
        tier = OfferTier(str(metadata["tier"]))
    except ValueError:
        invalid.append("tier")
    if invalid:
        return MetadataMissing(missing=invalid)

    return OrderMetadata(
        offer_id=ids["offerId"],  # type: ignore[arg-type]
        gig_id=ids["gigId"],  # type: ignore[arg-type]
        buyer_id=ids["buyerId"],  # type: ignore[arg-type]
        seller_id=ids["sellerId"],  # type: ignore[arg-type]
        tier=tier,
    )
