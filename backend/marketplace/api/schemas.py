"""
API 请求/响应数据模型（Schema）

定义所有 API 接口的请求和响应数据结构。
这些模型不是数据库表，只用于 API 数据交换。
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from marketplace.enums import FulfillmentStatus, OfferTier, PaymentStatus

# ============================================================
# 通用响应模型
# ============================================================


class TokenPayload(BaseModel):
    """JWT 载荷，sub 存用户 ID"""
    sub: str | None = None


class ApiEnvelope(BaseModel):
    """
    API 统一响应格式

    - code: 状态码（0 表示成功，非 0 表示错误）
    - message: 消息
    - data: 业务数据

    示例响应：
        {"code": 0, "message": "success", "data": {...}}
        {"code": 400102, "message": "Webhook signature verification failed", "data": None}
    """
    code: int = 0
    message: str = "success"
    data: Any | None = None


# ============================================================
# 认证 / 用户
# ============================================================


class AuthLoginRequest(BaseModel):
    """
    登录请求模型

    token_identifier 来自外部身份服务，首次登录自动建号。
    """
    token_identifier: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=64)
    full_name: str | None = Field(default=None, max_length=128)


class UserProfile(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    stripe_account_id: str | None = None
    stripe_account_setup_complete: bool


class AuthLoginData(BaseModel):
    access_token: str
    expires_in: int  # 秒
    user: UserProfile


# ============================================================
# Gig / 报价
# ============================================================


class GigCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""


class GigData(BaseModel):
    id: int
    seller_id: int
    title: str
    description: str
    published: bool


class OfferCreateRequest(BaseModel):
    """
    发布报价请求模型

    price 以主货币单位（美元）计，Stripe Price 会按分换算。
    """
    tier: OfferTier
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    delivery_days: int = Field(ge=1, le=365)
    revisions: int = Field(ge=0, le=100)


class OfferData(BaseModel):
    id: int
    gig_id: int
    tier: OfferTier
    title: str
    description: str
    price: Decimal
    delivery_days: int
    revisions: int
    stripe_price_id: str


# ============================================================
# 结账 / 收款
# ============================================================


class CheckoutSessionRequest(BaseModel):
    """
    发起结账请求模型

    price_id 是报价上保存的 Stripe Price ID，其余 ID 会写进 session metadata，
    支付完成后由 webhook 原样带回用于创建订单。
    """
    price_id: str = Field(min_length=1, max_length=64)
    title: str = Field(min_length=1, max_length=255)
    seller_id: int
    offer_id: int
    gig_id: int
    buyer_id: int
    tier: OfferTier


class CheckoutSessionData(BaseModel):
    url: str


class PayoutAccountRequest(BaseModel):
    """为空时在 Stripe 新建一个 express 连接账户"""
    stripe_account_id: str | None = Field(default=None, max_length=64)


class PayoutStatusData(BaseModel):
    stripe_account_id: str | None = None
    stripe_account_setup_complete: bool


# ============================================================
# 订单
# ============================================================


class OrderData(BaseModel):
    id: int
    offer_id: int
    gig_id: int
    buyer_id: int
    seller_id: int
    tier: OfferTier
    title: str
    price: Decimal
    delivery_days: int
    revisions: int
    fulfillment_status: FulfillmentStatus
    payment_status: PaymentStatus
    order_date: datetime


class OrdersData(BaseModel):
    data: list[OrderData]
    count: int
