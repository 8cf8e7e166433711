"""
订单模型模块

定义订单相关的数据库模型。
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Column, ForeignKey, Numeric, String
from sqlmodel import Field, SQLModel

from marketplace.enums import FulfillmentStatus, OfferTier, PaymentStatus

from .base import id_field, timestamp_field


class Order(SQLModel, table=True):
    """
    订单模型

    每个支付成功的 Stripe Checkout Session 对应且只对应一条订单，
    只由 webhook 对账流程（services/order_reconciler.py）写入。
    价格、标题、交付天数、修改次数是下单时报价的快照，报价之后的变化不影响订单。

    字段说明：
    - offer_id / gig_id / buyer_id / seller_id: 关联记录
    - tier: 购买的档位
    - fulfillment_status: 履约状态（创建时为 pending）
    - payment_status: 支付状态（创建时为 paid）
    - stripe_session_id: 来源 Checkout Session ID（唯一，用于去重）
    - order_date: 创建时间
    """
    __tablename__ = "orders"
    id: int = id_field()
    offer_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("offers.id"), nullable=False)
    )
    gig_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("gigs.id"), index=True, nullable=False)
    )
    buyer_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("users.id"), index=True, nullable=False)
    )
    seller_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("users.id"), index=True, nullable=False)
    )
    tier: OfferTier = Field(sa_column=Column(String(16), nullable=False))

    title: str = Field(max_length=255)
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    delivery_days: int
    revisions: int

    fulfillment_status: FulfillmentStatus = Field(sa_column=Column(String(16), nullable=False))
    payment_status: PaymentStatus = Field(sa_column=Column(String(16), nullable=False))
    stripe_session_id: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False)
    )

    order_date: datetime = timestamp_field()
