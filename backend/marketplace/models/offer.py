"""
报价模型模块

定义 gig 的价格档位。
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Column, ForeignKey, Numeric, String, UniqueConstraint
from sqlmodel import Field, SQLModel

from marketplace.enums import OfferTier

from .base import id_field, timestamp_field


class Offer(SQLModel, table=True):
    """
    报价模型

    一个 gig 的某个档位（Basic/Standard/Premium）的价格、交付天数和修改次数。
    创建时同步在 Stripe 创建 Price，stripe_price_id 用于发起结账。
    报价创建后不再修改；(gig_id, tier) 唯一，webhook 对账时按它查找。

    字段说明：
    - price: 价格（主货币单位，如美元）
    - delivery_days: 交付天数
    - revisions: 可修改次数
    - stripe_price_id: Stripe Price ID
    """
    __tablename__ = "offers"
    __table_args__ = (UniqueConstraint("gig_id", "tier", name="uq_offers_gig_id_tier"),)

    id: int = id_field()
    gig_id: int = Field(
        sa_column=Column(
            BigInteger, ForeignKey("gigs.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    title: str = Field(max_length=255)
    description: str = Field(default="")
    tier: OfferTier = Field(sa_column=Column(String(16), index=True, nullable=False))
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    delivery_days: int
    revisions: int
    stripe_price_id: str = Field(max_length=64)
    created_at: datetime = timestamp_field()
