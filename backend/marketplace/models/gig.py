"""
Gig 模型模块

Gig 是卖家发布的服务条目，每个 gig 下最多三个报价档位（见 offer.py）。
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, ForeignKey
from sqlmodel import Field, SQLModel

from .base import id_field, timestamp_field


class Gig(SQLModel, table=True):
    __tablename__ = "gigs"
    id: int = id_field()
    seller_id: int = Field(
        sa_column=Column(
            BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    title: str = Field(max_length=255)
    description: str = Field(default="")
    published: bool = Field(default=False)
    created_at: datetime = timestamp_field()
