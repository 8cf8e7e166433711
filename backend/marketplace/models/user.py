"""
用户模型模块

定义用户相关的数据库模型。
"""
from datetime import datetime

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel

from .base import id_field, timestamp_field


class User(SQLModel, table=True):
    """
    用户模型

    买家和卖家是同一张表。用户身份来自外部登录服务（token_identifier），
    首次登录时自动创建。

    字段说明：
    - id: 主键，Snowflake ID
    - token_identifier: 外部身份标识（唯一）
    - username: 用户名（唯一，用于 gig 页面路径）
    - full_name: 显示名称
    - stripe_account_id: 卖家的 Stripe 连接账户 ID，未开通收款时为空
    - stripe_account_setup_complete: 连接账户是否已可收款（charges_enabled）
    """
    __tablename__ = "users"
    id: int = id_field()
    token_identifier: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False)
    )
    username: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False)
    )
    full_name: str | None = Field(default=None, max_length=128)

    stripe_account_id: str | None = Field(default=None, max_length=64)
    stripe_account_setup_complete: bool = Field(default=False)

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
