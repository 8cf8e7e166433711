"""
Webhook 诊断日志模型

只追加写入，用于排查 webhook 处理到了哪一步；业务逻辑从不读取。
"""
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, String
from sqlmodel import Field, SQLModel

from .base import id_field, timestamp_field


class WebhookLog(SQLModel, table=True):
    __tablename__ = "webhook_logs"

    id: int = id_field()
    stage: str = Field(sa_column=Column(String(64), index=True, nullable=False))
    data: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    timestamp: datetime = timestamp_field()
