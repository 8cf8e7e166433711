"""
数据库模型定义模块

本模块使用 SQLModel 定义所有数据库表结构。

模型按功能拆分：
- user.py: 用户模型（买家/卖家，含 Stripe 收款账户）
- gig.py: 服务条目
- offer.py: 报价档位
- order.py: 订单
- webhook_log.py: webhook 诊断日志
"""
from sqlmodel import SQLModel

from .base import utc_now
from .gig import Gig
from .offer import Offer
from .order import Order
from .user import User
from .webhook_log import WebhookLog

__all__ = [
    "SQLModel",
    "utc_now",
    "User",
    "Gig",
    "Offer",
    "Order",
    "WebhookLog",
]
