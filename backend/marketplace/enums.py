"""
枚举类型定义模块

定义应用中使用的所有枚举类型。
所有枚举都继承自 str 和 Enum，既可以当字符串存库，也能做类型约束。
"""
from enum import Enum


class OfferTier(str, Enum):
    """
    报价档位枚举

    每个 gig 固定三个档位，值与前端/Stripe metadata 中的写法保持一致（首字母大写）。
    """
    basic = "Basic"
    standard = "Standard"
    premium = "Premium"


class FulfillmentStatus(str, Enum):
    """
    订单履约状态

    - pending: 已付款，等待卖家交付
    - in_progress: 交付中
    - delivered: 已交付
    - cancelled: 已取消
    """
    pending = "pending"
    in_progress = "in_progress"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    """
    订单支付状态

    订单只会在支付成功的 webhook 之后创建，所以实际写入的只有 paid。
    """
    paid = "paid"
    refunded = "refunded"
