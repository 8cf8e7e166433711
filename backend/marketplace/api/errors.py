"""
自定义异常模块

定义应用特定的异常类，用于统一的错误处理。
所有业务异常都继承自 AppError，在 main.py 中有统一的异常处理器。

错误码约定：前三位是 HTTP 语义，后三位是业务编号。
- 4001xx: webhook 接收/对账
- 4003xx: 结账会话（400304: 请求与报价不一致）
"""
from __future__ import annotations


class AppError(Exception):
    """
    应用自定义异常类

    - code: 业务错误码（用于前端区分不同错误）
    - message: 错误消息（用户友好的提示）
    - status_code: HTTP 状态码

    使用示例：
        raise AppError(code=400301, message="Price is not valid", status_code=400)
    """

    def __init__(self, *, code: int, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


# webhook 侧的失败一律返回 400：Stripe 对非 2xx 响应会自动重试。


def signature_missing() -> AppError:
    return AppError(code=400101, message="No signature", status_code=400)


def signature_invalid() -> AppError:
    return AppError(
        code=400102, message="Webhook signature verification failed", status_code=400
    )


def invalid_webhook_payload() -> AppError:
    return AppError(code=400103, message="Invalid webhook payload", status_code=400)


def metadata_missing(missing: list[str]) -> AppError:
    return AppError(
        code=400104,
        message=f"Missing required metadata in session: {', '.join(missing)}",
        status_code=400,
    )


def offer_not_found() -> AppError:
    return AppError(code=404105, message="Offer not found", status_code=400)


def webhook_processing_failed(detail: str) -> AppError:
    return AppError(code=400199, message=f"Webhook Error: {detail}", status_code=400)


def price_invalid() -> AppError:
    return AppError(
        code=400301, message="Stripe price doesn't have a valid unit amount", status_code=400
    )


def seller_payout_not_configured() -> AppError:
    return AppError(
        code=400302, message="Seller has not set up payouts yet", status_code=400
    )


def payment_session_creation_failed() -> AppError:
    # 502 在语义上更准确，但前端只区分 4xx 提示文案
    return AppError(
        code=502303, message="Could not start checkout, please try again", status_code=400
    )


def offer_mismatch() -> AppError:
    return AppError(
        code=400304, message="Checkout details do not match the offer", status_code=400
    )
