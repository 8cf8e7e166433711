"""
Stripe 支付网关封装

文档: https://docs.stripe.com/api
Webhook 签名: https://docs.stripe.com/webhooks#verify-events

每个请求显式构造一个 StripeGateway（见 api/deps.py），所有 API 调用都带上
实例自己的 api_key，不修改 stripe 模块的全局状态。测试中通过依赖覆盖
替换成假的网关。
"""
import logging

import stripe

logger = logging.getLogger(__name__)


class StripeGateway:
    """Stripe 服务封装"""

    def __init__(self, api_key: str, webhook_secret: str, tolerance: int = 300):
        """
        Args:
            api_key: 平台账户 secret key
            webhook_secret: webhook 签名密钥
            tolerance: 签名时间戳允许的偏差（秒）
        """
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """
        验证 Webhook 签名

        Stripe-Signature 头部格式为 "t=<timestamp>,v1=<hmac>"，
        HMAC-SHA256(secret, "<timestamp>.<payload>")。

        Args:
            payload: 请求体原始字节（不能是重新序列化后的 JSON）
            signature: Stripe-Signature 头部值

        Returns:
            是否验证通过
        """
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                signature,
                self.webhook_secret,
                tolerance=self.tolerance,
            )
        except (UnicodeDecodeError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Stripe webhook signature rejected: {e}")
            return False
        return True

    def retrieve_price_unit_amount(self, price_id: str) -> int | None:
        """
        查询 Price 的单价（最小货币单位，如美分）

        Price 不存在时返回 None；其他 Stripe 错误向上抛出。
        """
        try:
            price = stripe.Price.retrieve(price_id, api_key=self.api_key)
        except stripe.InvalidRequestError as e:
            logger.info(f"Stripe price {price_id} not retrievable: {e}")
            return None
        return price.unit_amount

    def create_checkout_session(
        self,
        *,
        stripe_account: str,
        title: str,
        unit_amount: int,
        currency: str,
        application_fee_amount: int,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> tuple[str, str | None]:
        """
        在卖家的连接账户下创建一次性支付的 Checkout Session

        Returns:
            (session_id, 跳转 URL)
        """
        session = stripe.checkout.Session.create(
            api_key=self.api_key,
            stripe_account=stripe_account,
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": title},
                        "unit_amount": unit_amount,
                    },
                    "quantity": 1,
                }
            ],
            metadata=metadata,
            payment_intent_data={"application_fee_amount": application_fee_amount},
            success_url=success_url,
            cancel_url=cancel_url,
        )
        logger.info(f"Created checkout session {session.id} on account {stripe_account}")
        return session.id, session.url

    def create_price(self, *, name: str, unit_amount: int, currency: str) -> str:
        """创建带内联 Product 的 Price，返回 Price ID"""
        price = stripe.Price.create(
            api_key=self.api_key,
            currency=currency,
            unit_amount=unit_amount,
            product_data={"name": name},
        )
        return price.id

    def create_express_account(self) -> str:
        """为卖家新建一个 express 连接账户，返回账户 ID"""
        account = stripe.Account.create(api_key=self.api_key, type="express")
        return account.id

    def account_charges_enabled(self, account_id: str) -> bool:
        account = stripe.Account.retrieve(account_id, api_key=self.api_key)
        return bool(account.charges_enabled)
