from __future__ import annotations

import hashlib
import hmac
import json
import os
import time
from collections.abc import Callable, Generator
from decimal import Decimal
from types import SimpleNamespace
from typing import Any

# Settings() 在导入时读取环境变量，必须先于 marketplace 的导入设置。
os.environ.setdefault("PROJECT_NAME", "marketplace-test")
os.environ.setdefault("POSTGRES_SERVER", "localhost")
os.environ.setdefault("POSTGRES_USER", "postgres")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")

import pytest  # noqa: E402
import stripe  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine, delete  # noqa: E402

from marketplace.api.deps import get_db, get_payment_gateway, get_webhook_logger  # noqa: E402
from marketplace.core.config import settings  # noqa: E402
from marketplace.enums import OfferTier  # noqa: E402
from marketplace.main import app  # noqa: E402
from marketplace.models import Gig, Offer, Order, User, WebhookLog  # noqa: E402
from marketplace.services.stripe_gateway import StripeGateway  # noqa: E402
from marketplace.services.webhook_log import WebhookLogger  # noqa: E402


class FakeStripeGateway(StripeGateway):
    """不访问网络的网关；webhook 签名验证沿用真实实现"""

    def __init__(self) -> None:
        super().__init__(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        )
        self.prices: dict[str, int | None] = {}
        self.created_prices: list[dict[str, Any]] = []
        self.sessions: list[dict[str, Any]] = []
        self.charges_enabled: dict[str, bool] = {}
        self.session_url: str | None = "https://checkout.stripe.com/c/pay/cs_test_1"
        self.fail_session_create = False

    def retrieve_price_unit_amount(self, price_id: str) -> int | None:
        return self.prices.get(price_id)

    def create_checkout_session(self, **kwargs: Any) -> tuple[str, str | None]:
        if self.fail_session_create:
            raise stripe.APIConnectionError("Network is unreachable")
        self.sessions.append(kwargs)
        return f"cs_test_{len(self.sessions)}", self.session_url

    def create_price(self, *, name: str, unit_amount: int, currency: str) -> str:
        price_id = f"price_test_{len(self.created_prices) + 1}"
        self.created_prices.append({"name": name, "unit_amount": unit_amount, "currency": currency})
        self.prices[price_id] = unit_amount
        return price_id

    def create_express_account(self) -> str:
        return "acct_test_new"

    def account_charges_enabled(self, account_id: str) -> bool:
        return self.charges_enabled.get(account_id, False)


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
        # Clean tables after each test (children first).
        session.rollback()
        session.exec(delete(WebhookLog))
        session.exec(delete(Order))
        session.exec(delete(Offer))
        session.exec(delete(Gig))
        session.exec(delete(User))
        session.commit()


@pytest.fixture(scope="function")
def gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture(scope="function")
def client(engine, db, gateway) -> Generator[TestClient, None, None]:
    """依赖 db：用到接口的测试结束后同样会清表"""
    def _override_get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_webhook_logger] = lambda: WebhookLogger(engine)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def seed(db) -> SimpleNamespace:
    """卖家（已开通收款）、买家、一个 gig 和它的 Standard 报价"""
    seller = User(
        token_identifier="auth|seller",
        username="seller",
        stripe_account_id="acct_seller",
        stripe_account_setup_complete=True,
    )
    buyer = User(token_identifier="auth|buyer", username="buyer")
    db.add(seller)
    db.add(buyer)
    db.commit()
    gig = Gig(seller_id=seller.id, title="Logo design", published=True)
    db.add(gig)
    db.commit()
    offer = Offer(
        gig_id=gig.id,
        title="Standard logo",
        tier=OfferTier.standard.value,
        price=Decimal("100"),
        delivery_days=3,
        revisions=2,
        stripe_price_id="price_std",
    )
    db.add(offer)
    db.commit()
    return SimpleNamespace(
        seller_id=seller.id, buyer_id=buyer.id, gig_id=gig.id, offer_id=offer.id
    )


def _sign_payload(payload: bytes, secret: str | None = None, timestamp: int | None = None) -> str:
    """按 Stripe 的方案生成 Stripe-Signature 头部"""
    secret = secret or settings.STRIPE_WEBHOOK_SECRET
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def post_event(client) -> Callable[..., Any]:
    """签名并投递一个 webhook 事件"""

    def _post(event: dict[str, Any], *, signature: str | None = None):
        payload = json.dumps(event).encode()
        headers = {"Stripe-Signature": signature or _sign_payload(payload)}
        return client.post("/api/v1/webhooks/stripe", content=payload, headers=headers)

    return _post


def _completed_event(
    seed: SimpleNamespace,
    *,
    session_id: str = "cs_test_completed_1",
    event_id: str = "evt_completed_1",
    tier: str = "Standard",
    drop: tuple[str, ...] = (),
) -> dict[str, Any]:
    metadata = {
        "offerId": str(seed.offer_id),
        "gigId": str(seed.gig_id),
        "buyerId": str(seed.buyer_id),
        "sellerId": str(seed.seller_id),
        "tier": tier,
    }
    for key in drop:
        metadata.pop(key)
    return {
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": "paid",
                "metadata": metadata,
            }
        },
    }


def _login(client, token_identifier: str = "auth|buyer", username: str = "buyer") -> dict[str, str]:
    r = client.post(
        "/api/v1/auth/login",
        json={"token_identifier": token_identifier, "username": username},
    )
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['data']['access_token']}"}


@pytest.fixture
def sign() -> Callable[..., str]:
    return _sign_payload


@pytest.fixture
def make_event() -> Callable[..., dict[str, Any]]:
    return _completed_event


@pytest.fixture
def login(client) -> Callable[..., dict[str, str]]:
    def _headers(token_identifier: str = "auth|buyer", username: str = "buyer") -> dict[str, str]:
        return _login(client, token_identifier, username)

    return _headers
