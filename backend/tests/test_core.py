from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest
import stripe
from pydantic import ValidationError
from sqlmodel import create_engine, select
from tenacity import RetryError, stop_after_attempt

from marketplace import backend_pre_start
from marketplace.core.config import Settings, settings
from marketplace.core.snowflake import _EPOCH_MS, Snowflake, generate_id
from marketplace.models import WebhookLog
from marketplace.services.stripe_gateway import StripeGateway
from marketplace.services.webhook_log import WebhookLogger, WebhookStage

T0 = 1_800_000_000_000


def _clock(monkeypatch, values):
    it = iter(values)
    monkeypatch.setattr(Snowflake, "_now_ms", staticmethod(lambda: next(it)))


# ---------------------------------------------------------------------------
# snowflake
# ---------------------------------------------------------------------------


def test_generate_id_is_unique_and_increasing():
    ids = [generate_id() for _ in range(2000)]
    assert len(set(ids)) == len(ids)
    assert ids == sorted(ids)


def test_snowflake_layout(monkeypatch):
    _clock(monkeypatch, [T0, T0])
    gen = Snowflake(node_id=7)
    first, second = gen.next_id(), gen.next_id()
    assert first >> 22 == T0 - _EPOCH_MS
    assert (first >> 12) & 0x3FF == 7
    assert first & 0xFFF == 0
    assert second & 0xFFF == 1


def test_snowflake_rejects_bad_node():
    with pytest.raises(ValueError):
        Snowflake(node_id=1024)
    with pytest.raises(ValueError):
        Snowflake(node_id=-1)


def test_snowflake_sequence_rollover_waits_for_next_ms(monkeypatch):
    calls = {"n": 0}

    def _now():
        calls["n"] += 1
        return T0 if calls["n"] <= 4097 else T0 + 1

    monkeypatch.setattr(Snowflake, "_now_ms", staticmethod(_now))
    gen = Snowflake(node_id=0)
    ids = [gen.next_id() for _ in range(4097)]
    assert len(set(ids)) == 4097
    assert ids[-1] >> 22 == T0 + 1 - _EPOCH_MS
    assert ids[-1] & 0xFFF == 0


def test_snowflake_small_clock_drift_waits(monkeypatch):
    _clock(monkeypatch, [T0, T0 - 10, T0])
    gen = Snowflake(node_id=0)
    first, second = gen.next_id(), gen.next_id()
    assert second > first
    assert second >> 22 == T0 - _EPOCH_MS


def test_snowflake_large_clock_drift_raises(monkeypatch):
    _clock(monkeypatch, [T0, T0 - 10_000])
    gen = Snowflake(node_id=0)
    gen.next_id()
    with pytest.raises(RuntimeError):
        gen.next_id()


# ---------------------------------------------------------------------------
# settings
# ---------------------------------------------------------------------------


def _settings(**overrides) -> Settings:
    values = {
        "PROJECT_NAME": "marketplace-test",
        "POSTGRES_SERVER": "localhost",
        "POSTGRES_USER": "postgres",
        "STRIPE_SECRET_KEY": "sk_test_unit",
        "STRIPE_WEBHOOK_SECRET": "whsec_unit",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_settings_defaults():
    cfg = _settings()
    assert cfg.PLATFORM_FEE_PERCENT == 10
    assert cfg.STRIPE_WEBHOOK_TOLERANCE_SECONDS == 300
    assert cfg.CHECKOUT_CURRENCY == "usd"
    assert str(cfg.SQLALCHEMY_DATABASE_URI).startswith("postgresql+psycopg://")


def test_settings_require_stripe_secret(monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            PROJECT_NAME="x",
            POSTGRES_SERVER="localhost",
            POSTGRES_USER="postgres",
            STRIPE_WEBHOOK_SECRET="whsec_unit",
        )


@pytest.mark.parametrize("percent", [-1, 100, 150])
def test_settings_reject_bad_fee(percent):
    with pytest.raises(ValidationError):
        _settings(PLATFORM_FEE_PERCENT=percent)


def test_settings_reject_placeholder_secret_outside_local():
    with pytest.raises(ValidationError):
        _settings(ENVIRONMENT="production", STRIPE_WEBHOOK_SECRET="changethis")


def test_settings_cors_from_comma_string():
    cfg = _settings(BACKEND_CORS_ORIGINS="http://a.example, http://b.example/")
    assert cfg.all_cors_origins == ["http://a.example", "http://b.example"]


# ---------------------------------------------------------------------------
# backend_pre_start
# ---------------------------------------------------------------------------


def test_check_stripe_config_ok():
    assert backend_pre_start.check_stripe_config(_settings()) == []


def test_check_stripe_config_flags_suspicious_values(caplog):
    cfg = _settings(
        ENVIRONMENT="production", STRIPE_SECRET_KEY="sk_test_live_oops", STRIPE_WEBHOOK_SECRET="abc"
    )
    with caplog.at_level(logging.WARNING):
        problems = backend_pre_start.check_stripe_config(cfg)
    assert len(problems) == 2
    assert any("test-mode" in p for p in problems)
    assert any("STRIPE_WEBHOOK_SECRET" in r.getMessage() for r in caplog.records)


def test_init_checks_database(engine):
    backend_pre_start.init(engine)


def test_init_gives_up_on_unreachable_database():
    broken = create_engine("sqlite:////nonexistent-dir/never/db.sqlite")
    with pytest.raises(RetryError):
        backend_pre_start.init.retry_with(stop=stop_after_attempt(1))(broken)


# ---------------------------------------------------------------------------
# StripeGateway
# ---------------------------------------------------------------------------


@pytest.fixture
def real_gateway() -> StripeGateway:
    return StripeGateway(api_key="sk_test_unit", webhook_secret=settings.STRIPE_WEBHOOK_SECRET)


def test_verify_signature(real_gateway, sign):
    payload = b'{"id": "evt_1"}'
    assert real_gateway.verify_webhook_signature(payload, sign(payload)) is True
    assert real_gateway.verify_webhook_signature(payload, sign(payload, secret="whsec_x")) is False
    assert real_gateway.verify_webhook_signature(payload, "garbage") is False
    assert real_gateway.verify_webhook_signature(b"\xff\xfe", sign(b"\xff\xfe")) is False


def test_retrieve_price(real_gateway, monkeypatch):
    seen = {}

    def _retrieve(price_id, **kwargs):
        seen.update(kwargs, price_id=price_id)
        return SimpleNamespace(unit_amount=1999)

    monkeypatch.setattr(stripe.Price, "retrieve", _retrieve)
    assert real_gateway.retrieve_price_unit_amount("price_1") == 1999
    assert seen == {"price_id": "price_1", "api_key": "sk_test_unit"}


def test_retrieve_missing_price_returns_none(real_gateway, monkeypatch):
    def _retrieve(price_id, **kwargs):
        raise stripe.InvalidRequestError("No such price: 'price_x'", "price")

    monkeypatch.setattr(stripe.Price, "retrieve", _retrieve)
    assert real_gateway.retrieve_price_unit_amount("price_x") is None


def test_retrieve_price_other_errors_propagate(real_gateway, monkeypatch):
    def _retrieve(price_id, **kwargs):
        raise stripe.APIConnectionError("Network is unreachable")

    monkeypatch.setattr(stripe.Price, "retrieve", _retrieve)
    with pytest.raises(stripe.StripeError):
        real_gateway.retrieve_price_unit_amount("price_x")


def test_create_checkout_session_uses_connected_account(real_gateway, monkeypatch):
    captured = {}

    def _create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id="cs_1", url="https://checkout.stripe.com/c/pay/cs_1")

    monkeypatch.setattr(stripe.checkout.Session, "create", _create)
    session_id, url = real_gateway.create_checkout_session(
        stripe_account="acct_1",
        title="Logo",
        unit_amount=1999,
        currency="usd",
        application_fee_amount=199,
        metadata={"offerId": "1"},
        success_url="https://example.com/ok",
        cancel_url="https://example.com/cancel",
    )
    assert (session_id, url) == ("cs_1", "https://checkout.stripe.com/c/pay/cs_1")
    assert captured["api_key"] == "sk_test_unit"
    assert captured["stripe_account"] == "acct_1"
    assert captured["mode"] == "payment"
    assert captured["payment_intent_data"] == {"application_fee_amount": 199}
    assert captured["line_items"][0]["price_data"]["unit_amount"] == 1999
    assert captured["line_items"][0]["quantity"] == 1
    # 不写入 stripe 模块的全局 key
    assert stripe.api_key != "sk_test_unit"


def test_create_price_and_accounts(real_gateway, monkeypatch):
    monkeypatch.setattr(stripe.Price, "create", lambda **kw: SimpleNamespace(id="price_new", **kw))
    monkeypatch.setattr(stripe.Account, "create", lambda **kw: SimpleNamespace(id="acct_new"))
    monkeypatch.setattr(
        stripe.Account,
        "retrieve",
        lambda account_id, **kw: SimpleNamespace(id=account_id, charges_enabled=True),
    )
    assert real_gateway.create_price(name="[Basic] Logo", unit_amount=500, currency="usd") == "price_new"
    assert real_gateway.create_express_account() == "acct_new"
    assert real_gateway.account_charges_enabled("acct_new") is True


# ---------------------------------------------------------------------------
# WebhookLogger
# ---------------------------------------------------------------------------


def test_webhook_logger_persists(db, engine):
    WebhookLogger(engine).log(WebhookStage.received, {"payload_length": 10})
    db.expire_all()
    row = db.exec(select(WebhookLog)).one()
    assert row.stage == "received"
    assert row.data == {"payload_length": 10}
    assert row.timestamp is not None


def test_webhook_logger_swallows_storage_errors(caplog):
    # 没有建表的库：写入必然失败
    empty = create_engine("sqlite://")
    with caplog.at_level(logging.ERROR):
        WebhookLogger(empty).log(WebhookStage.failed, {"reason": "x"})
    assert any("Failed to persist webhook log" in r.getMessage() for r in caplog.records)
