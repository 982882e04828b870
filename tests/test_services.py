"""Tests for fee, stock, subscription date and email helpers"""

import re
from datetime import datetime
from types import SimpleNamespace
from uuid import uuid4

import httpx
import pytest

from app.config import settings
from app.errors import ValidationError
from app.services.email import send_email
from app.services.fees import calculate_commission, calculate_transaction_fee, payment_breakdown
from app.services.orders import counter_order_number
from app.services.stock import find_stock_shortages, validate_alert_threshold
from app.services.subscriptions import add_months, days_remaining


def test_commission_rounds_up():
    assert calculate_commission(10000) == 500
    assert calculate_commission(9999) == 500
    assert calculate_commission(1) == 1


def test_transaction_fee_per_operator():
    assert calculate_transaction_fee(10500, "airtel") == 210
    assert calculate_transaction_fee(10500, "moov") == 210
    assert calculate_transaction_fee(10500, "card") == 315


def test_transaction_fee_unknown_operator():
    with pytest.raises(ValidationError):
        calculate_transaction_fee(1000, "paypal")


def test_payment_breakdown():
    breakdown = payment_breakdown(10000, "airtel")
    assert breakdown == {
        "operator": "airtel",
        "subtotal": 10000,
        "commission": 500,
        "transaction_fee": 210,
        "total": 10710,
    }


def test_validate_alert_threshold():
    validate_alert_threshold(0)
    validate_alert_threshold(1000)
    with pytest.raises(ValidationError):
        validate_alert_threshold(-1)
    with pytest.raises(ValidationError):
        validate_alert_threshold(1001)


def test_find_stock_shortages_sums_repeated_lines():
    product_id = uuid4()
    product = SimpleNamespace(name="Poulet DG", has_stock=True, stock=SimpleNamespace(quantity=3))
    items = [
        SimpleNamespace(product_id=product_id, quantity=2),
        SimpleNamespace(product_id=product_id, quantity=2),
    ]

    assert find_stock_shortages(items, {product_id: product}) == ["Stock insuffisant pour Poulet DG"]


def test_find_stock_shortages_ignores_untracked_products():
    product_id = uuid4()
    product = SimpleNamespace(name="Café", has_stock=False, stock=None)
    items = [SimpleNamespace(product_id=product_id, quantity=50)]

    assert find_stock_shortages(items, {product_id: product}) == []


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2024, 11, 15), 3) == datetime(2025, 2, 15)
    assert add_months(datetime(2024, 5, 10), 12) == datetime(2025, 5, 10)


def test_days_remaining_rounds_up_and_floors_at_zero():
    now = datetime(2024, 6, 1, 12, 0)
    trial = SimpleNamespace(period_end=datetime(2024, 6, 3, 13, 0))
    expired = SimpleNamespace(period_end=datetime(2024, 5, 30))

    assert days_remaining(trial, now) == 3
    assert days_remaining(expired, now) == 0
    assert days_remaining(None, now) == 0


def test_counter_order_number_format():
    number = counter_order_number(datetime(2024, 6, 1, 14, 5, 9))
    assert re.match(r"^POS-140509-\d{3}$", number)


@pytest.mark.asyncio
async def test_send_email_skipped_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "")

    result = await send_email("owner@example.com", "Sujet", "Corps")

    assert result == {"id": None, "status": "skipped"}


@pytest.mark.asyncio
async def test_send_email_posts_to_resend(monkeypatch):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = request.content.decode()
        return httpx.Response(200, json={"id": "email_123"})

    real_client = httpx.AsyncClient
    monkeypatch.setattr(settings, "resend_api_key", "re_test")
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )

    result = await send_email(["a@example.com", "b@example.com"], "Alerte stock", "Bonjour")

    assert result == {"id": "email_123", "status": "sent"}
    assert captured["auth"] == "Bearer re_test"
    assert "Alerte stock" in captured["body"]
