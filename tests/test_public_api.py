"""Tests for the customer-facing menu, ordering and tracking endpoints"""

from datetime import datetime, timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient

from app.models.order import Order
from app.subscription.plans import PLANS, SubscriptionPlan


@pytest.mark.asyncio
async def test_public_plans(client: AsyncClient):
    response = await client.get("/public/plans")

    assert response.status_code == 200
    plans = response.json()["plans"]
    assert [plan["plan"] for plan in plans] == ["starter", "business", "premium"]
    assert plans[0]["monthly_price"] == 3000


@pytest.mark.asyncio
async def test_public_menu(client: AsyncClient, test_restaurant, test_subscription, test_products):
    response = await client.get("/public/restaurants/chez-test/menu")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Chez Test"
    assert data["currency"] == "XAF"
    assert len(data["categories"]) == 1
    assert [p["name"] for p in data["categories"][0]["products"]] == ["Jus de bissap", "Poulet DG"]
    assert [p["name"] for p in data["uncategorized"]] == ["Café"]


@pytest.mark.asyncio
async def test_public_menu_hides_unavailable_products(
    client: AsyncClient, test_db, test_restaurant, test_subscription, test_products
):
    test_products[0].is_available = False
    await test_db.commit()

    response = await client.get("/public/restaurants/chez-test/menu")

    names = [p["name"] for p in response.json()["categories"][0]["products"]]
    assert "Poulet DG" not in names


@pytest.mark.asyncio
async def test_public_menu_of_suspended_restaurant(client: AsyncClient, test_db, test_restaurant):
    test_restaurant.is_active = False
    await test_db.commit()

    response = await client.get("/public/restaurants/chez-test/menu")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_qr_table_order(client: AsyncClient, test_restaurant, test_subscription, test_products, test_tables):
    response = await client.post(
        "/public/restaurants/chez-test/tables/1/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 2}]},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["order_number"] == "#001"
    assert data["status"] == "pending"
    assert data["total_amount"] == 10000
    assert data["can_cancel"] is True


@pytest.mark.asyncio
async def test_qr_order_unknown_table(client: AsyncClient, test_restaurant, test_subscription, test_products):
    response = await client.post(
        "/public/restaurants/chez-test/tables/42/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Table introuvable"


@pytest.mark.asyncio
async def test_daily_order_quota(
    client: AsyncClient, monkeypatch, test_restaurant, test_subscription, test_products, test_tables
):
    monkeypatch.setitem(PLANS[SubscriptionPlan.STARTER]["limits"], "max_orders_per_day", 1)
    payload = {"items": [{"product_id": str(test_products[0].id), "quantity": 1}]}

    first = await client.post("/public/restaurants/chez-test/tables/1/orders", json=payload)
    second = await client.post("/public/restaurants/chez-test/tables/1/orders", json=payload)

    assert first.status_code == 201
    assert second.status_code == 403
    assert second.json() == {"error": "Limite atteinte : 1/1", "message": "max_orders_per_day"}


@pytest.mark.asyncio
async def test_public_delivery_order_requires_address(
    client: AsyncClient, test_restaurant, test_subscription, test_products
):
    response = await client.post(
        "/public/restaurants/chez-test/orders",
        json={
            "items": [{"product_id": str(test_products[0].id), "quantity": 1}],
            "fulfillment_type": "delivery",
            "customer_name": "Jean",
            "customer_phone": "+24106000000",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Adresse de livraison requise"


@pytest.mark.asyncio
async def test_public_takeaway_order_and_tracking(
    client: AsyncClient, test_restaurant, test_subscription, test_products
):
    response = await client.post(
        "/public/restaurants/chez-test/orders",
        json={
            "items": [{"product_id": str(test_products[1].id), "quantity": 2}],
            "fulfillment_type": "takeaway",
            "customer_name": "Jean",
            "customer_phone": "+24106000000",
        },
    )
    assert response.status_code == 201
    order_id = response.json()["id"]

    response = await client.get(f"/public/orders/{order_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["total_amount"] == 2000
    assert data["items"][0]["product_name"] == "Jus de bissap"


@pytest.mark.asyncio
async def test_customer_cancel_within_window(
    client: AsyncClient, test_restaurant, test_subscription, test_products, test_tables
):
    response = await client.post(
        "/public/restaurants/chez-test/tables/1/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 1}]},
    )
    order_id = response.json()["id"]

    response = await client.post(f"/public/orders/{order_id}/cancel")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["can_cancel"] is False


@pytest.mark.asyncio
async def test_customer_cancel_after_window(
    client: AsyncClient, test_db, test_restaurant, test_subscription, test_products, test_tables
):
    response = await client.post(
        "/public/restaurants/chez-test/tables/1/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 1}]},
    )
    order_id = response.json()["id"]

    order = await test_db.get(Order, UUID(order_id))
    order.created_at = datetime.utcnow() - timedelta(minutes=5)
    await test_db.commit()

    response = await client.post(f"/public/orders/{order_id}/cancel")

    assert response.status_code == 400
    assert response.json()["detail"] == "Délai d'annulation dépassé"


@pytest.mark.asyncio
async def test_customer_cannot_cancel_order_in_preparation(
    client: AsyncClient, test_db, test_restaurant, test_subscription, test_products, test_tables
):
    response = await client.post(
        "/public/restaurants/chez-test/tables/1/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 1}]},
    )
    order_id = response.json()["id"]

    order = await test_db.get(Order, UUID(order_id))
    order.status = "preparing"
    await test_db.commit()

    response = await client.post(f"/public/orders/{order_id}/cancel")

    assert response.status_code == 400
    assert response.json()["detail"] == "Cette commande ne peut plus être annulée"


@pytest.mark.asyncio
async def test_payment_breakdown(client: AsyncClient, test_restaurant, test_subscription, test_products, test_tables):
    response = await client.post(
        "/public/restaurants/chez-test/tables/1/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 2}]},
    )
    order_id = response.json()["id"]

    response = await client.get(f"/public/orders/{order_id}/payment-breakdown", params={"operator": "airtel"})

    assert response.status_code == 200
    assert response.json() == {
        "operator": "airtel",
        "subtotal": 10000,
        "commission": 500,
        "transaction_fee": 210,
        "total": 10710,
    }
