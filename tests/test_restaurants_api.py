"""Tests for restaurants, members, tables, categories and products"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from uuid import UUID, uuid4

from app.models.audit import SystemLog
from app.models.order import Order
from app.models.stock import Stock
from app.models.subscription import Subscription
from app.models.user import User
from app.api.auth import get_password_hash
from app.subscription.plans import PLANS, SubscriptionPlan


@pytest.mark.asyncio
async def test_create_restaurant_starts_trial(authenticated_client: AsyncClient, test_db, test_user):
    response = await authenticated_client.post(
        "/restaurants",
        json={"name": "Le Gourmet Gabonais", "city": "Port-Gentil"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "le-gourmet-gabonais"
    assert data["currency"] == "XAF"

    result = await test_db.execute(
        select(Subscription).where(Subscription.restaurant_id == UUID(data["id"]))
    )
    subscription = result.scalar_one()
    assert subscription.plan == "starter"
    assert subscription.status == "trial"
    assert (subscription.trial_ends_at - subscription.trial_starts_at).days == 14

    logs = await test_db.execute(select(SystemLog).where(SystemLog.action == "restaurant_created"))
    assert logs.scalar_one().actor_id == test_user.id


@pytest.mark.asyncio
async def test_restaurant_slug_is_unique(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post("/restaurants", json={"name": "Chez Test"})

    assert response.status_code == 201
    assert response.json()["slug"] == "chez-test-2"


@pytest.mark.asyncio
async def test_only_admin_updates_restaurant(client: AsyncClient, cashier_headers, owner_headers, test_restaurant):
    url = f"/restaurants/{test_restaurant.id}"

    response = await client.put(url, json={"primary_color": "#000000"}, headers=cashier_headers)
    assert response.status_code == 403

    response = await client.put(url, json={"primary_color": "#000000"}, headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["primary_color"] == "#000000"


@pytest.mark.asyncio
async def test_add_member(authenticated_client: AsyncClient, test_db, test_restaurant):
    test_db.add(User(
        id=uuid4(),
        email="serveur@example.com",
        hashed_password=get_password_hash("serveurpass"),
        full_name="Serveur",
    ))
    await test_db.commit()

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/members",
        json={"email": "serveur@example.com", "role": "kitchen"},
    )

    assert response.status_code == 201
    assert response.json()["role"] == "kitchen"

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/members",
        json={"email": "serveur@example.com"},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_add_member_unknown_email(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/members",
        json={"email": "inconnu@example.com"},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Aucun compte avec cet email"


@pytest.mark.asyncio
async def test_member_quota(authenticated_client: AsyncClient, monkeypatch, test_restaurant):
    monkeypatch.setitem(PLANS[SubscriptionPlan.STARTER]["limits"], "max_users", 1)

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/members",
        json={"email": "inconnu@example.com"},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Limite atteinte : 1/1"


@pytest.mark.asyncio
async def test_last_admin_cannot_be_demoted(authenticated_client: AsyncClient, test_restaurant, test_user):
    response = await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/members/{test_user.id}",
        json={"role": "manager"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Le restaurant doit garder au moins un administrateur"


@pytest.mark.asyncio
async def test_remove_member(client: AsyncClient, owner_headers, test_restaurant, test_cashier):
    response = await client.delete(
        f"/restaurants/{test_restaurant.id}/members/{test_cashier.id}",
        headers=owner_headers,
    )
    assert response.status_code == 204

    response = await client.get(f"/restaurants/{test_restaurant.id}/members", headers=owner_headers)
    assert [member["email"] for member in response.json()] == ["owner@example.com"]


@pytest.mark.asyncio
async def test_create_table_and_qr_url(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"number": 7, "label": "Jardin", "capacity": 6},
    )
    assert response.status_code == 201
    table_id = response.json()["id"]

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"number": 7},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "La table 7 existe déjà"

    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/tables/{table_id}/qr-url")
    assert response.status_code == 200
    assert response.json()["url"].endswith("/r/chez-test/t/7")


@pytest.mark.asyncio
async def test_table_quota(authenticated_client: AsyncClient, monkeypatch, test_restaurant, test_tables):
    monkeypatch.setitem(PLANS[SubscriptionPlan.STARTER]["limits"], "max_tables", 2)

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"number": 3},
    )

    assert response.status_code == 403
    assert response.json() == {"error": "Limite atteinte : 2/2", "message": "max_tables"}


@pytest.mark.asyncio
async def test_delete_table_with_active_order(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_tables
):
    test_db.add(Order(
        restaurant_id=test_restaurant.id,
        table_id=test_tables[0].id,
        order_number="#001",
        source="qr_table",
        status="preparing",
        total_amount=5000,
    ))
    await test_db.commit()

    response = await authenticated_client.delete(f"/restaurants/{test_restaurant.id}/tables/{test_tables[0].id}")

    assert response.status_code == 400
    assert response.json()["detail"] == "Cette table a des commandes en cours"


@pytest.mark.asyncio
async def test_delete_category_with_products_refused(authenticated_client: AsyncClient, test_restaurant, test_category, test_products):
    response = await authenticated_client.delete(
        f"/restaurants/{test_restaurant.id}/categories/{test_category.id}"
    )

    assert response.status_code == 400
    assert "2 produit(s)" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_category(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/categories",
        json={"name": "Desserts", "display_order": 3},
    )

    assert response.status_code == 201
    assert response.json()["name"] == "Desserts"

    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/categories")
    assert [c["name"] for c in response.json()] == ["Desserts"]


@pytest.mark.asyncio
async def test_create_product_creates_empty_stock(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_category
):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/products",
        json={"name": "Ndolé", "price": 3500, "category_id": str(test_category.id)},
    )

    assert response.status_code == 201
    product_id = response.json()["id"]

    result = await test_db.execute(select(Stock).where(Stock.product_id == UUID(product_id)))
    stock = result.scalar_one()
    assert stock.quantity == 0
    assert stock.alert_threshold == 5


@pytest.mark.asyncio
async def test_create_product_negative_price(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/products",
        json={"name": "Erreur", "price": -100},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Le prix ne peut pas être négatif"


@pytest.mark.asyncio
async def test_toggle_product_availability(authenticated_client: AsyncClient, test_restaurant, test_products):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/products/{test_products[2].id}/toggle-availability"
    )

    assert response.status_code == 200
    assert response.json()["is_available"] is False


@pytest.mark.asyncio
async def test_delete_ordered_product_is_withdrawn(
    authenticated_client: AsyncClient, test_restaurant, test_products
):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/orders",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 1}]},
    )
    assert response.status_code == 201

    response = await authenticated_client.delete(
        f"/restaurants/{test_restaurant.id}/products/{test_products[0].id}"
    )
    assert response.status_code == 204

    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/products/{test_products[0].id}")
    assert response.status_code == 200
    assert response.json()["is_available"] is False
