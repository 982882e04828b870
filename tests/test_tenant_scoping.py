"""Tests for restaurant scoping and isolation"""

import pytest
from httpx import AsyncClient
from uuid import uuid4

from app.models.tenant import Restaurant
from app.models.menu import Product
from app.models.stock import Stock


async def create_other_restaurant(db):
    other = Restaurant(id=uuid4(), name="Maquis Voisin", slug="maquis-voisin")
    db.add(other)
    await db.flush()

    product = Product(restaurant_id=other.id, name="Brochettes", price=2000)
    db.add(product)
    await db.flush()
    db.add(Stock(restaurant_id=other.id, product_id=product.id, quantity=20))
    await db.commit()

    return other, product


@pytest.mark.asyncio
async def test_member_cannot_read_other_restaurant(test_db, authenticated_client: AsyncClient):
    other, _ = await create_other_restaurant(test_db)

    response = await authenticated_client.get(f"/restaurants/{other.id}/products")

    assert response.status_code == 403
    assert response.json()["detail"] == "Accès refusé à ce restaurant"


@pytest.mark.asyncio
async def test_products_are_listed_per_restaurant(test_db, test_restaurant, test_products, authenticated_client: AsyncClient):
    await create_other_restaurant(test_db)

    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/products")

    assert response.status_code == 200
    names = {product["name"] for product in response.json()}
    assert "Brochettes" not in names
    assert names == {"Poulet DG", "Jus de bissap", "Café"}


@pytest.mark.asyncio
async def test_cannot_order_other_restaurant_product(test_db, test_restaurant, authenticated_client: AsyncClient):
    _, foreign_product = await create_other_restaurant(test_db)

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/orders",
        json={"items": [{"product_id": str(foreign_product.id), "quantity": 1}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Produit introuvable"


@pytest.mark.asyncio
async def test_my_restaurants_lists_memberships_only(test_db, test_restaurant, authenticated_client: AsyncClient):
    await create_other_restaurant(test_db)

    response = await authenticated_client.get("/restaurants")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["restaurant"]["slug"] == "chez-test"
    assert data[0]["role"] == "admin"


@pytest.mark.asyncio
async def test_cashier_cannot_manage_menu(client: AsyncClient, cashier_headers, test_restaurant, test_subscription):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/products",
        json={"name": "Ndolé", "price": 3500},
        headers=cashier_headers,
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Permissions insuffisantes"


@pytest.mark.asyncio
async def test_unauthenticated_request_rejected(client: AsyncClient, test_restaurant):
    response = await client.get(f"/restaurants/{test_restaurant.id}/orders")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_super_admin_can_access_all_restaurants(test_db, admin_client: AsyncClient):
    other, _ = await create_other_restaurant(test_db)

    response = await admin_client.get(f"/restaurants/{other.id}")

    assert response.status_code == 200
    assert response.json()["name"] == "Maquis Voisin"


@pytest.mark.asyncio
async def test_superadmin_email_list_grants_access(test_db, monkeypatch, test_user, owner_headers, client: AsyncClient):
    other, _ = await create_other_restaurant(test_db)
    monkeypatch.setattr("app.config.settings.superadmin_emails", "owner@example.com")

    response = await client.get(f"/restaurants/{other.id}", headers=owner_headers)

    assert response.status_code == 200
