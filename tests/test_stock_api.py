"""Tests for operational stock and warehouse endpoints"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_stock_requires_plan_feature(authenticated_client: AsyncClient, test_restaurant, test_products):
    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/stocks")

    assert response.status_code == 403
    assert response.json() == {
        "error": "Fonctionnalité non disponible dans votre offre",
        "message": "stock_management",
    }


@pytest.mark.asyncio
async def test_list_low_stocks(
    authenticated_client: AsyncClient, business_subscription, test_restaurant, test_products
):
    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/stocks")

    assert response.status_code == 200
    assert [s["product_name"] for s in response.json()] == ["Jus de bissap", "Poulet DG"]

    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/stocks", params={"low_only": True}
    )
    data = response.json()
    assert len(data) == 1
    assert data[0]["product_name"] == "Jus de bissap"
    assert data[0]["is_low"] is True


@pytest.mark.asyncio
async def test_adjust_stock_and_history(
    authenticated_client: AsyncClient, business_subscription, test_restaurant, test_products
):
    product_id = test_products[0].id
    url = f"/restaurants/{test_restaurant.id}/stocks/{product_id}"

    response = await authenticated_client.post(f"{url}/adjust", json={"type": "manual_in", "quantity": 5})
    assert response.status_code == 200
    assert response.json()["quantity"] == 15

    response = await authenticated_client.post(
        f"{url}/adjust",
        json={"type": "adjustment", "quantity": 0, "reason": "Inventaire"},
    )
    assert response.status_code == 200
    assert response.json()["quantity"] == 0
    assert response.json()["is_available"] is False

    response = await authenticated_client.get(f"{url}/history")
    assert response.status_code == 200
    movements = response.json()
    assert len(movements) == 2
    assert {m["type"] for m in movements} == {"manual_in", "adjustment"}
    assert sum(m["quantity"] for m in movements) == -10


@pytest.mark.asyncio
async def test_manual_out_cannot_exceed_stock(
    authenticated_client: AsyncClient, business_subscription, test_restaurant, test_products
):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/stocks/{test_products[1].id}/adjust",
        json={"type": "manual_out", "quantity": 4},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Stock insuffisant pour cette sortie"


@pytest.mark.asyncio
async def test_cashier_cannot_adjust_stock(
    client: AsyncClient, cashier_headers, business_subscription, test_restaurant, test_products
):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/stocks/{test_products[0].id}/adjust",
        json={"type": "manual_in", "quantity": 5},
        headers=cashier_headers,
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Permissions insuffisantes"


@pytest.mark.asyncio
async def test_alert_threshold_bounds(
    authenticated_client: AsyncClient, business_subscription, test_restaurant, test_products
):
    url = f"/restaurants/{test_restaurant.id}/stocks/{test_products[0].id}/alert-threshold"

    response = await authenticated_client.put(url, json={"alert_threshold": 1001})
    assert response.status_code == 400

    response = await authenticated_client.put(url, json={"alert_threshold": 12})
    assert response.status_code == 200
    assert response.json()["alert_threshold"] == 12
    assert response.json()["is_low"] is True


@pytest.mark.asyncio
async def test_warehouse_transfer_converts_units(
    authenticated_client: AsyncClient, business_subscription, test_restaurant, test_products
):
    base = f"/restaurants/{test_restaurant.id}/warehouse"
    response = await authenticated_client.post(
        f"{base}/products",
        json={
            "name": "Casier de bissap",
            "storage_unit": "casier",
            "conversion_ratio": 12,
            "initial_quantity": 2,
            "unit_cost": 6000,
            "linked_product_id": str(test_products[1].id),
        },
    )
    assert response.status_code == 201
    warehouse_product_id = response.json()["id"]

    response = await authenticated_client.post(
        f"{base}/transfers",
        json={"warehouse_product_id": warehouse_product_id, "quantity": 1},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["operational_quantity"] == 12
    assert data["new_stock_quantity"] == 15
    assert data["warehouse_product"]["quantity"] == 1

    response = await authenticated_client.get(f"{base}/stats")
    assert response.json() == {"total_products": 1, "low_stock_count": 1, "total_value": 6000}


@pytest.mark.asyncio
async def test_warehouse_transfer_insufficient_quantity(
    authenticated_client: AsyncClient, business_subscription, test_restaurant, test_products
):
    base = f"/restaurants/{test_restaurant.id}/warehouse"
    response = await authenticated_client.post(
        f"{base}/products",
        json={"name": "Sac de riz", "initial_quantity": 1, "linked_product_id": str(test_products[0].id)},
    )
    warehouse_product_id = response.json()["id"]

    response = await authenticated_client.post(
        f"{base}/transfers",
        json={"warehouse_product_id": warehouse_product_id, "quantity": 3},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Quantité insuffisante en entrepôt"


@pytest.mark.asyncio
async def test_warehouse_entry(
    authenticated_client: AsyncClient, business_subscription, test_restaurant
):
    base = f"/restaurants/{test_restaurant.id}/warehouse"
    response = await authenticated_client.post(f"{base}/products", json={"name": "Huile de palme"})
    warehouse_product_id = response.json()["id"]

    response = await authenticated_client.post(
        f"{base}/products/{warehouse_product_id}/entries",
        json={"quantity": 20, "unit_cost": 1500, "supplier_name": "Marché Mont-Bouët"},
    )

    assert response.status_code == 201
    assert response.json()["movement_type"] == "entry"
    assert response.json()["new_qty"] == 20

    response = await authenticated_client.get(f"{base}/products")
    assert response.json()[0]["quantity"] == 20
    assert response.json()[0]["unit_cost"] == 1500
