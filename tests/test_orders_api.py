"""Tests for dashboard and counter order endpoints"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.stock import Stock, StockMovement


async def get_stock_quantity(db, product) -> int:
    result = await db.execute(select(Stock).where(Stock.product_id == product.id))
    return result.scalar_one().quantity


async def create_dashboard_order(client: AsyncClient, restaurant, products, quantity: int = 2):
    response = await client.post(
        f"/restaurants/{restaurant.id}/orders",
        json={
            "items": [
                {"product_id": str(products[0].id), "quantity": quantity},
                {"product_id": str(products[1].id), "quantity": 1, "notes": "Bien frais"},
            ],
            "customer_name": "Awa",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_dashboard_order(authenticated_client: AsyncClient, test_db, test_restaurant, test_products):
    """Prices come from the menu and stock is left untouched while pending"""
    data = await create_dashboard_order(authenticated_client, test_restaurant, test_products)

    assert data["order_number"] == "#001"
    assert data["source"] == "dashboard"
    assert data["status"] == "pending"
    assert data["total_amount"] == 11000
    assert data["stock_deducted"] is False
    assert {item["product_name"] for item in data["items"]} == {"Poulet DG", "Jus de bissap"}

    assert await get_stock_quantity(test_db, test_products[0]) == 10


@pytest.mark.asyncio
async def test_order_numbers_are_sequential(authenticated_client: AsyncClient, test_restaurant, test_products):
    await create_dashboard_order(authenticated_client, test_restaurant, test_products, quantity=1)
    second = await create_dashboard_order(authenticated_client, test_restaurant, test_products, quantity=1)

    assert second["order_number"] == "#002"


@pytest.mark.asyncio
async def test_strict_order_cannot_skip_steps(authenticated_client: AsyncClient, test_restaurant, test_products):
    order = await create_dashboard_order(authenticated_client, test_restaurant, test_products)

    response = await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status",
        json={"status": "ready"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Transition invalide",
        "message": 'Impossible de passer de "pending" à "ready"',
    }


@pytest.mark.asyncio
async def test_first_active_status_deducts_stock_once(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_products
):
    order = await create_dashboard_order(authenticated_client, test_restaurant, test_products)
    url = f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status"

    response = await authenticated_client.patch(url, json={"status": "preparing"})
    assert response.status_code == 200
    assert response.json()["stock_deducted"] is True
    assert await get_stock_quantity(test_db, test_products[0]) == 8
    assert await get_stock_quantity(test_db, test_products[1]) == 2

    response = await authenticated_client.patch(url, json={"status": "ready"})
    assert response.status_code == 200
    assert await get_stock_quantity(test_db, test_products[0]) == 8

    result = await test_db.execute(
        select(StockMovement).where(StockMovement.product_id == test_products[0].id)
    )
    movements = result.scalars().all()
    assert len(movements) == 1
    assert movements[0].type == "order"
    assert movements[0].quantity == -2


@pytest.mark.asyncio
async def test_deduction_keeps_withdrawn_product_off_the_menu(
    authenticated_client: AsyncClient, test_restaurant, test_products
):
    order = await create_dashboard_order(authenticated_client, test_restaurant, test_products)
    product_url = f"/restaurants/{test_restaurant.id}/products/{test_products[0].id}"

    response = await authenticated_client.post(f"{product_url}/toggle-availability")
    assert response.json()["is_available"] is False

    response = await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status",
        json={"status": "preparing"},
    )
    assert response.status_code == 200

    response = await authenticated_client.get(product_url)
    assert response.json()["is_available"] is False


@pytest.mark.asyncio
async def test_deduction_to_zero_marks_product_unavailable(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_products
):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/orders",
        json={"items": [{"product_id": str(test_products[1].id), "quantity": 3}]},
    )
    assert response.status_code == 201

    response = await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{response.json()['id']}/status",
        json={"status": "preparing"},
    )
    assert response.status_code == 200
    assert await get_stock_quantity(test_db, test_products[1]) == 0

    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/products/{test_products[1].id}"
    )
    assert response.json()["is_available"] is False
    assert test_products[0].is_available is True


@pytest.mark.asyncio
async def test_cancelling_pending_order_keeps_stock(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_products
):
    order = await create_dashboard_order(authenticated_client, test_restaurant, test_products)

    response = await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status",
        json={"status": "cancelled"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert await get_stock_quantity(test_db, test_products[0]) == 10


@pytest.mark.asyncio
async def test_terminal_order_is_final(authenticated_client: AsyncClient, test_restaurant, test_products):
    order = await create_dashboard_order(authenticated_client, test_restaurant, test_products)
    url = f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status"
    await authenticated_client.patch(url, json={"status": "cancelled"})

    response = await authenticated_client.patch(url, json={"status": "preparing"})

    assert response.status_code == 400
    assert response.json()["error"] == "Transition invalide"


@pytest.mark.asyncio
async def test_order_transitions_endpoint(authenticated_client: AsyncClient, test_restaurant, test_products):
    order = await create_dashboard_order(authenticated_client, test_restaurant, test_products)

    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/orders/{order['id']}/transitions"
    )

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "dashboard"
    assert set(data["allowed"]) == {"preparing", "cancelled"}


@pytest.mark.asyncio
async def test_order_rejects_insufficient_stock(authenticated_client: AsyncClient, test_restaurant, test_products):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/orders",
        json={"items": [{"product_id": str(test_products[1].id), "quantity": 4}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Stock insuffisant pour Jus de bissap"


@pytest.mark.asyncio
async def test_order_rejects_unavailable_product(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_products
):
    test_products[2].is_available = False
    await test_db.commit()

    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/orders",
        json={"items": [{"product_id": str(test_products[2].id), "quantity": 1}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Café n'est plus disponible"


@pytest.mark.asyncio
async def test_counter_pay_now_deducts_stock_and_skips_steps(
    client: AsyncClient, cashier_headers, test_db, test_restaurant, test_products
):
    """Counter orders are paid up front and may jump straight to delivered"""
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/orders/counter",
        json={
            "items": [{"product_id": str(test_products[0].id), "quantity": 3}],
            "mode": "pay_now",
            "payment_method": "airtel_money",
        },
        headers=cashier_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["source"] == "counter"
    assert data["order_number"].startswith("POS-")
    assert data["customer_name"] == "Client comptoir"
    assert data["stock_deducted"] is True
    assert data["payments"][0]["status"] == "paid"
    assert data["payments"][0]["method"] == "airtel_money"
    assert data["payments"][0]["amount"] == 15000
    assert await get_stock_quantity(test_db, test_products[0]) == 7

    response = await client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{data['id']}/status",
        json={"status": "delivered"},
        headers=cashier_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "delivered"
    assert await get_stock_quantity(test_db, test_products[0]) == 7


@pytest.mark.asyncio
async def test_counter_pay_now_requires_method(client: AsyncClient, cashier_headers, test_restaurant, test_products):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/orders/counter",
        json={"items": [{"product_id": str(test_products[0].id), "quantity": 1}], "mode": "pay_now"},
        headers=cashier_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Méthode de paiement requise"


@pytest.mark.asyncio
async def test_counter_pay_later_then_mark_paid(
    authenticated_client: AsyncClient, test_db, test_restaurant, test_products
):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/orders/counter",
        json={
            "items": [{"product_id": str(test_products[0].id), "quantity": 1}],
            "mode": "pay_later",
            "customer_name": "Table du fond",
        },
    )

    assert response.status_code == 201
    order = response.json()
    assert order["stock_deducted"] is False
    assert order["payments"][0]["status"] == "pending"
    assert order["payments"][0]["method"] == "cash"
    assert await get_stock_quantity(test_db, test_products[0]) == 10

    mark_paid_url = f"/restaurants/{test_restaurant.id}/orders/{order['id']}/mark-paid"
    response = await authenticated_client.post(mark_paid_url, json={"method": "moov_money"})

    assert response.status_code == 200
    payments = response.json()["payments"]
    assert len(payments) == 1
    assert payments[0]["status"] == "paid"
    assert payments[0]["method"] == "moov_money"

    response = await authenticated_client.post(mark_paid_url, json={"method": "cash"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Cette commande est déjà payée"


@pytest.mark.asyncio
async def test_list_orders_filters_by_status(authenticated_client: AsyncClient, test_restaurant, test_products):
    first = await create_dashboard_order(authenticated_client, test_restaurant, test_products, quantity=1)
    await create_dashboard_order(authenticated_client, test_restaurant, test_products, quantity=1)
    await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{first['id']}/status",
        json={"status": "cancelled"},
    )

    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/orders", params={"status": "pending"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["status"] == "pending"


@pytest.mark.asyncio
async def test_kitchen_display_lists_active_orders(authenticated_client: AsyncClient, test_restaurant, test_products):
    first = await create_dashboard_order(authenticated_client, test_restaurant, test_products, quantity=1)
    second = await create_dashboard_order(authenticated_client, test_restaurant, test_products, quantity=1)
    await authenticated_client.patch(
        f"/restaurants/{test_restaurant.id}/orders/{second['id']}/status",
        json={"status": "cancelled"},
    )

    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/orders/active")

    assert response.status_code == 200
    assert [order["id"] for order in response.json()] == [first["id"]]


@pytest.mark.asyncio
async def test_get_unknown_order(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/orders/00000000-0000-0000-0000-000000000000"
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Commande introuvable ou accès refusé"
