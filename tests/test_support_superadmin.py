"""Tests for support tickets and the platform back-office"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.models.order import Order
from app.models.tenant import Restaurant


async def open_ticket(client: AsyncClient, headers: dict, restaurant_id, **fields) -> dict:
    payload = {
        "restaurant_id": str(restaurant_id),
        "subject": "Imprimante cuisine",
        "description": "Les tickets ne sortent plus",
    }
    payload.update(fields)
    response = await client.post("/support/tickets", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_open_ticket_and_converse(client: AsyncClient, owner_headers, admin_headers, test_restaurant):
    ticket = await open_ticket(client, owner_headers, test_restaurant.id)
    assert ticket["status"] == "open"
    assert ticket["priority"] == "medium"

    response = await client.post(
        f"/support/tickets/{ticket['id']}/messages",
        json={"message": "Avez-vous redémarré l'imprimante ?"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["is_admin"] is True

    response = await client.post(
        f"/support/tickets/{ticket['id']}/messages",
        json={"message": "Oui, sans effet"},
        headers=owner_headers,
    )
    assert response.json()["is_admin"] is False

    response = await client.get(f"/support/tickets/{ticket['id']}", headers=owner_headers)
    assert response.status_code == 200
    assert len(response.json()["messages"]) == 2


@pytest.mark.asyncio
async def test_cannot_open_ticket_for_other_restaurant(client: AsyncClient, test_db, owner_headers):
    other = Restaurant(id=uuid4(), name="Maquis Voisin", slug="maquis-voisin")
    test_db.add(other)
    await test_db.commit()

    response = await client.post(
        "/support/tickets",
        json={"restaurant_id": str(other.id), "subject": "Aide", "description": "..."},
        headers=owner_headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_invalid_priority_rejected(client: AsyncClient, owner_headers, test_restaurant):
    response = await client.post(
        "/support/tickets",
        json={
            "restaurant_id": str(test_restaurant.id),
            "subject": "Aide",
            "description": "...",
            "priority": "critique",
        },
        headers=owner_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_superadmin_sees_urgent_tickets_first(
    client: AsyncClient, owner_headers, admin_headers, test_restaurant
):
    await open_ticket(client, owner_headers, test_restaurant.id, subject="Question facture", priority="low")
    await open_ticket(client, owner_headers, test_restaurant.id, subject="Site en panne", priority="urgent")

    response = await client.get("/support/tickets", headers=admin_headers)

    assert [t["subject"] for t in response.json()] == ["Site en panne", "Question facture"]


@pytest.mark.asyncio
async def test_ticket_status_and_stats(client: AsyncClient, owner_headers, admin_headers, test_restaurant):
    ticket = await open_ticket(client, owner_headers, test_restaurant.id)
    await open_ticket(client, owner_headers, test_restaurant.id, subject="Autre souci")

    response = await client.patch(
        f"/support/tickets/{ticket['id']}/status",
        json={"status": "resolved"},
        headers=owner_headers,
    )
    assert response.status_code == 403

    response = await client.patch(
        f"/support/tickets/{ticket['id']}/status",
        json={"status": "resolved"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["resolved_at"] is not None

    response = await client.get("/support/stats", headers=admin_headers)
    assert response.json() == {"total": 2, "open": 1, "in_progress": 0, "resolved": 1}

    response = await client.get("/support/tickets", params={"status": "open"}, headers=owner_headers)
    assert [t["subject"] for t in response.json()] == ["Autre souci"]


@pytest.mark.asyncio
async def test_unknown_ticket(client: AsyncClient, owner_headers):
    response = await client.get(f"/support/tickets/{uuid4()}", headers=owner_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Ticket introuvable"


@pytest.mark.asyncio
async def test_platform_stats(
    admin_client: AsyncClient, test_db, test_user, test_restaurant, test_tables
):
    test_db.add_all([
        Order(
            restaurant_id=test_restaurant.id,
            order_number="#001",
            source="qr_table",
            status="delivered",
            total_amount=7000,
        ),
        Order(
            restaurant_id=test_restaurant.id,
            order_number="#002",
            source="qr_table",
            status="cancelled",
            total_amount=3000,
        ),
    ])
    await test_db.commit()

    response = await admin_client.get("/superadmin/stats")

    assert response.status_code == 200
    assert response.json() == {
        "total_restaurants": 1,
        "active_restaurants": 1,
        "total_users": 1,
        "total_orders": 2,
        "total_revenue": 7000,
        "orders_today": 2,
    }


@pytest.mark.asyncio
async def test_superadmin_lists_and_suspends_restaurants(
    admin_client: AsyncClient, test_db, test_user, test_restaurant
):
    test_db.add(Restaurant(id=uuid4(), name="Maquis Voisin", slug="maquis-voisin"))
    await test_db.commit()

    response = await admin_client.get("/superadmin/restaurants", params={"search": "chez"})
    data = response.json()
    assert data["total"] == 1
    assert data["restaurants"][0]["members_count"] == 1
    assert data["restaurants"][0]["subscription"]["plan"] == "starter"

    response = await admin_client.post(f"/superadmin/restaurants/{test_restaurant.id}/toggle-status")
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await admin_client.get("/superadmin/logs", params={"action": "restaurant_suspended"})
    logs = response.json()
    assert len(logs) == 1
    assert logs[0]["level"] == "warning"
    assert logs[0]["restaurant_id"] == str(test_restaurant.id)

    response = await admin_client.get("/superadmin/restaurants", params={"is_active": False})
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_superadmin_unknown_restaurant(admin_client: AsyncClient):
    response = await admin_client.get(f"/superadmin/restaurants/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Restaurant introuvable"
