"""Tests for subscription overview, quotas and manual payments"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.audit import SystemLog


@pytest.mark.asyncio
async def test_subscription_overview(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/subscription")

    assert response.status_code == 200
    data = response.json()
    assert data["subscription"]["plan"] == "starter"
    assert data["subscription"]["status"] == "trial"
    assert data["payments"] == []
    assert data["days_remaining"] in (10, 11)


@pytest.mark.asyncio
async def test_features_summary(authenticated_client: AsyncClient, test_restaurant, test_tables):
    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/subscription/features")

    assert response.status_code == 200
    data = response.json()
    assert data["plan"] == "starter"
    assert data["features"]["stock_management"] is False
    assert data["quotas"]["tables"]["used"] == 2
    assert data["quotas"]["tables"]["limit"] == 10
    assert data["quotas"]["users"]["used"] == 1


@pytest.mark.asyncio
async def test_business_features(authenticated_client: AsyncClient, business_subscription, test_restaurant):
    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/subscription/features")

    assert response.json()["plan"] == "business"
    assert response.json()["features"]["stock_management"] is True


@pytest.mark.asyncio
async def test_quota_status(authenticated_client: AsyncClient, test_restaurant, test_products):
    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/subscription/quotas/max_products"
    )

    assert response.status_code == 200
    assert response.json() == {
        "used": 3,
        "limit": 50,
        "percentage": 6.0,
        "is_near_limit": False,
        "is_at_limit": False,
    }


@pytest.mark.asyncio
async def test_unknown_quota(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.get(
        f"/restaurants/{test_restaurant.id}/subscription/quotas/max_rockets"
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Quota inconnu"


@pytest.mark.asyncio
async def test_create_manual_payment(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "business", "billing_cycle": 3, "user_count": 5},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["amount"] == 67500
    assert data["status"] == "pending"
    assert data["method"] == "manual"


@pytest.mark.asyncio
async def test_manual_payment_invalid_cycle(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "business", "billing_cycle": 2},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Durée d'abonnement invalide", "message": "2"}


@pytest.mark.asyncio
async def test_manual_payment_too_many_users(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "starter", "user_count": 4},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Nombre d'utilisateurs invalide"


@pytest.mark.asyncio
async def test_cashier_cannot_pay(client: AsyncClient, cashier_headers, test_restaurant, test_subscription):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "business"},
        headers=cashier_headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_superadmin_validates_payment(
    client: AsyncClient, test_db, owner_headers, admin_headers, test_restaurant
):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "premium", "billing_cycle": 12},
        headers=owner_headers,
    )
    payment_id = response.json()["id"]

    response = await client.get("/superadmin/payments", params={"status": "pending"}, headers=admin_headers)
    assert [p["id"] for p in response.json()] == [payment_id]

    response = await client.post(f"/superadmin/payments/{payment_id}/validate", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    response = await client.get(f"/restaurants/{test_restaurant.id}/subscription", headers=owner_headers)
    data = response.json()
    assert data["subscription"]["plan"] == "premium"
    assert data["subscription"]["status"] == "active"
    assert data["days_remaining"] >= 365

    logs = await test_db.execute(select(SystemLog).where(SystemLog.action == "subscription_activated"))
    assert logs.scalar_one().data_json["plan"] == "premium"

    response = await client.post(f"/superadmin/payments/{payment_id}/validate", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Ce paiement a déjà été traité"


@pytest.mark.asyncio
async def test_superadmin_rejects_payment(client: AsyncClient, owner_headers, admin_headers, test_restaurant):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "business"},
        headers=owner_headers,
    )
    payment_id = response.json()["id"]

    response = await client.post(
        f"/superadmin/payments/{payment_id}/reject",
        json={"reason": "Preuve illisible"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "failed"
    assert response.json()["error_message"] == "Preuve illisible"

    response = await client.get(f"/restaurants/{test_restaurant.id}/subscription", headers=owner_headers)
    assert response.json()["subscription"]["plan"] == "starter"


@pytest.mark.asyncio
async def test_member_cannot_validate_payments(client: AsyncClient, owner_headers):
    response = await client.get("/superadmin/payments", headers=owner_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_manual_payment_proof_must_be_a_link(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.post(
        f"/restaurants/{test_restaurant.id}/subscription/payments",
        json={"plan": "business", "proof_url": "recu.pdf"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "URL de preuve invalide", "message": "recu.pdf"}
