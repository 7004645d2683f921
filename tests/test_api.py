"""HTTP surface under /api/v1."""
import uuid


async def _create_seller(client, name="Acme Traders"):
    response = await client.post("/api/v1/sellers", json={"name": name, "email": "acme@example.com"})
    assert response.status_code == 201
    return response.json()["id"]


async def _record(client, seller_id, order_id, amount, confirmed=True):
    response = await client.post(
        "/api/v1/commissions",
        json={"seller_id": seller_id, "order_id": order_id, "amount": amount, "confirmed": confirmed},
    )
    assert response.status_code == 201
    return response.json()


async def test_register_and_get_seller(client):
    seller_id = await _create_seller(client)

    response = await client.get(f"/api/v1/sellers/{seller_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Acme Traders"
    assert data["is_active"] is True
    assert float(data["available_commission"]) == 0


async def test_unknown_seller_is_404(client):
    response = await client.get(f"/api/v1/sellers/{uuid.uuid4()}/balance")

    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "NotFound"
    assert "seller_id" in body["details"]


async def test_withdrawal_flow(client):
    seller_id = await _create_seller(client)
    await _record(client, seller_id, "ORD-1", "1000.00")

    response = await client.post(f"/api/v1/sellers/{seller_id}/withdrawals", json={"amount": "1000"})
    assert response.status_code == 201
    request_id = response.json()["id"]
    assert response.json()["status"] == "PENDING"

    response = await client.post(f"/api/v1/sellers/{seller_id}/withdrawals", json={"amount": "1"})
    assert response.status_code == 409
    assert response.json()["type"] == "InsufficientBalance"

    response = await client.post(
        f"/api/v1/withdrawals/{request_id}/resolve",
        json={"outcome": "rejected", "note": "KYC pending"},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"

    response = await client.post(
        f"/api/v1/withdrawals/{request_id}/resolve", json={"outcome": "COMPLETED"}
    )
    assert response.status_code == 409
    assert response.json()["type"] == "InvalidTransition"

    response = await client.get(f"/api/v1/sellers/{seller_id}/balance")
    balance = response.json()
    assert float(balance["available_balance"]) == 1000
    assert float(balance["cached_balance"]) == 1000
    assert balance["floor_engaged"] is False

    response = await client.get(f"/api/v1/sellers/{seller_id}/withdrawals")
    assert response.json()["total"] == 1


async def test_invalid_amount_is_400(client):
    seller_id = await _create_seller(client)

    response = await client.post(
        "/api/v1/commissions",
        json={"seller_id": seller_id, "order_id": "ORD-1", "amount": "-5"},
    )

    assert response.status_code == 400
    assert response.json()["type"] == "InvalidAmount"


async def test_confirm_revenue_and_conflict(client):
    seller_id = await _create_seller(client)
    await _record(client, seller_id, "COD-1", "400", confirmed=False)

    response = await client.post("/api/v1/orders/COD-1/confirm-revenue", json={"confirmed_amount": "380"})
    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"
    assert float(response.json()["amount"]) == 380

    response = await client.post("/api/v1/orders/COD-1/confirm-revenue", json={"confirmed_amount": "380"})
    assert response.status_code == 409
    assert response.json()["type"] == "AlreadyConfirmed"


async def test_void_and_reversal(client):
    seller_id = await _create_seller(client)
    await _record(client, seller_id, "ORD-1", "100")
    await _record(client, seller_id, "ORD-2", "300")

    response = await client.post("/api/v1/orders/ORD-1/void-commission", json={"reason": "cancelled"})
    assert response.status_code == 200
    assert response.json()["items"][0]["status"] == "VOIDED"

    response = await client.post(
        "/api/v1/commissions/reversals",
        json={"seller_id": seller_id, "order_id": "ORD-2", "amount": "50"},
    )
    assert response.status_code == 201
    assert response.json()["type"] == "REVERSED"

    response = await client.get(f"/api/v1/sellers/{seller_id}/commissions/summary")
    summary = response.json()
    assert float(summary["voided_amount"]) == 100
    assert float(summary["reversed_amount"]) == 50
    assert float(summary["available_balance"]) == 250

    response = await client.get(f"/api/v1/sellers/{seller_id}/commissions", params={"status": "VOIDED"})
    assert response.json()["total"] == 1


async def test_reconciliation_endpoints(client):
    seller_id = await _create_seller(client)
    await _record(client, seller_id, "ORD-1", "10")

    response = await client.post("/api/v1/reconciliation", json={"seller_id": seller_id})
    assert response.status_code == 200
    assert response.json()["checked"] == 1
    assert response.json()["corrected"] == 0

    response = await client.post("/api/v1/reconciliation")
    assert response.status_code == 200
    assert response.json()["errors"] == []

    response = await client.get("/api/v1/reconciliation/jobs")
    assert response.status_code == 200
    assert "jobs" in response.json()


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "connected"
