"""HTTP surface: status codes, error bodies and camelCase JSON."""
from conftest import auth


def post_entry(client, user_id, customer_id, entry_type="BAKI", amount=100, **extra):
    body = {"customerId": customer_id, "entryType": entry_type, "amount": amount, **extra}
    return client.post("/api/ledger", json=body, headers=auth(user_id))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_requires_token(client, seed):
    response = client.get("/api/ledger")
    assert response.status_code == 401
    assert response.json()["errorCode"] == "UNAUTHORIZED"

    response = client.get("/api/ledger", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_create_entry_returns_201_camel_case(client, seed, customer):
    response = post_entry(client, seed.owner, customer.id, amount=120.5, notes="rice")
    assert response.status_code == 201
    body = response.json()
    assert body["entryType"] == "BAKI"
    assert body["amount"] == 120.5
    assert body["balanceAfter"] == 120.5
    assert body["referenceEntryId"] is None
    assert body["createdByUser"]["id"] == seed.owner
    assert body["customer"]["name"] == customer.name


def test_reverse_and_summary(client, seed, customer):
    post_entry(client, seed.owner, customer.id, "BAKI", 500)
    paid = post_entry(client, seed.owner, customer.id, "PAID", 200).json()

    response = client.post(f"/api/ledger/{paid['id']}/reverse", json={}, headers=auth(seed.staff))
    assert response.status_code == 201
    assert response.json()["referenceEntryId"] == paid["id"]
    assert response.json()["balanceAfter"] == 500.0

    again = client.post(f"/api/ledger/{paid['id']}/reverse", headers=auth(seed.staff))
    assert again.status_code == 400
    assert again.json()["errorCode"] == "INVALID_REVERSAL"

    summary = client.get(f"/api/ledger/shop/{seed.shop_id}/summary", headers=auth(seed.viewer)).json()
    assert summary == {"totalDebit": 500.0, "totalCredit": 0.0, "netBalance": 500.0, "totalEntries": 1}

    # shopId 0 spans every shop the caller belongs to; unknown entry types are ignored
    everywhere = client.get("/api/ledger/shop/0/summary?entryType=bogus", headers=auth(seed.viewer)).json()
    assert everywhere == summary


def test_error_body_shape(client, seed, customer):
    response = post_entry(client, seed.viewer, customer.id)
    assert response.status_code == 400
    body = response.json()
    assert body["errorCode"] == "FORBIDDEN"
    assert body["message"] == "Only OWNER or STAFF can create ledger entries"
    assert body["status"] == 400
    assert body["path"] == "/api/ledger"
    assert "timestamp" in body


def test_validation_errors(client, seed, customer):
    for bad in ({"amount": 0}, {"amount": -10}, {"entryType": "REVERSAL"}, {"entryType": "LOAN"}):
        body = {"customerId": customer.id, "entryType": "BAKI", "amount": 10, **bad}
        response = client.post("/api/ledger", json=body, headers=auth(seed.owner))
        assert response.status_code == 400
        assert response.json()["errorCode"] == "VALIDATION_ERROR"


def test_unknown_customer_and_entry(client, seed):
    assert post_entry(client, seed.owner, 777).json()["errorCode"] == "CUSTOMER_NOT_FOUND"
    assert client.get("/api/ledger/777", headers=auth(seed.owner)).json()["errorCode"] == "LEDGER_NOT_FOUND"


def test_paginated_ledger(client, seed, customer):
    for amount in (10, 20, 30):
        post_entry(client, seed.owner, customer.id, amount=amount)

    response = client.get(
        f"/api/ledger/shop/{seed.shop_id}/paginated?page=0&size=2&startDate=not-a-date",
        headers=auth(seed.owner),
    )
    assert response.status_code == 200
    page = response.json()
    assert page["totalElements"] == 3
    assert page["totalPages"] == 2
    assert len(page["content"]) == 2


def test_customer_lifecycle(client, seed):
    response = client.post(
        "/api/customers",
        json={"shopId": seed.shop_id, "name": "Meena", "phone": "9876543210", "openingBalance": 300},
        headers=auth(seed.owner),
    )
    assert response.status_code == 201
    created = response.json()
    assert created["currentBalance"] == 300.0

    entries = client.get(f"/api/ledger/customer/{created['id']}", headers=auth(seed.viewer)).json()
    assert [e["notes"] for e in entries] == ["Opening balance for new customer"]

    duplicate = client.post(
        "/api/customers",
        json={"shopId": seed.shop_id, "name": "Meena Two", "phone": "9876543210"},
        headers=auth(seed.owner),
    )
    assert duplicate.json()["errorCode"] == "PHONE_ALREADY_EXISTS"

    bad_phone = client.post(
        "/api/customers",
        json={"shopId": seed.shop_id, "name": "Meena", "phone": "12345"},
        headers=auth(seed.owner),
    )
    assert bad_phone.status_code == 400

    summary = client.get(f"/api/customers/shop/{seed.shop_id}/summary", headers=auth(seed.owner)).json()
    assert summary["totalCustomers"] == 1
    assert summary["totalCurrentBalance"] == 300.0


def test_shop_membership_endpoints(client, seed):
    added = client.post(
        f"/api/shops/{seed.shop_id}/users",
        json={"userPhone": "9000000006", "role": "STAFF"},
        headers=auth(seed.owner),
    )
    assert added.status_code == 201
    assert added.json()["userName"] == "Newcomer"

    shop_user_id = added.json()["id"]
    response = client.delete(f"/api/shops/{seed.shop_id}/users/{shop_user_id}", headers=auth(seed.owner))
    assert response.status_code == 204

    users = client.get(f"/api/shops/{seed.shop_id}/users", headers=auth(seed.owner)).json()
    assert seed.newcomer not in {u["userId"] for u in users}


def test_dashboard_and_audit_endpoints(client, seed, customer):
    post_entry(client, seed.owner, customer.id, amount=80)

    metrics = client.get("/api/dashboard/metrics", headers=auth(seed.owner)).json()
    assert metrics["totalDebit"] == 80.0
    assert metrics["entryTypeDistribution"]["bakiCount"] == 1

    logs = client.get(f"/api/audit-logs/shop/{seed.shop_id}/paginated", headers=auth(seed.owner)).json()
    assert logs["totalElements"] == 2
    assert {row["action"] for row in logs["content"]} == {"LEDGER_ENTRY_CREATED", "LEDGER_BALANCE_ADJUSTED"}

    actions = client.get(f"/api/audit-logs/shop/{seed.shop_id}/actions", headers=auth(seed.viewer)).json()
    assert actions == ["LEDGER_BALANCE_ADJUSTED", "LEDGER_ENTRY_CREATED"]

    denied = client.get(f"/api/audit-logs/shop/{seed.shop_id}/actions", headers=auth(seed.outsider))
    assert denied.json()["errorCode"] == "FORBIDDEN"
