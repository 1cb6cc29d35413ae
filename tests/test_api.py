from finance_dashboard.core.errors import StoreUnavailableError
from finance_dashboard.db.memory import InMemoryTransactionStore
from finance_dashboard.db.stores import get_transaction_store
from finance_dashboard.main import app


class UnreachableStore(InMemoryTransactionStore):
    def find_by_user(self, user_id, query=None):
        raise StoreUnavailableError("Database error during query")


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert client.get("/api/status").json()["overall_status"] == "healthy"


def test_requests_without_token_are_rejected(client):
    response = client.get("/api/dashboard/metrics")

    assert response.status_code == 401
    assert response.json()["kind"] == "unauthenticated"


def test_invalid_token_is_rejected(client):
    response = client.get("/api/reports/yearly", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token", "kind": "unauthenticated"}


def test_create_transaction_normalizes_amount(client, auth_headers):
    response = client.post(
        "/api/transactions/",
        json={"date": "2024-01-20", "amount": 120, "category": "Expense", "status": "Paid"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["amount"] == -120
    assert body["user_id"] == "user-1"
    assert body["user_profile"] == "avatar.png"


def test_create_transaction_validation_details(client, auth_headers):
    response = client.post(
        "/api/transactions/",
        json={"amount": 0, "category": "Gift", "status": "Paid"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "validation"
    assert any(detail.startswith("amount") for detail in body["details"])
    assert any(detail.startswith("category") for detail in body["details"])


def test_non_finite_amounts_are_rejected(client, auth_headers, store):
    overflow = client.post(
        "/api/transactions/",
        content='{"date": "2024-01-20", "amount": 1e400, "category": "Expense", "status": "Paid"}',
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    nan = client.post(
        "/api/transactions/",
        json={"date": "2024-01-20", "amount": "nan", "category": "Expense", "status": "Paid"},
        headers=auth_headers,
    )

    for response in (overflow, nan):
        assert response.status_code == 400
        assert response.json()["kind"] == "validation"
        assert any(detail.startswith("amount") for detail in response.json()["details"])
    assert store.find_by_user("user-1") == []
    assert client.get("/api/dashboard/metrics", headers=auth_headers).json()["totalExpenses"] == 0


def test_update_rejects_non_finite_amount(client, auth_headers, seeded, store):
    expense = seeded[1]

    response = client.put(f"/api/transactions/{expense['id']}", json={"amount": "inf"}, headers=auth_headers)

    assert response.status_code == 400
    assert store.get("user-1", expense["id"])["amount"] == -120


def test_update_transaction_renormalizes_and_keeps_owner(client, auth_headers, seeded):
    expense = seeded[1]

    response = client.put(
        f"/api/transactions/{expense['id']}",
        json={"category": "Revenue", "user_id": "intruder"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["amount"] == 120
    assert response.json()["user_id"] == "user-1"


def test_missing_transaction_is_not_found(client, auth_headers):
    response = client.get("/api/transactions/does-not-exist", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"
    assert client.delete("/api/transactions/does-not-exist", headers=auth_headers).status_code == 404


def test_list_transactions_paginates(client, auth_headers, seeded):
    response = client.get("/api/transactions/?page=2&limit=2", headers=auth_headers)

    body = response.json()
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}
    assert [t["date"] for t in body["transactions"]] == ["2024-01-15T00:00:00"]


def test_delete_transaction(client, auth_headers, seeded, store):
    response = client.delete(f"/api/transactions/{seeded[0]['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert store.get("user-1", seeded[0]["id"]) is None


def test_dashboard_metrics_endpoint(client, auth_headers, seeded):
    body = client.get("/api/dashboard/metrics", headers=auth_headers).json()

    assert body["totalRevenue"] == 800
    assert body["totalExpenses"] == -120
    assert body["netIncome"] == 920
    assert body["pendingTransactions"] == 1
    assert [t["date"][:10] for t in body["recentTransactions"]] == ["2024-02-01", "2024-01-20", "2024-01-15"]


def test_monthly_report_endpoint(client, auth_headers, seeded):
    body = client.get("/api/reports/monthly?year=2024&month=1", headers=auth_headers).json()

    assert {(g["category"], g["total"], g["count"]) for g in body} == {("Revenue", 500, 1), ("Expense", -120, 1)}
    assert client.get("/api/reports/monthly?year=abc&month=1", headers=auth_headers).json() == []


def test_yearly_report_endpoint(client, auth_headers, seeded):
    body = client.get("/api/reports/yearly?year=2024", headers=auth_headers).json()

    assert [(m["month"], m["totalAmount"]) for m in body] == [(1, 380), (2, 300)]


def test_trend_and_income_expense_endpoints_respond(client, auth_headers, seeded):
    assert client.get("/api/reports/trends?months=abc", headers=auth_headers).status_code == 200
    assert client.get("/api/reports/income-expense", headers=auth_headers).status_code == 200


def test_store_failure_is_service_unavailable(client, auth_headers):
    app.dependency_overrides[get_transaction_store] = lambda: UnreachableStore()

    response = client.get("/api/reports/income-expense?months=3", headers=auth_headers)

    assert response.status_code == 503
    assert response.json()["kind"] == "store_unavailable"


def test_export_fields_endpoint(client, auth_headers):
    body = client.get("/api/export/fields", headers=auth_headers).json()

    assert len(body["fields"]) == 7
    assert body["fields"][0] == {"key": "date", "label": "Date", "description": "Transaction date", "defaultSelected": True}


def test_export_transactions_csv(client, auth_headers, seeded):
    response = client.post(
        "/api/export/transactions",
        json={
            "selectedFields": ["amount", "date"],
            "filters": {"category": "Revenue"},
            "filename": "revenue",
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"].startswith('attachment; filename="revenue-')
    assert response.content.startswith(b"\xef\xbb\xbf")
    assert response.content.decode("utf-8-sig") == "Amount,Date\n300.00,2/1/2024\n500.00,1/15/2024\n"


def test_export_without_matches_is_not_found(client, auth_headers, seeded):
    response = client.post(
        "/api/export/transactions",
        json={"selectedFields": ["date"], "dateRange": {"start": "2020-01-01", "end": "2020-12-31"}},
        headers=auth_headers,
    )

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "No transactions found matching the specified criteria"}


def test_export_rejects_unknown_fields(client, auth_headers, seeded):
    response = client.post(
        "/api/export/transactions",
        json={"selectedFields": ["date", "password"]},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


def test_export_rejects_unknown_category_filter(client, auth_headers, seeded):
    response = client.post(
        "/api/export/transactions",
        json={"selectedFields": ["date"], "filters": {"category": "Gift"}},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert any(detail.startswith("filters") for detail in response.json()["details"])


def test_categories_are_seeded_on_first_listing(client, auth_headers):
    body = client.get("/api/categories/", headers=auth_headers).json()

    assert [(c["name"], c["type"]) for c in body] == [
        ("Salary", "Revenue"),
        ("Investments", "Revenue"),
        ("Rent", "Expense"),
        ("Utilities", "Expense"),
        ("Groceries", "Expense"),
    ]
    assert len(client.get("/api/categories/", headers=auth_headers).json()) == 5


def test_create_category_capitalizes_and_rejects_duplicates(client, auth_headers):
    payload = {"name": "  freelance ", "type": "Revenue", "color": "#abc"}

    created = client.post("/api/categories/", json=payload, headers=auth_headers)
    duplicate = client.post("/api/categories/", json=payload, headers=auth_headers)
    other_type = client.post("/api/categories/", json={**payload, "type": "Expense"}, headers=auth_headers)

    assert created.status_code == 201
    assert created.json()["name"] == "Freelance"
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "Category already exists"
    assert other_type.status_code == 201


def test_create_category_rejects_bad_color(client, auth_headers):
    response = client.post(
        "/api/categories/", json={"name": "Travel", "type": "Expense", "color": "red"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert any("Invalid hex color code" in detail for detail in response.json()["details"])


def test_update_category(client, auth_headers):
    created = client.post("/api/categories/", json={"name": "Travel", "type": "Expense"}, headers=auth_headers).json()

    response = client.put(f"/api/categories/{created['id']}", json={"color": "#112233"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["color"] == "#112233"
    assert client.put("/api/categories/missing", json={}, headers=auth_headers).status_code == 404


def test_delete_category_clears_transaction_references(client, auth_headers, add_transaction, store):
    category = client.post("/api/categories/", json={"name": "Travel", "type": "Expense"}, headers=auth_headers).json()
    linked = add_transaction("Expense", 60, "2024-02-02", categoryId=category["id"])
    unlinked = add_transaction("Expense", 15, "2024-02-03", categoryId="other")

    response = client.delete(f"/api/categories/{category['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert store.get("user-1", linked["id"])["categoryId"] is None
    assert store.get("user-1", unlinked["id"])["categoryId"] == "other"
    assert client.delete(f"/api/categories/{category['id']}", headers=auth_headers).status_code == 404
