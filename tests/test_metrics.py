from datetime import datetime

from finance_dashboard.utils.metrics import MetricsEngine

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def test_dashboard_metrics_scenario(store, seeded):
    metrics = MetricsEngine(store).compute_dashboard_metrics(USER_ID)

    assert metrics.total_revenue == 800
    assert metrics.total_expenses == -120
    assert metrics.net_income == 920
    assert metrics.pending_transactions == 1
    assert [t["date"] for t in metrics.recent_transactions] == [
        datetime(2024, 2, 1),
        datetime(2024, 1, 20),
        datetime(2024, 1, 15),
    ]


def test_net_income_is_revenue_minus_expenses(store, add_transaction):
    add_transaction("Revenue", 1000.5, "2024-03-01")
    add_transaction("Expense", 250.25, "2024-03-02")
    add_transaction("Expense", 49.75, "2024-03-03")

    metrics = MetricsEngine(store).compute_dashboard_metrics(USER_ID)

    assert metrics.total_expenses == -300
    assert metrics.net_income == metrics.total_revenue - metrics.total_expenses == 1300.5


def test_metrics_without_transactions_are_zero(store):
    metrics = MetricsEngine(store).compute_dashboard_metrics(USER_ID)

    assert metrics.to_dict() == {
        "totalRevenue": 0.0,
        "totalExpenses": 0.0,
        "netIncome": 0.0,
        "pendingTransactions": 0,
        "recentTransactions": [],
    }


def test_metrics_with_only_one_kind(store, add_transaction):
    add_transaction("Expense", 80, "2024-03-01", status="Pending")

    metrics = MetricsEngine(store).compute_dashboard_metrics(USER_ID)

    assert metrics.total_revenue == 0.0
    assert metrics.total_expenses == -80
    assert metrics.net_income == 80


def test_recent_transactions_limit_and_tie_order(store, add_transaction):
    first = add_transaction("Expense", 1, "2024-05-01")
    second = add_transaction("Expense", 2, "2024-05-01")
    for day in range(2, 7):
        add_transaction("Revenue", day, f"2024-04-0{day}")

    recent = MetricsEngine(store).compute_dashboard_metrics(USER_ID).recent_transactions

    assert len(recent) == 5
    assert [t["id"] for t in recent[:2]] == [first["id"], second["id"]]
    assert recent[2]["date"] == datetime(2024, 4, 6)


def test_metrics_are_scoped_to_user(store, seeded, add_transaction):
    add_transaction("Revenue", 9999, "2024-01-10", user_id=OTHER_USER_ID)

    metrics = MetricsEngine(store).compute_dashboard_metrics(USER_ID)

    assert metrics.total_revenue == 800
    assert all(t["user_id"] == USER_ID for t in metrics.recent_transactions)
