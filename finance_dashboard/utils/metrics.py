from dataclasses import dataclass, field
from typing import Any, Dict, List

from finance_dashboard.db.base import TransactionQuery, TransactionStore, sort_by_date_desc
from finance_dashboard.models.transaction import TransactionCategory, TransactionStatus

RECENT_TRANSACTIONS_LIMIT = 5


@dataclass
class DashboardMetrics:
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    net_income: float = 0.0
    pending_transactions: int = 0
    recent_transactions: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRevenue": self.total_revenue,
            "totalExpenses": self.total_expenses,
            "netIncome": self.net_income,
            "pendingTransactions": self.pending_transactions,
            "recentTransactions": self.recent_transactions,
        }


class MetricsEngine:
    """Dashboard snapshot for a single user."""

    def __init__(self, store: TransactionStore, recent_limit: int = RECENT_TRANSACTIONS_LIMIT) -> None:
        self._store = store
        self._recent_limit = recent_limit

    def compute_dashboard_metrics(self, user_id: str) -> DashboardMetrics:
        totals = {
            group.key: group.total
            for group in self._store.aggregate_by_user(user_id, lambda txn: txn["category"])
        }
        total_revenue = totals.get(TransactionCategory.REVENUE.value, 0.0)
        # Expense amounts are stored negative, so this is <= 0
        total_expenses = totals.get(TransactionCategory.EXPENSE.value, 0.0)

        pending = self._store.count_by_user(
            user_id, TransactionQuery(status=TransactionStatus.PENDING.value)
        )
        recent = sort_by_date_desc(self._store.find_by_user(user_id))[: self._recent_limit]

        return DashboardMetrics(
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_income=round(total_revenue - total_expenses, 2),
            pending_transactions=pending,
            recent_transactions=recent,
        )
