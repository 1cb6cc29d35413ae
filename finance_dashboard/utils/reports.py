from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from finance_dashboard.db.base import TransactionQuery, TransactionStore
from finance_dashboard.models.transaction import TransactionCategory
from finance_dashboard.utils.dates import month_bounds, parse_int, trailing_window, utcnow, year_bounds

DEFAULT_TREND_MONTHS = 6
DEFAULT_ANALYSIS_MONTHS = 12


@dataclass
class CategoryGroup:
    """One category's slice of a monthly report."""

    category: str
    total: float
    count: int
    transactions: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "total": self.total,
            "count": self.count,
            "transactions": self.transactions,
        }


@dataclass
class CategoryTotal:
    category: str
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "total": self.total}


@dataclass
class MonthSummary:
    month: int
    categories: List[CategoryTotal] = field(default_factory=list)
    total_amount: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "categories": [c.to_dict() for c in self.categories],
            "totalAmount": self.total_amount,
        }


@dataclass
class CategoryTrend:
    year: int
    month: int
    category: str
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "month": self.month, "category": self.category, "total": self.total}


@dataclass
class IncomeExpenseSummary:
    year: int
    month: int
    income: float = 0.0
    expenses: float = 0.0

    @property
    def net_income(self) -> float:
        # expenses are negative, so this adds their magnitude
        return round(self.income - self.expenses, 2)

    @property
    def savings_rate(self) -> Optional[float]:
        """Percentage of income kept; undefined (None) without income."""
        if self.income == 0:
            return None
        return round((self.income - self.expenses) / self.income * 100, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "income": self.income,
            "expenses": self.expenses,
            "netIncome": self.net_income,
            "savingsRate": self.savings_rate,
        }


def _positive_or_default(value: Any, default: int) -> int:
    parsed = parse_int(value)
    if not parsed or parsed < 0:
        return default
    return parsed


class ReportingEngine:
    """
    Time-windowed aggregations over one user's transactions.

    Query inputs are parsed leniently: an unparseable year/month for the
    monthly report selects no window (empty result), while the other
    reports fall back to their defaults.
    """

    def __init__(self, store: TransactionStore, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    def monthly_report(self, user_id: str, year: Any, month: Any) -> List[CategoryGroup]:
        year_value, month_value = parse_int(year), parse_int(month)
        if year_value is None or month_value is None:
            return []
        bounds = month_bounds(year_value, month_value)
        if bounds is None:
            return []

        start, end = bounds
        groups = self._store.aggregate_by_user(
            user_id, lambda txn: txn["category"], TransactionQuery(start=start, end=end)
        )
        return [
            CategoryGroup(category=g.key, total=g.total, count=g.count, transactions=g.transactions)
            for g in groups
        ]

    def yearly_report(self, user_id: str, year: Any = None) -> List[MonthSummary]:
        year_value = parse_int(year) or self._clock().year
        bounds = year_bounds(year_value)
        if bounds is None:
            return []

        start, end = bounds
        groups = self._store.aggregate_by_user(
            user_id,
            lambda txn: (txn["date"].month, txn["category"]),
            TransactionQuery(start=start, end=end),
        )

        months: Dict[int, MonthSummary] = {}
        for group in groups:
            month, category = group.key
            summary = months.setdefault(month, MonthSummary(month=month))
            summary.categories.append(CategoryTotal(category=category, total=group.total))
            summary.total_amount += group.total

        for summary in months.values():
            summary.total_amount = round(summary.total_amount, 2)
        return [months[m] for m in sorted(months)]

    def category_trends(self, user_id: str, months: Any = None) -> List[CategoryTrend]:
        window = _positive_or_default(months, DEFAULT_TREND_MONTHS)
        start, end = trailing_window(window, self._clock())

        groups = self._store.aggregate_by_user(
            user_id,
            lambda txn: (txn["date"].year, txn["date"].month, txn["category"]),
            TransactionQuery(start=start, end=end),
        )
        trends = [
            CategoryTrend(year=g.key[0], month=g.key[1], category=g.key[2], total=g.total)
            for g in groups
        ]
        return sorted(trends, key=lambda t: (t.year, t.month))

    def income_expense_analysis(self, user_id: str, months: Any = None) -> List[IncomeExpenseSummary]:
        window = _positive_or_default(months, DEFAULT_ANALYSIS_MONTHS)
        start, end = trailing_window(window, self._clock())

        groups = self._store.aggregate_by_user(
            user_id,
            lambda txn: (txn["date"].year, txn["date"].month, txn["category"]),
            TransactionQuery(start=start, end=end),
        )

        periods: "OrderedDict[tuple, IncomeExpenseSummary]" = OrderedDict()
        for group in groups:
            year, month, category = group.key
            summary = periods.setdefault((year, month), IncomeExpenseSummary(year=year, month=month))
            if category == TransactionCategory.REVENUE.value:
                summary.income = round(summary.income + group.total, 2)
            elif category == TransactionCategory.EXPENSE.value:
                summary.expenses = round(summary.expenses + group.total, 2)

        return [periods[key] for key in sorted(periods)]
