"""
Store capabilities injected into the engines and routers.

Transactions are plain dicts keyed by their wire names (``id``, ``date``,
``amount``, ``category``, ``status``, ``user_id``, ``user_profile``,
``categoryId``, ``fromTo``, ``created_at``, ``updated_at``) with ``date`` and
the audit timestamps as naive UTC datetimes.
"""
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional


@dataclass
class TransactionQuery:
    """Conjunctive filter over a single user's transactions."""

    category: Optional[str] = None
    status: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    search: Optional[str] = None

    def matches(self, txn: Dict[str, Any]) -> bool:
        if self.category is not None and txn.get("category") != self.category:
            return False
        if self.status is not None and txn.get("status") != self.status:
            return False
        if self.start is not None and txn["date"] < self.start:
            return False
        if self.end is not None and txn["date"] > self.end:
            return False
        if self.search:
            needle = self.search.lower()
            haystacks = (str(txn.get("category") or ""), str(txn.get("status") or ""))
            if not any(needle in value.lower() for value in haystacks):
                return False
        return True


@dataclass
class AggregateGroup:
    key: Hashable
    total: float = 0.0
    count: int = 0
    transactions: List[Dict[str, Any]] = field(default_factory=list)


def sort_by_date_desc(transactions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Newest first; equal dates keep insertion order."""
    by_insertion = sorted(transactions, key=lambda txn: txn.get("created_at") or datetime.min)
    return sorted(by_insertion, key=lambda txn: txn["date"], reverse=True)


class TransactionStore(ABC):
    @abstractmethod
    def find_by_user(self, user_id: str, query: Optional[TransactionQuery] = None) -> List[Dict[str, Any]]:
        """Matching transactions in insertion order."""

    @abstractmethod
    def get(self, user_id: str, transaction_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def put(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update(self, user_id: str, transaction_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def delete(self, user_id: str, transaction_id: str) -> bool:
        ...

    @abstractmethod
    def ping(self) -> None:
        """Raise StoreUnavailableError when the backend cannot be reached."""

    def count_by_user(self, user_id: str, query: Optional[TransactionQuery] = None) -> int:
        return len(self.find_by_user(user_id, query))

    def aggregate_by_user(
        self,
        user_id: str,
        group_by: Callable[[Dict[str, Any]], Hashable],
        query: Optional[TransactionQuery] = None,
    ) -> List[AggregateGroup]:
        """
        Group a user's matching transactions by ``group_by(txn)`` and sum
        their amounts. Groups come back in first-seen order; keys with no
        transactions never appear.
        """
        groups: "OrderedDict[Hashable, AggregateGroup]" = OrderedDict()
        for txn in self.find_by_user(user_id, query):
            key = group_by(txn)
            group = groups.get(key)
            if group is None:
                group = groups[key] = AggregateGroup(key=key)
            group.total += float(txn.get("amount", 0))
            group.count += 1
            group.transactions.append(txn)
        for group in groups.values():
            group.total = round(group.total, 2)
        return list(groups.values())


class CategoryStore(ABC):
    @abstractmethod
    def find_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def get(self, user_id: str, category_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def put(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update(self, user_id: str, category_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def delete(self, user_id: str, category_id: str) -> bool:
        ...

    def find_by_name(self, user_id: str, name: str, category_type: str) -> Optional[Dict[str, Any]]:
        for category in self.find_by_user(user_id):
            if category["name"] == name and category["type"] == category_type:
                return category
        return None
