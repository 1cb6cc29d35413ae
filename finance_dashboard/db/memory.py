"""
In-memory stores, used for local development (STORE_BACKEND=memory) and tests.
"""
import copy
import threading
from collections import defaultdict
from typing import Any, Dict, List, Optional

from finance_dashboard.db.base import CategoryStore, TransactionQuery, TransactionStore


class _InMemoryCollection:
    def __init__(self):
        self._lock = threading.Lock()
        self._items: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

    def all(self, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(item) for item in self._items.get(user_id, [])]

    def get(self, user_id: str, item_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            for item in self._items.get(user_id, []):
                if item["id"] == item_id:
                    return copy.deepcopy(item)
        return None

    def put(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            items = self._items[record["user_id"]]
            items[:] = [item for item in items if item["id"] != record["id"]]
            items.append(copy.deepcopy(record))
        return copy.deepcopy(record)

    def update(self, user_id: str, item_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            for item in self._items.get(user_id, []):
                if item["id"] == item_id:
                    item.update(copy.deepcopy(changes))
                    return copy.deepcopy(item)
        return None

    def delete(self, user_id: str, item_id: str) -> bool:
        with self._lock:
            items = self._items.get(user_id, [])
            for idx, item in enumerate(items):
                if item["id"] == item_id:
                    del items[idx]
                    return True
        return False


class InMemoryTransactionStore(TransactionStore):
    def __init__(self):
        self._collection = _InMemoryCollection()

    def find_by_user(self, user_id: str, query: Optional[TransactionQuery] = None) -> List[Dict[str, Any]]:
        query = query or TransactionQuery()
        return [txn for txn in self._collection.all(user_id) if query.matches(txn)]

    def get(self, user_id, transaction_id):
        return self._collection.get(user_id, transaction_id)

    def put(self, record):
        return self._collection.put(record)

    def update(self, user_id, transaction_id, changes):
        return self._collection.update(user_id, transaction_id, changes)

    def delete(self, user_id, transaction_id):
        return self._collection.delete(user_id, transaction_id)

    def ping(self) -> None:
        return None


class InMemoryCategoryStore(CategoryStore):
    def __init__(self):
        self._collection = _InMemoryCollection()

    def find_by_user(self, user_id):
        return self._collection.all(user_id)

    def get(self, user_id, category_id):
        return self._collection.get(user_id, category_id)

    def put(self, record):
        return self._collection.put(record)

    def update(self, user_id, category_id, changes):
        return self._collection.update(user_id, category_id, changes)

    def delete(self, user_id, category_id):
        return self._collection.delete(user_id, category_id)
