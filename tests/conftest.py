from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from finance_dashboard.core.security import create_access_token
from finance_dashboard.db.memory import InMemoryCategoryStore, InMemoryTransactionStore
from finance_dashboard.db.stores import get_category_store, get_transaction_store
from finance_dashboard.main import app
from finance_dashboard.models.transaction import TransactionCreate, TransactionInDB

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def store():
    return InMemoryTransactionStore()


@pytest.fixture
def category_store():
    return InMemoryCategoryStore()


@pytest.fixture
def add_transaction(store):
    """Insert a normalized transaction, the way the create endpoint does."""

    def _add(category, amount, date, status="Paid", user_id=USER_ID, **extra):
        payload = TransactionCreate(
            category=category,
            amount=amount,
            date=datetime.fromisoformat(date) if isinstance(date, str) else date,
            status=status,
            **extra,
        )
        record = TransactionInDB.from_create(payload, user_id=user_id, user_profile="avatar.png").to_record()
        return store.put(record)

    return _add


@pytest.fixture
def seeded(add_transaction):
    return [
        add_transaction("Revenue", 500, "2024-01-15"),
        add_transaction("Expense", 120, "2024-01-20", status="Pending"),
        add_transaction("Revenue", 300, "2024-02-01"),
    ]


@pytest.fixture
def client(store, category_store):
    app.dependency_overrides[get_transaction_store] = lambda: store
    app.dependency_overrides[get_category_store] = lambda: category_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": USER_ID, "profile": "avatar.png"})
    return {"Authorization": f"Bearer {token}"}
