import logging
from typing import Any, Dict, List

from finance_dashboard.db.base import CategoryStore, TransactionStore
from finance_dashboard.models.category import CategoryInDB

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Salary", "type": "Revenue", "color": "#4CAF50"},
    {"name": "Investments", "type": "Revenue", "color": "#2196F3"},
    {"name": "Rent", "type": "Expense", "color": "#f44336"},
    {"name": "Utilities", "type": "Expense", "color": "#FF9800"},
    {"name": "Groceries", "type": "Expense", "color": "#9C27B0"},
]


def seed_default_categories(store: CategoryStore, user_id: str) -> List[Dict[str, Any]]:
    """Create the default categories a user does not have yet. Idempotent."""
    created = []
    for default in DEFAULT_CATEGORIES:
        if store.find_by_name(user_id, default["name"], default["type"]):
            continue
        record = CategoryInDB(user_id=user_id, **default).to_record()
        created.append(store.put(record))
    if created:
        logger.info(f"Seeded {len(created)} default categories for user {user_id}")
    return created


def delete_category(
    category_store: CategoryStore,
    transaction_store: TransactionStore,
    user_id: str,
    category_id: str,
) -> bool:
    """
    Delete a category and clear ``categoryId`` on the user's transactions
    that referenced it. The transactions themselves are kept.
    """
    if not category_store.delete(user_id, category_id):
        return False

    detached = 0
    for txn in transaction_store.find_by_user(user_id):
        if txn.get("categoryId") == category_id:
            transaction_store.update(user_id, txn["id"], {"categoryId": None})
            detached += 1
    if detached:
        logger.info(f"Cleared category {category_id} from {detached} transactions for user {user_id}")
    return True
