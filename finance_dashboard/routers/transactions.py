import logging
import math
from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from finance_dashboard.core.errors import NotFoundError
from finance_dashboard.core.security import CurrentUser, get_current_user
from finance_dashboard.db.base import TransactionQuery, TransactionStore, sort_by_date_desc
from finance_dashboard.db.stores import get_transaction_store
from finance_dashboard.models.transaction import (
    TransactionCategory,
    TransactionCreate,
    TransactionInDB,
    TransactionPublic,
    TransactionStatus,
    TransactionUpdate,
    merge_update,
)
from finance_dashboard.utils.dates import to_naive_utc

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[TransactionCategory] = None,
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
) -> Dict:
    query = TransactionQuery(
        category=category.value if category else None,
        status=status_filter.value if status_filter else None,
    )
    # Date filtering only applies when both bounds are given
    if start_date and end_date:
        query.start = to_naive_utc(start_date)
        query.end = to_naive_utc(end_date)

    transactions = sort_by_date_desc(store.find_by_user(user.user_id, query))
    total = len(transactions)
    skip = (page - 1) * limit
    page_items = transactions[skip: skip + limit]

    return {
        "transactions": [TransactionPublic(**txn).model_dump(by_alias=True) for txn in page_items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.get("/{transaction_id}", response_model=TransactionPublic)
def get_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
):
    transaction = store.get(user.user_id, transaction_id)
    if not transaction:
        raise NotFoundError("Transaction not found")
    return TransactionPublic(**transaction)


@router.post("/", response_model=TransactionPublic, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
):
    transaction = TransactionInDB.from_create(payload, user_id=user.user_id, user_profile=user.profile)
    saved = store.put(transaction.to_record())
    logger.info(f"Created transaction {transaction.id} for user {user.user_id}")
    return TransactionPublic(**saved)


@router.put("/{transaction_id}", response_model=TransactionPublic)
def update_transaction(
    transaction_id: str,
    payload: TransactionUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
):
    existing = store.get(user.user_id, transaction_id)
    if not existing:
        raise NotFoundError("Transaction not found")

    updated = store.update(user.user_id, transaction_id, merge_update(existing, payload))
    if not updated:
        raise NotFoundError("Transaction not found")
    return TransactionPublic(**updated)


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
) -> Dict:
    if not store.delete(user.user_id, transaction_id):
        raise NotFoundError("Transaction not found")
    logger.info(f"Deleted transaction {transaction_id} for user {user.user_id}")
    return {"message": "Transaction deleted successfully"}
