"""
Store providers used as FastAPI dependencies. Tests replace them through
``app.dependency_overrides``.
"""
import logging
from functools import lru_cache
from typing import Tuple

import boto3

from finance_dashboard.core.config import settings
from finance_dashboard.db.base import CategoryStore, TransactionStore
from finance_dashboard.db.dynamo import DynamoCategoryStore, DynamoTransactionStore
from finance_dashboard.db.memory import InMemoryCategoryStore, InMemoryTransactionStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _build_stores() -> Tuple[TransactionStore, CategoryStore]:
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        logger.info("Using in-memory stores")
        return InMemoryTransactionStore(), InMemoryCategoryStore()
    if backend != "dynamo":
        raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")

    logger.info(
        f"Using DynamoDB tables {settings.DYNAMO_TRANSACTIONS_TABLE}, "
        f"{settings.DYNAMO_CATEGORIES_TABLE} in {settings.DYNAMO_REGION}"
    )
    dynamodb = boto3.resource(
        "dynamodb",
        region_name=settings.DYNAMO_REGION,
        endpoint_url=settings.DYNAMO_ENDPOINT_URL or None,
    )
    return (
        DynamoTransactionStore(dynamodb.Table(settings.DYNAMO_TRANSACTIONS_TABLE)),
        DynamoCategoryStore(dynamodb.Table(settings.DYNAMO_CATEGORIES_TABLE)),
    )


def get_transaction_store() -> TransactionStore:
    return _build_stores()[0]


def get_category_store() -> CategoryStore:
    return _build_stores()[1]
