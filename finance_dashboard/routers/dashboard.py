from typing import Dict

from fastapi import APIRouter, Depends

from finance_dashboard.core.config import settings
from finance_dashboard.core.security import CurrentUser, get_current_user
from finance_dashboard.db.base import TransactionStore
from finance_dashboard.db.stores import get_transaction_store
from finance_dashboard.models.transaction import TransactionPublic
from finance_dashboard.utils.metrics import MetricsEngine

router = APIRouter()


@router.get("/metrics")
def get_dashboard_metrics(
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
) -> Dict:
    engine = MetricsEngine(store, recent_limit=settings.RECENT_TRANSACTIONS_LIMIT)
    metrics = engine.compute_dashboard_metrics(user.user_id)
    metrics.recent_transactions = [
        TransactionPublic(**txn).model_dump(by_alias=True) for txn in metrics.recent_transactions
    ]
    return metrics.to_dict()
