"""
Health Check Router
Liveness and store connectivity endpoints
"""
import logging

from fastapi import APIRouter, Depends

from finance_dashboard.core.config import settings
from finance_dashboard.core.errors import StoreUnavailableError
from finance_dashboard.db.base import TransactionStore
from finance_dashboard.db.stores import get_transaction_store
from finance_dashboard.utils.dates import utcnow

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/status")
def store_status(store: TransactionStore = Depends(get_transaction_store)):
    """
    Check connectivity of the transaction store.
    """
    store_info = {
        "backend": settings.STORE_BACKEND,
        "connected": False,
        "error": None,
    }
    try:
        store.ping()
        store_info["connected"] = True
    except StoreUnavailableError as e:
        store_info["error"] = e.message
        logger.error(f"Store check failed: {e.message}")

    return {
        "timestamp": utcnow().isoformat(),
        "services": {"store": store_info},
        "overall_status": "healthy" if store_info["connected"] else "degraded",
    }
