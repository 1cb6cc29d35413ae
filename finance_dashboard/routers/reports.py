import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends

from finance_dashboard.core.security import CurrentUser, get_current_user
from finance_dashboard.db.base import TransactionStore
from finance_dashboard.db.stores import get_transaction_store
from finance_dashboard.models.transaction import TransactionPublic
from finance_dashboard.utils.reports import ReportingEngine

router = APIRouter()
logger = logging.getLogger(__name__)


def get_reporting_engine(store: TransactionStore = Depends(get_transaction_store)) -> ReportingEngine:
    return ReportingEngine(store)


# Query values are taken as raw strings; ReportingEngine parses them leniently.


@router.get("/monthly")
def get_monthly_report(
    year: Optional[str] = None,
    month: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> List[Dict]:
    logger.info(f"Generating monthly report for user_id: {user.user_id}, year: {year}, month: {month}")
    report = []
    for group in engine.monthly_report(user.user_id, year, month):
        data = group.to_dict()
        data["transactions"] = [TransactionPublic(**txn).model_dump(by_alias=True) for txn in group.transactions]
        report.append(data)
    return report


@router.get("/yearly")
def get_yearly_report(
    year: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> List[Dict]:
    return [summary.to_dict() for summary in engine.yearly_report(user.user_id, year)]


@router.get("/trends")
def get_category_trends(
    months: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> List[Dict]:
    return [trend.to_dict() for trend in engine.category_trends(user.user_id, months)]


@router.get("/income-expense")
def get_income_expense_analysis(
    months: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> List[Dict]:
    return [summary.to_dict() for summary in engine.income_expense_analysis(user.user_id, months)]
