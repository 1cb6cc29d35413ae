import logging
from typing import Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response

from finance_dashboard.core.security import CurrentUser, get_current_user
from finance_dashboard.db.base import TransactionStore
from finance_dashboard.db.stores import get_transaction_store
from finance_dashboard.models.export import ExportRequest
from finance_dashboard.utils.csv_export import ExportProjector, export_filename, exportable_fields, render_csv

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/fields")
def get_exportable_fields(user: CurrentUser = Depends(get_current_user)) -> Dict:
    return {"fields": exportable_fields()}


@router.post("/transactions")
def export_transactions(
    export_request: ExportRequest,
    user: CurrentUser = Depends(get_current_user),
    store: TransactionStore = Depends(get_transaction_store),
):
    result = ExportProjector(store).build_export_rows(
        user.user_id,
        export_request.selected_fields,
        filters=export_request.filters,
        date_range=export_request.date_range,
    )

    if result.is_empty:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "success": False,
                "message": "No transactions found matching the specified criteria",
            },
        )

    filename = export_filename(export_request.filename)
    logger.info(f"Sending {len(result.rows)} rows as {filename} to user {user.user_id}")
    return Response(
        content=render_csv(result).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        },
    )
