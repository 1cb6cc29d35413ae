"""
Transaction export: field catalog, row projection and CSV rendering.

Every exportable column is an ``ExportField`` mapped to one ``FieldSpec``
holding its catalog entry and its extractor, so the catalog served to
clients and the rows written to CSV come from the same table.
"""
import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from finance_dashboard.db.base import TransactionQuery, TransactionStore, sort_by_date_desc
from finance_dashboard.models.export import DateRange, ExportField, ExportFilters
from finance_dashboard.utils.dates import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"


def format_export_date(value: Any) -> str:
    """Locale-style short date (M/D/YYYY), e.g. 1/15/2024."""
    if not isinstance(value, (date, datetime)):
        value = parse_timestamp(value)
    return f"{value.month}/{value.day}/{value.year}"


def format_export_amount(value: Any) -> str:
    return f"{float(value):.2f}"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class FieldSpec:
    key: ExportField
    label: str
    description: str
    default_selected: bool
    extract: Callable[[Dict[str, Any]], Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.value,
            "label": self.label,
            "description": self.description,
            "defaultSelected": self.default_selected,
        }


EXPORT_FIELDS: Dict[ExportField, FieldSpec] = {
    spec.key: spec
    for spec in (
        FieldSpec(ExportField.DATE, "Date", "Transaction date", True,
                  lambda txn: format_export_date(txn["date"])),
        FieldSpec(ExportField.AMOUNT, "Amount", "Transaction amount", True,
                  lambda txn: format_export_amount(txn["amount"])),
        FieldSpec(ExportField.CATEGORY, "Category", "Revenue or Expense", True,
                  lambda txn: txn.get("category")),
        FieldSpec(ExportField.STATUS, "Status", "Paid or Pending", True,
                  lambda txn: txn.get("status")),
        FieldSpec(ExportField.USER_ID, "User ID", "Associated user identifier", False,
                  lambda txn: _text(txn.get("user_id"))),
        FieldSpec(ExportField.USER_PROFILE, "User Profile", "User profile image", False,
                  lambda txn: txn.get("user_profile")),
        FieldSpec(ExportField.ID, "Transaction ID", "Unique transaction identifier", False,
                  lambda txn: txn.get("id")),
    )
}


def exportable_fields() -> List[Dict[str, Any]]:
    return [spec.to_dict() for spec in EXPORT_FIELDS.values()]


@dataclass
class ExportResult:
    fields: List[ExportField]
    rows: List[Dict[ExportField, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


class ExportProjector:
    def __init__(self, store: TransactionStore) -> None:
        self._store = store

    def build_export_rows(
        self,
        user_id: str,
        selected_fields: Sequence[ExportField],
        filters: Optional[ExportFilters] = None,
        date_range: Optional[DateRange] = None,
    ) -> ExportResult:
        fields = [ExportField(f) for f in selected_fields]
        query = TransactionQuery(
            category=filters.category if filters else None,
            status=filters.status if filters else None,
            search=filters.search if filters else None,
            start=date_range.start if date_range else None,
            end=date_range.end if date_range else None,
        )
        transactions = sort_by_date_desc(self._store.find_by_user(user_id, query))
        logger.info(f"Exporting {len(transactions)} transactions for user {user_id}")

        rows = [{f: EXPORT_FIELDS[f].extract(txn) for f in fields} for txn in transactions]
        return ExportResult(fields=fields, rows=rows)


def render_csv(result: ExportResult) -> str:
    """CSV text with a label header row, prefixed with a BOM for spreadsheets."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([EXPORT_FIELDS[f].label for f in result.fields])
    for row in result.rows:
        writer.writerow([_text(row.get(f)) for f in result.fields])
    return BYTE_ORDER_MARK + output.getvalue()


def export_filename(filename: Optional[str] = None, today: Optional[date] = None) -> str:
    date_str = (today or utcnow().date()).isoformat()
    safe_name = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "").strip("._")
    if safe_name:
        return f"{safe_name}-{date_str}.csv"
    return f"transactions-export-{date_str}.csv"
