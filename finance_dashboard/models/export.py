from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_dashboard.models.transaction import TransactionCategory, TransactionStatus
from finance_dashboard.utils.dates import to_naive_utc


class ExportField(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    CATEGORY = "category"
    STATUS = "status"
    USER_ID = "user_id"
    USER_PROFILE = "user_profile"
    ID = "id"


class DateRange(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def naive_utc(cls, value):
        return to_naive_utc(value)


class ExportFilters(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    category: Optional[TransactionCategory] = None
    status: Optional[TransactionStatus] = None
    search: Optional[str] = None


class ExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected_fields: List[ExportField] = Field(..., alias="selectedFields", min_length=1)
    date_range: Optional[DateRange] = Field(default=None, alias="dateRange")
    filters: Optional[ExportFilters] = None
    filename: Optional[str] = Field(default=None, max_length=100)

    @field_validator("selected_fields")
    @classmethod
    def dedupe_fields(cls, value):
        # Keep the caller's column order, drop repeats
        return list(dict.fromkeys(value))
