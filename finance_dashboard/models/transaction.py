from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_dashboard.utils.dates import to_naive_utc, utcnow


class TransactionCategory(str, Enum):
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class TransactionStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"


NULLABLE_FIELDS = ("categoryId", "fromTo")


def normalize_amount(category: str, amount: float) -> float:
    """Expense amounts are stored negative, Revenue amounts positive."""
    if category == TransactionCategory.EXPENSE.value:
        return -abs(amount)
    return abs(amount)


def _check_amount(value: Optional[float]) -> Optional[float]:
    if value is not None and value == 0:
        raise ValueError("Amount must be non-zero")
    return value


def _check_date(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_utc(value) if value is not None else value


class TransactionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    date: datetime = Field(default_factory=utcnow)
    amount: float = Field(..., allow_inf_nan=False)
    category: TransactionCategory
    status: TransactionStatus
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    from_to: Optional[str] = Field(default=None, alias="fromTo", max_length=100)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value):
        return _check_amount(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value):
        return _check_date(value)


class TransactionUpdate(BaseModel):
    """Partial update. ``user_id`` is not accepted: ownership never changes."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    date: Optional[datetime] = None
    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    category: Optional[TransactionCategory] = None
    status: Optional[TransactionStatus] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    from_to: Optional[str] = Field(default=None, alias="fromTo", max_length=100)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value):
        return _check_amount(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value):
        return _check_date(value)


class TransactionInDB(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    user_profile: str
    date: datetime
    amount: float
    category: TransactionCategory
    status: TransactionStatus
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    from_to: Optional[str] = Field(default=None, alias="fromTo")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_create(cls, payload: TransactionCreate, user_id: str, user_profile: str) -> "TransactionInDB":
        data = payload.model_dump(by_alias=True)
        data["amount"] = normalize_amount(data["category"], data["amount"])
        return cls(user_id=user_id, user_profile=user_profile, **data)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TransactionPublic(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: datetime
    amount: float
    category: str
    status: str
    user_id: str
    user_profile: Optional[str] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    from_to: Optional[str] = Field(default=None, alias="fromTo")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def merge_update(existing: Dict[str, Any], payload: TransactionUpdate) -> Dict[str, Any]:
    """
    Build the attribute changes for an update. The merged document is
    re-normalized so the stored amount sign always follows the category.
    """
    changes = {
        key: value
        for key, value in payload.model_dump(by_alias=True, exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    merged = {**existing, **changes}
    changes["amount"] = normalize_amount(merged["category"], merged["amount"])
    changes["updated_at"] = utcnow()
    return changes
