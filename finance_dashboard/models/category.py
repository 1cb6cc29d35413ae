import re
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_dashboard.models.transaction import TransactionCategory
from finance_dashboard.utils.dates import utcnow

COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
DEFAULT_COLOR = "#000000"


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Category name must be at least 2 characters long")
    if len(value) > 50:
        raise ValueError("Category name cannot exceed 50 characters")
    return value[0].upper() + value[1:]


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not COLOR_PATTERN.match(value):
        raise ValueError("Invalid hex color code")
    return value


class CategoryCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    type: TransactionCategory
    description: Optional[str] = Field(default=None, max_length=200)
    color: str = DEFAULT_COLOR

    @field_validator("name")
    @classmethod
    def clean_name(cls, value):
        return _clean_name(value)

    @field_validator("color")
    @classmethod
    def check_color(cls, value):
        return _check_color(value)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value):
        return value.strip() if value is not None else value


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = None
    type: Optional[TransactionCategory] = None
    description: Optional[str] = Field(default=None, max_length=200)
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value):
        return _clean_name(value)

    @field_validator("color")
    @classmethod
    def check_color(cls, value):
        return _check_color(value)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value):
        return value.strip() if value is not None else value


class CategoryInDB(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    name: str
    type: TransactionCategory
    description: Optional[str] = None
    color: str = DEFAULT_COLOR
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump()


class CategoryPublic(BaseModel):
    id: str
    user_id: str
    name: str
    type: str
    description: Optional[str] = None
    color: str = DEFAULT_COLOR
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
