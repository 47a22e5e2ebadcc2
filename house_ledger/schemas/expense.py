"""Expense schemas"""

import enum
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from house_ledger.models.expense import ExpenseCategory
from house_ledger.schemas.common import PaginationMeta
from house_ledger.schemas.profile import ProfileResponse


def parse_decimal(v) -> Decimal:
    """Convert numeric input to Decimal, rejecting non-numeric text"""
    try:
        return Decimal(str(v))
    except InvalidOperation:
        raise ValueError(f"Invalid decimal value: {v!r}")


class SplitMode(str, enum.Enum):
    """How split amounts are supplied"""
    EVEN = "even"
    CUSTOM = "custom"


class SplitInput(BaseModel):
    """Input schema for one member's share"""

    user_id: UUID
    amount: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return v
        return parse_decimal(v)


class ExpenseBase(BaseModel):
    """Fields re-issued in full on create and update"""

    title: str = Field(..., max_length=255, min_length=1)
    description: str = Field(default="", max_length=2000)
    amount: Decimal = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: date
    receipt_url: Optional[str] = Field(default=None, max_length=1024)

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return parse_decimal(v)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Trim surrounding whitespace"""
        return v.strip()


class ExpenseCreate(ExpenseBase):
    """Schema for creating an expense"""

    paid_by: Optional[UUID] = None
    split_mode: SplitMode = SplitMode.CUSTOM
    splits: List[SplitInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_custom_amounts(self):
        """Custom splits must carry their amounts"""
        if self.split_mode == SplitMode.CUSTOM:
            missing = [str(s.user_id) for s in self.splits if s.amount is None]
            if missing:
                raise ValueError(f"Custom splits require an amount for: {', '.join(missing)}")
        return self


class ExpenseUpdate(ExpenseBase):
    """
    Schema for updating an expense.

    When ``splits`` is omitted the existing split set is kept; when it is
    supplied, it replaces every existing split.
    """

    split_mode: SplitMode = SplitMode.CUSTOM
    splits: Optional[List[SplitInput]] = None

    @model_validator(mode="after")
    def validate_custom_amounts(self):
        """Custom splits must carry their amounts"""
        if self.splits is not None and self.split_mode == SplitMode.CUSTOM:
            missing = [str(s.user_id) for s in self.splits if s.amount is None]
            if missing:
                raise ValueError(f"Custom splits require an amount for: {', '.join(missing)}")
        return self


class SplitResponse(BaseModel):
    """Response schema for a split"""

    id: UUID
    user_id: UUID
    debtor: Optional[ProfileResponse] = None
    amount: Decimal
    settled: bool
    settled_at: Optional[datetime] = None
    settled_by: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class ExpenseResponse(ExpenseBase):
    """Complete expense response schema"""

    id: UUID
    house_id: UUID
    paid_by: UUID
    created_by: UUID
    payer: Optional[ProfileResponse] = None
    creator: Optional[ProfileResponse] = None
    payer_share: Decimal
    splits: List[SplitResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseListResponse(BaseModel):
    """Response schema for expense list"""

    items: List[ExpenseResponse]
    pagination: PaginationMeta
