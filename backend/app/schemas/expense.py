"""Expense schemas."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ExpenseBase(BaseModel):
    amount: Decimal = Field(ge=0)
    currency: str = "USD"
    description: Optional[str] = None
    date: date_type
    business_id: Optional[int] = None
    category_id: Optional[int] = None


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = None
    description: Optional[str] = None
    date: Optional[date_type] = None
    business_id: Optional[int] = None
    category_id: Optional[int] = None


class ExpenseRead(ExpenseBase):
    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
