"""Profit and loss report schemas."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class ExpenseCategoryTotal(BaseModel):
    category_id: Optional[int]
    category_name: str
    total: Decimal


class ProfitLossMonth(BaseModel):
    month: str
    revenue: Decimal
    expenses: Decimal
    net_profit: Decimal


class ProfitLossReport(BaseModel):
    start_date: Optional[date]
    end_date: Optional[date]
    revenue: Decimal
    expenses: Decimal
    net_profit: Decimal
    expenses_by_category: List[ExpenseCategoryTotal]
    months: List[ProfitLossMonth]
