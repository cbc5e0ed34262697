"""Dashboard schemas."""

from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel


class RecentInvoice(BaseModel):
    id: int
    invoice_number: str
    client_id: int
    client_name: str
    total: Decimal
    status: str
    issue_date: date
    currency: str


class MonthlyRevenuePoint(BaseModel):
    month: str
    revenue: Decimal
    expenses: Decimal


class DashboardStats(BaseModel):
    total_invoices: int
    total_revenue: Decimal
    unpaid_amount: Decimal
    active_clients: int
    recent_invoices: List[RecentInvoice]
    monthly_revenue: List[MonthlyRevenuePoint]
