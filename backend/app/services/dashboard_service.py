"""Dashboard cards built from invoices and expenses."""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.models.client import Client
from backend.app.models.invoice import Invoice
from backend.app.services.reports import sum_money, month_key, month_keys_back, owner_expenses

UNPAID_STATUSES = ("draft", "sent", "overdue")
RECENT_LIMIT = 5
CHART_MONTHS = 6
ACTIVE_CLIENT_DAYS = 90


def get_dashboard_stats(db: Session, *, owner_id: int, today: date) -> dict:
    invoices = db.query(Invoice).filter(Invoice.owner_id == owner_id).all()

    total_revenue = sum_money(inv.total for inv in invoices if inv.status == "paid")
    unpaid_amount = sum_money(inv.total for inv in invoices if inv.status in UNPAID_STATUSES)
    active_since = today - timedelta(days=ACTIVE_CLIENT_DAYS)
    active_clients = len({inv.client_id for inv in invoices if inv.issue_date >= active_since})

    recent = (
        db.query(Invoice, Client.name)
        .join(Client, Invoice.client_id == Client.id)
        .filter(Invoice.owner_id == owner_id)
        .order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    recent_invoices = [
        {
            "id": inv.id,
            "invoice_number": inv.invoice_number,
            "client_id": inv.client_id,
            "client_name": client_name,
            "total": inv.total,
            "status": inv.status,
            "issue_date": inv.issue_date,
            "currency": inv.currency,
        }
        for inv, client_name in recent
    ]

    keys = month_keys_back(today, CHART_MONTHS)
    revenue_by_month = {key: Decimal("0.00") for key in keys}
    expenses_by_month = {key: Decimal("0.00") for key in keys}
    for inv in invoices:
        key = month_key(inv.issue_date)
        if inv.status == "paid" and key in revenue_by_month:
            revenue_by_month[key] += Decimal(str(inv.total))
    first_month = date(int(keys[0][:4]), int(keys[0][5:]), 1)
    for expense in owner_expenses(db, owner_id, start_date=first_month, end_date=today):
        key = month_key(expense.date)
        if key in expenses_by_month:
            expenses_by_month[key] += Decimal(str(expense.amount))

    return {
        "total_invoices": len(invoices),
        "total_revenue": total_revenue,
        "unpaid_amount": unpaid_amount,
        "active_clients": active_clients,
        "recent_invoices": recent_invoices,
        "monthly_revenue": [
            {"month": key, "revenue": revenue_by_month[key], "expenses": expenses_by_month[key]} for key in keys
        ],
    }
