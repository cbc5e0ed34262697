"""Profit and loss reporting."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from backend.app.models.expense import Expense
from backend.app.models.expense_category import ExpenseCategory
from backend.app.models.invoice import Invoice

ZERO = Decimal("0.00")
TWO_PLACES = Decimal("0.01")


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_keys_back(today: date, months: int) -> List[str]:
    """Keys for the ``months`` calendar months ending with the month of ``today``, oldest first."""
    keys = []
    year, month = today.year, today.month
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def sum_money(values: Iterable) -> Decimal:
    return sum((Decimal(str(v or 0)) for v in values), ZERO).quantize(TWO_PLACES)


def paid_invoices(db: Session, owner_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[Invoice]:
    query = db.query(Invoice).filter(Invoice.owner_id == owner_id, Invoice.status == "paid")
    if start_date:
        query = query.filter(Invoice.issue_date >= start_date)
    if end_date:
        query = query.filter(Invoice.issue_date <= end_date)
    return query.all()


def owner_expenses(db: Session, owner_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[Expense]:
    query = db.query(Expense).filter(Expense.owner_id == owner_id)
    if start_date:
        query = query.filter(Expense.date >= start_date)
    if end_date:
        query = query.filter(Expense.date <= end_date)
    return query.all()


def get_profit_loss_report(
    db: Session,
    owner_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    """Revenue from paid invoices against expenses, by category and by month."""
    invoices = paid_invoices(db, owner_id, start_date, end_date)
    expenses = owner_expenses(db, owner_id, start_date, end_date)

    category_names: Dict[int, str] = {
        row.id: row.name
        for row in db.query(ExpenseCategory).filter(ExpenseCategory.owner_id == owner_id).all()
    }
    by_category: Dict[Optional[int], List[Decimal]] = defaultdict(list)
    for expense in expenses:
        by_category[expense.category_id].append(expense.amount)

    months: Dict[str, Dict[str, List[Decimal]]] = defaultdict(lambda: {"revenue": [], "expenses": []})
    for invoice in invoices:
        months[month_key(invoice.issue_date)]["revenue"].append(invoice.total)
    for expense in expenses:
        months[month_key(expense.date)]["expenses"].append(expense.amount)

    revenue = sum_money(inv.total for inv in invoices)
    expense_total = sum_money(exp.amount for exp in expenses)
    month_rows = []
    for key in sorted(months):
        month_revenue = sum_money(months[key]["revenue"])
        month_expenses = sum_money(months[key]["expenses"])
        month_rows.append(
            {
                "month": key,
                "revenue": month_revenue,
                "expenses": month_expenses,
                "net_profit": month_revenue - month_expenses,
            }
        )

    category_rows = [
        {
            "category_id": category_id,
            "category_name": category_names.get(category_id, "Uncategorized"),
            "total": sum_money(amounts),
        }
        for category_id, amounts in by_category.items()
    ]
    category_rows.sort(key=lambda row: row["total"], reverse=True)

    return {
        "start_date": start_date,
        "end_date": end_date,
        "revenue": revenue,
        "expenses": expense_total,
        "net_profit": revenue - expense_total,
        "expenses_by_category": category_rows,
        "months": month_rows,
    }
