"""Profit and loss reporting endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.core.errors import InvoiceValidationError
from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.reports import ProfitLossReport
from backend.app.services.reports import get_profit_loss_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/profit-loss", response_model=ProfitLossReport)
async def get_profit_loss(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if start_date and end_date and start_date > end_date:
        raise InvoiceValidationError.for_field(["start_date"], "start_date must be on or before end_date")
    return get_profit_loss_report(db, current_user.id, start_date, end_date)
