"""Expense endpoints."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.crud.crud_expense import expense_crud
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=List[ExpenseRead])
async def list_expenses(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    category_id: Optional[int] = Query(default=None),
    business_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return expense_crud.search(
        db,
        owner_id=current_user.id,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        business_id=business_id,
    )


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(expense_in: ExpenseCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return expense_crud.create(db, obj_in=expense_in, owner_id=current_user.id)


@router.put("/{expense_id}", response_model=ExpenseRead)
async def update_expense(
    expense_id: int,
    expense_in: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    expense = expense_crud.get(db, obj_id=expense_id, owner_id=current_user.id)
    return expense_crud.update(db, db_obj=expense, obj_in=expense_in)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(expense_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    expense = expense_crud.get(db, obj_id=expense_id, owner_id=current_user.id)
    expense_crud.delete(db, db_obj=expense)
