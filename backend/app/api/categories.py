"""Product and expense category endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.crud.crud_category import category_crud, expense_category_crud
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.category import CategoryCreate, CategoryRead

router = APIRouter(tags=["categories"])


@router.get("/categories", response_model=List[CategoryRead])
async def list_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return category_crud.get_multi(db, owner_id=current_user.id)


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(category_in: CategoryCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return category_crud.create(db, obj_in=category_in, owner_id=current_user.id)


@router.get("/expense-categories", response_model=List[CategoryRead])
async def list_expense_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return expense_category_crud.get_multi(db, owner_id=current_user.id)


@router.post("/expense-categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_expense_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return expense_category_crud.create(db, obj_in=category_in, owner_id=current_user.id)
