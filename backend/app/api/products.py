"""Product/service catalog endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.crud.crud_product import product_crud
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.product import ProductCreate, ProductRead, ProductUpdate

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductRead])
async def list_products(
    is_active: Optional[bool] = Query(default=None),
    category_id: Optional[int] = Query(default=None),
    search: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return product_crud.search(db, owner_id=current_user.id, is_active=is_active, category_id=category_id, search=search)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(product_in: ProductCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return product_crud.create(db, obj_in=product_in, owner_id=current_user.id)


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return product_crud.get(db, obj_id=product_id, owner_id=current_user.id)


@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = product_crud.get(db, obj_id=product_id, owner_id=current_user.id)
    return product_crud.update(db, db_obj=product, obj_in=product_in)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = product_crud.get(db, obj_id=product_id, owner_id=current_user.id)
    product_crud.delete(db, db_obj=product)
