"""CRUD operations for the product/service catalog."""

from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.app.crud.base import CRUDOwned
from backend.app.crud.crud_category import category_crud
from backend.app.models.product import Product


class CRUDProduct(CRUDOwned[Product]):
    order_by = "created_at"

    def check_references(self, db: Session, *, data: Dict[str, Any], owner_id: int) -> None:
        category_crud.get_optional(db, obj_id=data.get("category_id"), owner_id=owner_id)

    def search(
        self,
        db: Session,
        *,
        owner_id: int,
        is_active: Optional[bool] = None,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        query = self.query(db, owner_id=owner_id)
        if is_active is not None:
            query = query.filter(Product.is_active.is_(is_active))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        return query.all()


product_crud = CRUDProduct(Product, "Product")
