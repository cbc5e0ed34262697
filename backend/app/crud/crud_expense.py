"""CRUD operations for expenses."""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from backend.app.crud.base import CRUDOwned
from backend.app.crud.crud_business import business_crud
from backend.app.crud.crud_category import expense_category_crud
from backend.app.models.expense import Expense


class CRUDExpense(CRUDOwned[Expense]):
    def check_references(self, db: Session, *, data: Dict[str, Any], owner_id: int) -> None:
        business_crud.get_optional(db, obj_id=data.get("business_id"), owner_id=owner_id)
        expense_category_crud.get_optional(db, obj_id=data.get("category_id"), owner_id=owner_id)

    def search(
        self,
        db: Session,
        *,
        owner_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        business_id: Optional[int] = None,
    ) -> List[Expense]:
        query = self.query(db, owner_id=owner_id)
        if start_date:
            query = query.filter(Expense.date >= start_date)
        if end_date:
            query = query.filter(Expense.date <= end_date)
        if category_id is not None:
            query = query.filter(Expense.category_id == category_id)
        if business_id is not None:
            query = query.filter(Expense.business_id == business_id)
        return query.order_by(Expense.date.desc(), Expense.id.desc()).all()


expense_crud = CRUDExpense(Expense, "Expense")
