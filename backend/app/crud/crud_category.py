"""CRUD operations for product and expense categories."""

from backend.app.crud.base import CRUDOwned
from backend.app.models.category import Category
from backend.app.models.expense_category import ExpenseCategory


class CRUDCategory(CRUDOwned):
    order_by = None

    def get_multi(self, db, *, owner_id):
        return self.query(db, owner_id=owner_id).order_by(self.model.name).all()


category_crud = CRUDCategory(Category, "Category")
expense_category_crud = CRUDCategory(ExpenseCategory, "Expense category")
