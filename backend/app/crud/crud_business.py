"""CRUD operations for business profiles."""

from sqlalchemy.orm import Session

from backend.app.core.errors import InvoiceValidationError
from backend.app.crud.base import CRUDOwned, commit_or_raise
from backend.app.models.business import Business
from backend.app.models.expense import Expense
from backend.app.models.invoice import Invoice


class CRUDBusiness(CRUDOwned[Business]):
    order_by = "created_at"

    def set_logo(self, db: Session, *, db_obj: Business, data_url: str) -> Business:
        db_obj.logo = data_url
        commit_or_raise(db, "business_logo_update", id=db_obj.id)
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Business) -> None:
        if db.query(Invoice.id).filter(Invoice.business_id == db_obj.id).first():
            raise InvoiceValidationError.for_field(["business_id"], "Business is referenced by invoices")
        # Expenses outlive the business they were booked against.
        db.query(Expense).filter(Expense.business_id == db_obj.id).update({Expense.business_id: None})
        super().delete(db, db_obj=db_obj)


business_crud = CRUDBusiness(Business, "Business")
