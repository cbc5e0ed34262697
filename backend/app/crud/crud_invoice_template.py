"""CRUD operations for the invoice template catalog."""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from backend.app.crud.base import commit_or_raise
from backend.app.models.invoice_template import InvoiceTemplate


class CRUDInvoiceTemplate:
    def get(self, db: Session, *, template_id: int) -> Optional[InvoiceTemplate]:
        return db.get(InvoiceTemplate, template_id)

    def get_multi(self, db: Session) -> List[InvoiceTemplate]:
        return db.query(InvoiceTemplate).order_by(InvoiceTemplate.id).all()

    def count(self, db: Session) -> int:
        return db.query(InvoiceTemplate).count()

    def create_many(self, db: Session, *, rows: Iterable[dict]) -> List[InvoiceTemplate]:
        objs = [InvoiceTemplate(**row) for row in rows]
        db.add_all(objs)
        commit_or_raise(db, "invoice_template_seed")
        return objs


invoice_template_crud = CRUDInvoiceTemplate()
