"""CRUD operations for clients."""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.app.core.errors import InvoiceValidationError
from backend.app.crud.base import CRUDOwned
from backend.app.models.client import Client
from backend.app.models.invoice import Invoice


class CRUDClient(CRUDOwned[Client]):
    order_by = "created_at"

    def search(self, db: Session, *, owner_id: int, search: Optional[str] = None) -> List[Client]:
        query = self.query(db, owner_id=owner_id)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(Client.name.ilike(pattern), Client.email.ilike(pattern)))
        return query.all()

    def delete(self, db: Session, *, db_obj: Client) -> None:
        if db.query(Invoice.id).filter(Invoice.client_id == db_obj.id).first():
            raise InvoiceValidationError.for_field(["client_id"], "Client is referenced by invoices")
        super().delete(db, db_obj=db_obj)


client_crud = CRUDClient(Client, "Client")
