"""Invoice persistence: the header and its line items stored and read as one aggregate."""

import random
from datetime import date
from typing import Iterable, List, Optional, Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import (
    InvoiceValidationError,
    OwnershipError,
    ResourceNotFoundError,
    StorageError,
)
from backend.app.crud.crud_business import business_crud
from backend.app.crud.crud_client import client_crud
from backend.app.models.invoice import INVOICE_STATUSES, Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.models.product import Product
from backend.app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from backend.app.services.invoice_calculations import (
    InvoiceDraft,
    LineItem,
    adjustment_errors,
    recompute_totals,
    to_decimal,
)

LOGGER = structlog.get_logger(__name__)


def generate_invoice_number(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"INV-{today.year}-{random.randint(0, 999):03d}"


def _check_products(db: Session, items: Iterable[LineItem], owner_id: int) -> None:
    errors = []
    for index, item in enumerate(items):
        if item.product_id is None:
            continue
        product = db.get(Product, item.product_id)
        if product is None:
            errors.append({"loc": ["items", index, "product_id"], "msg": "Product not found"})
        elif product.owner_id != owner_id:
            raise OwnershipError("Product")
    if errors:
        raise InvoiceValidationError(errors=errors)


def _item_rows(invoice_id: int, items: Iterable[LineItem]) -> List[InvoiceItem]:
    return [
        InvoiceItem(
            invoice_id=invoice_id,
            product_id=item.product_id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            amount=item.amount,
        )
        for item in items
    ]


def _rollback(db: Session, exc: SQLAlchemyError, event: str, **context) -> StorageError:
    db.rollback()
    LOGGER.exception(event, error=str(exc), **context)
    return StorageError()


def _required_invoice_number(value: Optional[str]) -> str:
    number = (value or "").strip()
    if not number:
        raise InvoiceValidationError.for_field(["invoice_number"], "Invoice number is required")
    return number


def create_invoice(db: Session, *, owner_id: int, payload: InvoiceCreate) -> Tuple[Invoice, List[InvoiceItem]]:
    """Validate and store a new invoice with its items in a single transaction.

    Validation runs before any write. The header is flushed first so the items
    can be bound to its id; any storage failure rolls back both.
    """
    invoice_number = _required_invoice_number(payload.invoice_number)
    draft = InvoiceDraft.from_payload(payload.items, tax_rate=payload.tax_rate, discount=payload.discount)
    totals = draft.validate()
    business_crud.get(db, obj_id=payload.business_id, owner_id=owner_id)
    client_crud.get(db, obj_id=payload.client_id, owner_id=owner_id)
    _check_products(db, draft.items, owner_id)

    header = payload.model_dump(exclude={"items"})
    header["currency"] = (header.get("currency") or "USD").upper()
    header["invoice_number"] = invoice_number
    invoice = Invoice(
        owner_id=owner_id,
        status="draft",
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        total=totals.total,
        **header,
    )
    try:
        db.add(invoice)
        db.flush()
        items = _item_rows(invoice.id, draft.items)
        db.add_all(items)
        db.commit()
    except SQLAlchemyError as exc:
        raise _rollback(db, exc, "invoice_create_failed", owner_id=owner_id) from exc

    db.refresh(invoice)
    LOGGER.info("invoice_created", invoice_id=invoice.id, item_count=len(items), total=str(invoice.total))
    return invoice, list(invoice.items)


def get_invoice_with_items(db: Session, invoice_id: int) -> Optional[Tuple[Invoice, List[InvoiceItem]]]:
    invoice = db.get(Invoice, invoice_id)
    if invoice is None:
        return None
    items = db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice.id).order_by(InvoiceItem.id).all()
    return invoice, items


def ensure_invoice_owner(invoice: Invoice, user_id: int) -> Invoice:
    if invoice.owner_id != user_id or (invoice.business is not None and invoice.business.owner_id != user_id):
        raise OwnershipError("Invoice")
    return invoice


def get_owned_invoice(db: Session, *, invoice_id: int, user_id: int) -> Tuple[Invoice, List[InvoiceItem]]:
    found = get_invoice_with_items(db, invoice_id)
    if found is None:
        raise ResourceNotFoundError("Invoice")
    ensure_invoice_owner(found[0], user_id)
    return found


def list_invoices(
    db: Session,
    *,
    owner_id: int,
    status: Optional[str] = None,
    client_id: Optional[int] = None,
    business_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Invoice]:
    query = db.query(Invoice).filter(Invoice.owner_id == owner_id)
    if status:
        query = query.filter(Invoice.status == status)
    if client_id is not None:
        query = query.filter(Invoice.client_id == client_id)
    if business_id is not None:
        query = query.filter(Invoice.business_id == business_id)
    if start_date:
        query = query.filter(Invoice.issue_date >= start_date)
    if end_date:
        query = query.filter(Invoice.issue_date <= end_date)
    return query.order_by(Invoice.issue_date.desc(), Invoice.id.desc()).all()


def _apply_totals(invoice: Invoice, items: Iterable) -> None:
    tax_rate = to_decimal(invoice.tax_rate, ["tax_rate"])
    discount = to_decimal(invoice.discount, ["discount"])
    totals = recompute_totals(items, tax_rate, discount)
    errors = adjustment_errors(totals, tax_rate, discount)
    if errors:
        raise InvoiceValidationError(errors=errors)
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.total = totals.total


def update_invoice_header(db: Session, invoice: Invoice, changes: InvoiceUpdate) -> Invoice:
    """Apply header field changes; items are untouched but totals follow tax and discount."""
    data = changes.model_dump(exclude_unset=True)
    if "business_id" in data and data["business_id"] is not None:
        business_crud.get(db, obj_id=data["business_id"], owner_id=invoice.owner_id)
    if "client_id" in data and data["client_id"] is not None:
        client_crud.get(db, obj_id=data["client_id"], owner_id=invoice.owner_id)
    for field in ("invoice_number", "business_id", "client_id", "issue_date", "due_date", "currency", "tax_rate", "discount", "template_id"):
        if field in data and data[field] is None:
            raise InvoiceValidationError.for_field([field], "Field cannot be null")
    if data.get("currency"):
        data["currency"] = data["currency"].upper()
    if "invoice_number" in data:
        data["invoice_number"] = _required_invoice_number(data["invoice_number"])

    try:
        for field, value in data.items():
            setattr(invoice, field, value)
        if "tax_rate" in data or "discount" in data:
            _apply_totals(invoice, invoice.items)
        db.commit()
    except InvoiceValidationError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        raise _rollback(db, exc, "invoice_update_failed", invoice_id=invoice.id) from exc

    db.refresh(invoice)
    LOGGER.info("invoice_updated", invoice_id=invoice.id, fields=sorted(data))
    return invoice


def replace_invoice_items(db: Session, invoice: Invoice, rows: Iterable) -> Tuple[Invoice, List[InvoiceItem]]:
    """Swap the whole item set of an invoice and recompute its totals in one transaction."""
    draft = InvoiceDraft.from_payload(rows, tax_rate=invoice.tax_rate, discount=invoice.discount)
    totals = draft.validate()
    _check_products(db, draft.items, invoice.owner_id)

    try:
        db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice.id).delete(synchronize_session=False)
        db.add_all(_item_rows(invoice.id, draft.items))
        invoice.subtotal = totals.subtotal
        invoice.tax_amount = totals.tax_amount
        invoice.total = totals.total
        db.commit()
    except SQLAlchemyError as exc:
        raise _rollback(db, exc, "invoice_items_replace_failed", invoice_id=invoice.id) from exc

    db.expire(invoice)
    found = get_invoice_with_items(db, invoice.id)
    LOGGER.info("invoice_items_replaced", invoice_id=invoice.id, item_count=len(found[1]))
    return found


def set_status(db: Session, invoice: Invoice, new_status: str) -> Invoice:
    """Move an invoice to any of the allowed statuses; anything else is rejected untouched.

    Matching is exact: status labels are lowercase and are never normalised.
    """
    if new_status not in INVOICE_STATUSES:
        raise InvoiceValidationError.for_field(
            ["status"], f"Invalid status. Allowed values: {', '.join(INVOICE_STATUSES)}"
        )
    previous = invoice.status
    invoice.status = new_status
    try:
        db.commit()
    except SQLAlchemyError as exc:
        raise _rollback(db, exc, "invoice_status_failed", invoice_id=invoice.id) from exc
    db.refresh(invoice)
    LOGGER.info("invoice_status_changed", invoice_id=invoice.id, previous=previous, status=new_status)
    return invoice


def delete_invoice(db: Session, invoice: Invoice) -> None:
    invoice_id = invoice.id
    try:
        db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice_id).delete(synchronize_session=False)
        db.query(Invoice).filter(Invoice.id == invoice_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        raise _rollback(db, exc, "invoice_delete_failed", invoice_id=invoice_id) from exc
    db.expunge(invoice)
    LOGGER.info("invoice_deleted", invoice_id=invoice_id)
