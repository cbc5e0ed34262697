"""Invoice endpoints."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.invoice import (
    InvoiceCalculationRead,
    InvoiceCalculationRequest,
    InvoiceCreate,
    InvoiceItemsReplace,
    InvoiceNumberSuggestion,
    InvoiceRead,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    InvoiceWithItems,
)
from backend.app.services.invoice_calculations import InvoiceDraft
from backend.app.services.invoice_document import load_invoice_aggregate, render_invoice_document
from backend.app.services.invoices import (
    create_invoice,
    delete_invoice,
    generate_invoice_number,
    get_owned_invoice,
    list_invoices,
    replace_invoice_items,
    set_status,
    update_invoice_header,
)
from backend.app.services.preferences import formatting_context_for

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _aggregate(invoice, items) -> dict:
    return {"invoice": invoice, "items": items}


@router.get("", response_model=List[InvoiceRead])
async def list_my_invoices(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    client_id: Optional[int] = Query(default=None),
    business_id: Optional[int] = Query(default=None),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_invoices(
        db,
        owner_id=current_user.id,
        status=status_filter,
        client_id=client_id,
        business_id=business_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", response_model=InvoiceWithItems, status_code=status.HTTP_201_CREATED)
async def create_my_invoice(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice, items = create_invoice(db, owner_id=current_user.id, payload=invoice_in)
    return _aggregate(invoice, items)


@router.post("/calculate", response_model=InvoiceCalculationRead)
async def calculate_invoice(request: InvoiceCalculationRequest, current_user: User = Depends(get_current_user)):
    draft = InvoiceDraft.from_payload(request.items, tax_rate=request.tax_rate, discount=request.discount)
    return {
        "items": [
            {
                "temp_id": item.temp_id,
                "description": item.description,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "amount": item.amount,
            }
            for item in draft.items
        ],
        "subtotal": draft.totals.subtotal,
        "tax_amount": draft.totals.tax_amount,
        "total": draft.totals.total,
    }


@router.get("/next-number", response_model=InvoiceNumberSuggestion)
async def suggest_invoice_number(current_user: User = Depends(get_current_user)):
    return {"invoice_number": generate_invoice_number()}


@router.get("/{invoice_id}", response_model=InvoiceWithItems)
async def get_my_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice, items = get_owned_invoice(db, invoice_id=invoice_id, user_id=current_user.id)
    return _aggregate(invoice, items)


@router.patch("/{invoice_id}", response_model=InvoiceRead)
async def update_my_invoice(
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice, _ = get_owned_invoice(db, invoice_id=invoice_id, user_id=current_user.id)
    return update_invoice_header(db, invoice, invoice_in)


@router.put("/{invoice_id}/items", response_model=InvoiceWithItems)
async def replace_my_invoice_items(
    invoice_id: int,
    items_in: InvoiceItemsReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice, _ = get_owned_invoice(db, invoice_id=invoice_id, user_id=current_user.id)
    invoice, items = replace_invoice_items(db, invoice, items_in.items)
    return _aggregate(invoice, items)


@router.put("/{invoice_id}/status", response_model=InvoiceRead)
async def update_my_invoice_status(
    invoice_id: int,
    status_in: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice, _ = get_owned_invoice(db, invoice_id=invoice_id, user_id=current_user.id)
    return set_status(db, invoice, status_in.status)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice, _ = get_owned_invoice(db, invoice_id=invoice_id, user_id=current_user.id)
    delete_invoice(db, invoice)


@router.get("/{invoice_id}/document")
async def download_invoice_document(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice, items = get_owned_invoice(db, invoice_id=invoice_id, user_id=current_user.id)
    aggregate = load_invoice_aggregate(db, invoice, items)
    document = render_invoice_document(aggregate, formatting_context_for(db, current_user))
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Invoice-Template": str(document.template_id),
        },
    )
