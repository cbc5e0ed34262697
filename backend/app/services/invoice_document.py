"""Render a resolved invoice aggregate into a PDF document."""

import os
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

import structlog
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate
from sqlalchemy.orm import Session

from backend.app.core.errors import RelationResolutionError
from backend.app.core.settings import get_settings
from backend.app.models.business import Business
from backend.app.models.client import Client
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.services.formatting import FormattingContext
from backend.app.services.invoice_layouts import A4, MARGIN
from backend.app.services.invoice_templates import resolve_template

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InvoiceAggregate:
    invoice: Invoice
    items: Sequence[InvoiceItem]
    business: Optional[Business]
    client: Optional[Client]


@dataclass(frozen=True)
class InvoiceDocument:
    filename: str
    content: bytes
    template_id: int
    page_count: int
    blocks: Tuple[str, ...] = field(default_factory=tuple)
    media_type: str = "application/pdf"

    def save(self, directory: str) -> str:
        path = os.path.join(directory, self.filename)
        with open(path, "wb") as handle:
            handle.write(self.content)
        return path


def document_filename(invoice_number: str) -> str:
    stem = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in (invoice_number or "").strip())
    return f"Invoice_{stem or 'draft'}.pdf"


def load_invoice_aggregate(db: Session, invoice: Invoice, items: Optional[List[InvoiceItem]] = None) -> InvoiceAggregate:
    """Join the business and client an invoice points at; both must exist."""
    business = db.get(Business, invoice.business_id) if invoice.business_id is not None else None
    if business is None:
        raise RelationResolutionError("business")
    client = db.get(Client, invoice.client_id) if invoice.client_id is not None else None
    if client is None:
        raise RelationResolutionError("client")
    if items is None:
        items = db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice.id).order_by(InvoiceItem.id).all()
    return InvoiceAggregate(invoice=invoice, items=items, business=business, client=client)


def render_invoice_document(
    aggregate: InvoiceAggregate,
    context: FormattingContext,
    footer_text: Optional[str] = None,
) -> InvoiceDocument:
    """Lay the aggregate out with its template and return the finished PDF.

    Missing relations abort before anything is drawn. Unknown template ids
    render with the default layout.
    """
    if aggregate.business is None:
        raise RelationResolutionError("business")
    if aggregate.client is None:
        raise RelationResolutionError("client")

    invoice = aggregate.invoice
    descriptor = resolve_template(invoice.template_id)
    layout = descriptor.build_document(aggregate, context, footer_text or get_settings().document_footer)
    story = layout.build_story()

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=25 * mm,
        title=f"Invoice {invoice.invoice_number}",
        author=aggregate.business.name,
        subject=f"Invoice for {aggregate.client.name}",
        creator=get_settings().app_name,
    )
    doc.build(story, onFirstPage=layout.draw_first_page, onLaterPages=layout.draw_later_page)

    document = InvoiceDocument(
        filename=document_filename(invoice.invoice_number),
        content=buffer.getvalue(),
        template_id=descriptor.id,
        page_count=layout.pages_drawn,
        blocks=tuple(layout.blocks),
    )
    LOGGER.info(
        "invoice_document_rendered",
        invoice_id=invoice.id,
        template_id=descriptor.id,
        requested_template_id=invoice.template_id,
        page_count=document.page_count,
    )
    return document
