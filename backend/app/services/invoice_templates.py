"""Registry of built-in invoice templates.

Adding a template means adding one ``TemplateDescriptor`` to ``BUILTIN_TEMPLATES``:
the same entry drives the rendered document and the preview miniature.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.crud.crud_invoice_template import invoice_template_crud
from backend.app.services.formatting import FormattingContext, format_currency
from backend.app.services.invoice_layouts import (
    ITEM_HEADERS,
    ClassicLayout,
    InvoiceLayout,
    ModernLayout,
    ProfessionalLayout,
    status_color,
)

LOGGER = structlog.get_logger(__name__)

DEFAULT_TEMPLATE_ID = 1


@dataclass(frozen=True)
class TemplateDescriptor:
    id: int
    name: str
    layout: Type[InvoiceLayout]
    is_default: bool = False

    def build_document(self, aggregate, context: FormattingContext, footer_text: str) -> InvoiceLayout:
        return self.layout(aggregate, context, footer_text)

    def build_preview(self, footer_text: str) -> List[Dict[str, Any]]:
        return preview_blocks(self.layout, footer_text)

    def as_catalog_row(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "is_default": self.is_default, "is_system": True}


BUILTIN_TEMPLATES: Dict[int, TemplateDescriptor] = {
    descriptor.id: descriptor
    for descriptor in (
        TemplateDescriptor(1, "Classic", ClassicLayout, is_default=True),
        TemplateDescriptor(2, "Modern", ModernLayout),
        TemplateDescriptor(3, "Professional", ProfessionalLayout),
    )
}


def resolve_template(template_id: Optional[int]) -> TemplateDescriptor:
    """Return the descriptor for ``template_id``, falling back to the default layout."""
    descriptor = BUILTIN_TEMPLATES.get(template_id)
    if descriptor is None:
        LOGGER.info("invoice_template_fallback", requested=template_id, resolved=DEFAULT_TEMPLATE_ID)
        descriptor = BUILTIN_TEMPLATES[DEFAULT_TEMPLATE_ID]
    return descriptor


def get_template_catalog(db: Session) -> List[Any]:
    try:
        rows = invoice_template_crud.get_multi(db)
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.warning("invoice_template_catalog_unavailable", error=str(exc))
        rows = []
    if not rows:
        return [descriptor.as_catalog_row() for descriptor in BUILTIN_TEMPLATES.values()]
    return rows


def seed_system_templates(db: Session) -> int:
    if invoice_template_crud.count(db):
        return 0
    rows = [
        dict(descriptor.as_catalog_row(), configuration={"layout": descriptor.name.lower()})
        for descriptor in BUILTIN_TEMPLATES.values()
    ]
    invoice_template_crud.create_many(db, rows=rows)
    LOGGER.info("invoice_templates_seeded", count=len(rows))
    return len(rows)


def preview_blocks(layout: Type[InvoiceLayout], footer_text: str) -> List[Dict[str, Any]]:
    context = FormattingContext()

    def money(amount: str) -> str:
        return format_currency(Decimal(amount), "USD", context)

    content = {
        "header": {
            "title": "INVOICE",
            "business_name": "Your Business Name",
            "logo": "initials",
            "invoice_number": "INV-0001",
            "issue_date": "01/01/2024",
            "due_date": "01/31/2024",
            "style": layout.preview_style(),
        },
        "status": {"status": "draft", "color": status_color("draft").hexval()},
        "parties": {"from": "Your Business Name", "to": "Client Name"},
        "items": {
            "columns": list(ITEM_HEADERS),
            "rows": [
                {"description": "Item 1", "quantity": "1", "unit_price": money("100"), "amount": money("100")},
                {"description": "Item 2", "quantity": "1", "unit_price": money("100"), "amount": money("100")},
            ],
        },
        "totals": {"subtotal": money("200"), "tax": money("20"), "total": money("220")},
        "notes": {"notes": "Thank you for your business."},
    }
    blocks = [{"block": block, "content": content[block]} for block in layout.BLOCKS]
    blocks.append({"block": "footer", "content": {"text": f"{footer_text} - Page 1"}})
    return blocks


def build_template_preview(template_id: int, footer_text: str) -> Dict[str, Any]:
    descriptor = BUILTIN_TEMPLATES.get(template_id)
    if descriptor is None:
        return {"template_id": template_id, "name": "Preview unavailable", "available": False, "blocks": []}
    return {
        "template_id": descriptor.id,
        "name": descriptor.name,
        "available": True,
        "blocks": descriptor.build_preview(footer_text),
    }
