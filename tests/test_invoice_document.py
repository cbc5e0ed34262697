from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from backend.app.core.errors import RelationResolutionError
from backend.app.services.formatting import FormattingContext
from backend.app.services.invoice_document import (
    InvoiceAggregate,
    document_filename,
    render_invoice_document,
)
from backend.app.services.invoice_layouts import (
    STATUS_COLORS,
    ProfessionalLayout,
    business_initials,
    decode_logo,
    status_color,
)

TINY_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_aggregate(template_id=1, notes="Thanks for your business.", item_count=2, logo=None, status="sent"):
    invoice = SimpleNamespace(
        id=7,
        invoice_number="INV-2024-001",
        issue_date=date(2024, 1, 15),
        due_date=date(2024, 2, 14),
        currency="USD",
        subtotal=Decimal("200.00"),
        tax_rate=Decimal("10"),
        tax_amount=Decimal("20.00"),
        discount=Decimal("20.00"),
        total=Decimal("200.00"),
        notes=notes,
        status=status,
        template_id=template_id,
    )
    items = [
        SimpleNamespace(description=f"Service {n}", quantity=Decimal("1"), unit_price=Decimal("100"), amount=Decimal("100.00"))
        for n in range(item_count)
    ]
    business = SimpleNamespace(
        name="Acme Studio",
        logo=logo,
        address="1 Main St\nSpringfield",
        email="billing@acme.test",
        phone="555-0100",
        tax_number="GST-123",
    )
    client = SimpleNamespace(
        name="Globex & Co",
        address="9 Side Rd",
        email="ap@globex.test",
        phone=None,
        tax_number=None,
    )
    return InvoiceAggregate(invoice=invoice, items=items, business=business, client=client)


@pytest.mark.parametrize("template_id", [1, 2, 3])
def test_each_builtin_template_renders_a_pdf(template_id):
    document = render_invoice_document(make_aggregate(template_id=template_id), FormattingContext())
    assert document.content.startswith(b"%PDF")
    assert document.template_id == template_id
    assert document.page_count == 1
    assert document.media_type == "application/pdf"


def test_unknown_template_falls_back_to_classic_layout():
    classic = render_invoice_document(make_aggregate(template_id=1), FormattingContext())
    unknown = render_invoice_document(make_aggregate(template_id=999), FormattingContext())
    assert unknown.template_id == 1
    assert unknown.blocks == classic.blocks
    assert unknown.blocks == ("header", "status", "parties", "items", "totals", "notes", "footer")


def test_notes_block_is_omitted_when_empty():
    document = render_invoice_document(make_aggregate(notes="   "), FormattingContext())
    assert "notes" not in document.blocks
    assert document.blocks[-1] == "footer"


def test_long_item_lists_paginate():
    document = render_invoice_document(make_aggregate(item_count=120), FormattingContext())
    assert document.page_count > 1


def test_filename_uses_invoice_number():
    document = render_invoice_document(make_aggregate(), FormattingContext())
    assert document.filename == "Invoice_INV-2024-001.pdf"
    assert document_filename("A/B 1") == "Invoice_A_B_1.pdf"


def test_missing_client_aborts_before_rendering():
    aggregate = make_aggregate()
    broken = InvoiceAggregate(invoice=aggregate.invoice, items=aggregate.items, business=aggregate.business, client=None)
    with pytest.raises(RelationResolutionError) as exc:
        render_invoice_document(broken, FormattingContext())
    assert exc.value.detail == "Cannot generate document: client could not be resolved"


def test_unknown_currency_does_not_break_rendering():
    aggregate = make_aggregate()
    aggregate.invoice.currency = "XYZ"
    document = render_invoice_document(aggregate, FormattingContext())
    assert document.content.startswith(b"%PDF")


def test_logo_is_drawn_when_readable():
    assert decode_logo(TINY_PNG) is not None
    document = render_invoice_document(make_aggregate(template_id=2, logo=TINY_PNG), FormattingContext())
    assert document.content.startswith(b"%PDF")


def test_unreadable_logo_falls_back_to_initials():
    assert decode_logo("data:image/png;base64,bm90IGFuIGltYWdl") is None
    document = render_invoice_document(make_aggregate(logo="data:image/png;base64,@@@"), FormattingContext())
    assert document.content.startswith(b"%PDF")


def test_document_can_be_saved(tmp_path):
    document = render_invoice_document(make_aggregate(), FormattingContext())
    path = document.save(str(tmp_path))
    assert path.endswith("Invoice_INV-2024-001.pdf")
    with open(path, "rb") as handle:
        assert handle.read(4) == b"%PDF"


def test_status_colors_and_initials():
    assert status_color("paid") is STATUS_COLORS["paid"]
    assert status_color("OVERDUE") is STATUS_COLORS["overdue"]
    assert status_color("draft") == status_color("cancelled")
    assert status_color("unknown") == status_color("draft")
    assert business_initials("Acme Studio") == "AS"
    assert business_initials("") == "?"


@pytest.mark.parametrize("template_id", [1, 2, 3])
def test_item_row_taller_than_a_page_splits_across_pages(template_id):
    aggregate = make_aggregate(template_id=template_id, item_count=1)
    aggregate.items[0].description = "word " * 6000
    document = render_invoice_document(aggregate, FormattingContext())
    assert document.content.startswith(b"%PDF")
    assert document.page_count > 1


def test_professional_header_shows_initials_without_logo():
    layout = ProfessionalLayout(make_aggregate(template_id=3), FormattingContext(), "Footer")
    identity = layout.build_identity()
    badge = identity._cellvalues[0][0]
    assert badge._cellvalues[0][0].text == "AS"

    with_logo = ProfessionalLayout(make_aggregate(template_id=3, logo=TINY_PNG), FormattingContext(), "Footer")
    assert with_logo.build_identity().__class__.__name__ == "Image"
