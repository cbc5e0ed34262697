from decimal import Decimal
from types import SimpleNamespace

import pytest

from backend.app.core.errors import InvoiceValidationError
from backend.app.services.invoice_calculations import (
    InvoiceDraft,
    LineItem,
    recompute_line_amount,
    recompute_totals,
    round2,
)


def row(description="Consulting", quantity="1", unit_price="100", product_id=None, temp_id=None):
    return SimpleNamespace(
        description=description,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        product_id=product_id,
        temp_id=temp_id,
    )


def test_round2_is_half_up():
    assert round2(Decimal("0.125")) == Decimal("0.13")
    assert round2(Decimal("2.675")) == Decimal("2.68")
    assert round2(Decimal("-1.005")) == Decimal("-1.01")


def test_line_amount_rounds_to_cents():
    item = LineItem(description="Widget", quantity=Decimal("3"), unit_price=Decimal("19.999"))
    assert recompute_line_amount(item) == Decimal("60.00")
    assert item.amount == Decimal("60.00")


def test_line_amount_rejects_non_positive_quantity():
    item = LineItem(description="Widget", quantity=Decimal("0"), unit_price=Decimal("5"))
    with pytest.raises(InvoiceValidationError) as exc:
        recompute_line_amount(item)
    assert exc.value.errors[0]["loc"] == ["quantity"]


def test_line_amount_rejects_negative_price():
    item = LineItem(description="Widget", quantity=Decimal("1"), unit_price=Decimal("-0.01"))
    with pytest.raises(InvoiceValidationError):
        recompute_line_amount(item)


def test_free_line_is_allowed():
    item = LineItem(description="Goodwill", quantity=Decimal("2"), unit_price=Decimal("0"))
    assert recompute_line_amount(item) == Decimal("0.00")


def test_totals_follow_each_rounding_step():
    items = [SimpleNamespace(amount=Decimal("100.00")), SimpleNamespace(amount=Decimal("100.00"))]
    totals = recompute_totals(items, Decimal("10"), Decimal("20"))
    assert totals.subtotal == Decimal("200.00")
    assert totals.tax_amount == Decimal("20.00")
    assert totals.total == Decimal("200.00")


def test_tax_amount_is_rounded_independently():
    items = [SimpleNamespace(amount=Decimal("33.33"))]
    totals = recompute_totals(items, Decimal("7.5"), Decimal("0"))
    # 33.33 * 7.5% = 2.49975
    assert totals.tax_amount == Decimal("2.50")
    assert totals.total == Decimal("35.83")


def test_totals_of_empty_items_are_zero():
    totals = recompute_totals([], Decimal("10"), Decimal("0"))
    assert totals.subtotal == Decimal("0.00")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total == Decimal("0.00")


def test_draft_from_payload_collects_every_field_error():
    rows = [row(description=""), row(quantity="0"), row(unit_price="-3")]
    with pytest.raises(InvoiceValidationError) as exc:
        InvoiceDraft.from_payload(rows)
    locs = [error["loc"] for error in exc.value.errors]
    assert ["items", 0, "description"] in locs
    assert ["items", 1, "quantity"] in locs
    assert ["items", 2, "unit_price"] in locs


def test_draft_validate_requires_an_item():
    draft = InvoiceDraft.from_payload([])
    with pytest.raises(InvoiceValidationError) as exc:
        draft.validate()
    assert exc.value.errors[0]["msg"] == "Invoice must have at least one item"


def test_draft_recomputes_on_every_mutation():
    draft = InvoiceDraft(tax_rate="10")
    first = draft.add_item("Design", "2", "50")
    assert draft.totals.subtotal == Decimal("100.00")
    assert draft.totals.total == Decimal("110.00")

    second = draft.add_item("Hosting", "1", "25.50")
    assert draft.totals.subtotal == Decimal("125.50")
    assert draft.totals.tax_amount == Decimal("12.55")

    updated = draft.update_item(first.temp_id, quantity="3")
    assert updated.amount == Decimal("150.00")
    assert draft.totals.subtotal == Decimal("175.50")

    draft.set_discount("5.50")
    assert draft.totals.total == Decimal("187.55")

    draft.set_tax_rate("0")
    assert draft.totals.total == Decimal("170.00")

    draft.remove_item(second.temp_id)
    assert draft.totals.subtotal == Decimal("150.00")
    assert draft.totals.total == Decimal("144.50")


def test_draft_update_rejects_bad_value_and_keeps_item():
    draft = InvoiceDraft()
    item = draft.add_item("Design", "1", "80")
    with pytest.raises(InvoiceValidationError):
        draft.update_item(item.temp_id, quantity="-1")
    assert draft.items[0].quantity == Decimal("1")
    assert draft.totals.subtotal == Decimal("80.00")


def test_draft_unknown_temp_id_raises_key_error():
    draft = InvoiceDraft()
    with pytest.raises(KeyError):
        draft.remove_item("missing")


def test_draft_rejects_discount_above_subtotal_plus_tax():
    draft = InvoiceDraft.from_payload([row(unit_price="10")], tax_rate="10", discount="11.01")
    with pytest.raises(InvoiceValidationError) as exc:
        draft.validate()
    assert exc.value.errors[0]["loc"] == ["discount"]


def test_draft_keeps_client_temp_ids():
    draft = InvoiceDraft.from_payload([row(temp_id="row-a"), row(temp_id="row-b")])
    assert [item.temp_id for item in draft.items] == ["row-a", "row-b"]


def test_quantity_and_price_are_held_at_four_places_before_the_amount():
    item = LineItem(description="Metered", quantity=Decimal("1.00005"), unit_price=Decimal("0.33335"))
    recompute_line_amount(item)
    assert item.quantity == Decimal("1.0001")
    assert item.unit_price == Decimal("0.3334")
    assert item.amount == round2(item.quantity * item.unit_price)


def test_quantity_that_rounds_to_zero_is_rejected():
    with pytest.raises(InvoiceValidationError) as exc:
        InvoiceDraft.from_payload([row(quantity="0.00004", unit_price="1000")])
    assert exc.value.errors[0]["loc"] == ["items", 0, "quantity"]

    draft = InvoiceDraft()
    with pytest.raises(InvoiceValidationError):
        draft.add_item("Metered", "0.00004", "1000")
    assert draft.items == []
