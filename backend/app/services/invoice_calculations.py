"""Invoice computation engine.

Derived fields (line amount, subtotal, tax amount, total) are rounded half-up
to two places independently, each from the already-rounded inputs, so a sum of
line amounts and the document totals never drift apart by a cent.
Quantity and unit price are first rounded half-up to four places, the scale
they are stored at, so a stored line always reproduces its own amount.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, NamedTuple, Optional
from uuid import uuid4

from backend.app.core.errors import InvoiceValidationError

TWO_PLACES = Decimal("0.01")
# Column scale for quantity and unit price.
FOUR_PLACES = Decimal("0.0001")
ZERO = Decimal("0.00")


def to_decimal(value: Any, loc: Optional[List[Any]] = None) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvoiceValidationError.for_field(loc or [], "Must be a number")


def round2(value: Any) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round4(value: Any, loc: Optional[List[Any]] = None) -> Decimal:
    try:
        return to_decimal(value, loc).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvoiceValidationError.for_field(loc or [], "Must be a finite number")


@dataclass
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal = ZERO
    product_id: Optional[int] = None
    temp_id: str = field(default_factory=lambda: uuid4().hex)


class InvoiceTotals(NamedTuple):
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def line_item_errors(item: LineItem, loc: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
    loc = loc or []
    errors = []
    if not (item.description or "").strip():
        errors.append({"loc": loc + ["description"], "msg": "Description is required"})
    if round4(item.quantity, loc + ["quantity"]) <= 0:
        errors.append({"loc": loc + ["quantity"], "msg": "Quantity must be greater than 0"})
    if round4(item.unit_price, loc + ["unit_price"]) < 0:
        errors.append({"loc": loc + ["unit_price"], "msg": "Unit price must be non-negative"})
    return errors


def recompute_line_amount(item: LineItem) -> Decimal:
    """Set ``item.amount`` to ``round2(quantity * unit_price)`` and return it."""
    quantity = round4(item.quantity, ["quantity"])
    unit_price = round4(item.unit_price, ["unit_price"])
    if quantity <= 0:
        raise InvoiceValidationError.for_field(["quantity"], "Quantity must be greater than 0")
    if unit_price < 0:
        raise InvoiceValidationError.for_field(["unit_price"], "Unit price must be non-negative")
    item.quantity = quantity
    item.unit_price = unit_price
    item.amount = round2(quantity * unit_price)
    return item.amount


def recompute_totals(items: Iterable[Any], tax_rate_percent: Any, discount_absolute: Any) -> InvoiceTotals:
    """Derive subtotal, tax amount and total from line amounts, a tax rate and an absolute discount."""
    subtotal = round2(sum((to_decimal(item.amount) for item in items), ZERO))
    tax_amount = round2(subtotal * to_decimal(tax_rate_percent) / Decimal("100"))
    total = round2(subtotal + tax_amount - to_decimal(discount_absolute))
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)


def adjustment_errors(totals: InvoiceTotals, tax_rate: Decimal, discount: Decimal) -> List[Dict[str, Any]]:
    errors = []
    if tax_rate < 0:
        errors.append({"loc": ["tax_rate"], "msg": "Tax rate must be non-negative"})
    if discount < 0:
        errors.append({"loc": ["discount"], "msg": "Discount must be non-negative"})
    elif totals.total < 0:
        errors.append({"loc": ["discount"], "msg": "Discount cannot exceed subtotal plus tax"})
    return errors


class InvoiceDraft:
    """In-progress invoice whose derived fields are recomputed on every mutation."""

    def __init__(self, tax_rate: Any = ZERO, discount: Any = ZERO):
        self.items: List[LineItem] = []
        self.tax_rate = to_decimal(tax_rate, ["tax_rate"])
        self.discount = to_decimal(discount, ["discount"])
        self.totals = recompute_totals(self.items, self.tax_rate, self.discount)

    @classmethod
    def from_payload(cls, items: Iterable[Any], tax_rate: Any = ZERO, discount: Any = ZERO) -> "InvoiceDraft":
        """Build a draft from submitted rows, collecting every field-level error before raising."""
        draft = cls(tax_rate=tax_rate, discount=discount)
        errors: List[Dict[str, Any]] = []
        for index, row in enumerate(items):
            loc = ["items", index]
            item = LineItem(
                description=(row.description or "").strip(),
                quantity=round4(row.quantity, loc + ["quantity"]),
                unit_price=round4(row.unit_price, loc + ["unit_price"]),
                product_id=row.product_id,
                temp_id=getattr(row, "temp_id", None) or uuid4().hex,
            )
            item_errors = line_item_errors(item, loc)
            if item_errors:
                errors.extend(item_errors)
                continue
            recompute_line_amount(item)
            draft.items.append(item)
        if errors:
            raise InvoiceValidationError(errors=errors)
        draft._recompute()
        return draft

    def _recompute(self) -> InvoiceTotals:
        self.totals = recompute_totals(self.items, self.tax_rate, self.discount)
        return self.totals

    def _find(self, temp_id: str) -> LineItem:
        for item in self.items:
            if item.temp_id == temp_id:
                return item
        raise KeyError(temp_id)

    def add_item(
        self,
        description: str,
        quantity: Any,
        unit_price: Any,
        product_id: Optional[int] = None,
        temp_id: Optional[str] = None,
    ) -> LineItem:
        item = LineItem(
            description=(description or "").strip(),
            quantity=round4(quantity, ["quantity"]),
            unit_price=round4(unit_price, ["unit_price"]),
            product_id=product_id,
            temp_id=temp_id or uuid4().hex,
        )
        errors = line_item_errors(item)
        if errors:
            raise InvoiceValidationError(errors=errors)
        recompute_line_amount(item)
        self.items.append(item)
        self._recompute()
        return item

    def update_item(self, temp_id: str, **changes: Any) -> LineItem:
        item = self._find(temp_id)
        candidate = LineItem(
            description=(changes.get("description", item.description) or "").strip(),
            quantity=round4(changes.get("quantity", item.quantity), ["quantity"]),
            unit_price=round4(changes.get("unit_price", item.unit_price), ["unit_price"]),
            product_id=changes.get("product_id", item.product_id),
            temp_id=item.temp_id,
        )
        errors = line_item_errors(candidate)
        if errors:
            raise InvoiceValidationError(errors=errors)
        recompute_line_amount(candidate)
        self.items[self.items.index(item)] = candidate
        self._recompute()
        return candidate

    def remove_item(self, temp_id: str) -> None:
        self.items.remove(self._find(temp_id))
        self._recompute()

    def set_tax_rate(self, tax_rate: Any) -> InvoiceTotals:
        self.tax_rate = to_decimal(tax_rate, ["tax_rate"])
        return self._recompute()

    def set_discount(self, discount: Any) -> InvoiceTotals:
        self.discount = to_decimal(discount, ["discount"])
        return self._recompute()

    def validate(self) -> InvoiceTotals:
        """Check the draft is ready to persist: at least one item and sane adjustments."""
        errors = []
        if not self.items:
            errors.append({"loc": ["items"], "msg": "Invoice must have at least one item"})
        errors.extend(adjustment_errors(self.totals, self.tax_rate, self.discount))
        if errors:
            raise InvoiceValidationError(errors=errors)
        return self.totals
