"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.schemas.invoice_item import InvoiceItemCreate, InvoiceItemRead


class InvoiceHeaderBase(BaseModel):
    invoice_number: str
    business_id: int
    client_id: int
    issue_date: date
    due_date: date
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    notes: Optional[str] = None
    template_id: int = 1


class InvoiceCreate(InvoiceHeaderBase):
    items: List[InvoiceItemCreate] = Field(default_factory=list)


class InvoiceUpdate(BaseModel):
    invoice_number: Optional[str] = None
    business_id: Optional[int] = None
    client_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = None
    tax_rate: Optional[Decimal] = None
    discount: Optional[Decimal] = None
    notes: Optional[str] = None
    template_id: Optional[int] = None


class InvoiceStatusUpdate(BaseModel):
    status: str


class InvoiceItemsReplace(BaseModel):
    items: List[InvoiceItemCreate] = Field(default_factory=list)


class InvoiceRead(InvoiceHeaderBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class InvoiceWithItems(BaseModel):
    invoice: InvoiceRead
    items: List[InvoiceItemRead]


class InvoiceCalculationRequest(BaseModel):
    tax_rate: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    items: List[InvoiceItemCreate] = Field(default_factory=list)


class CalculatedLine(BaseModel):
    temp_id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal


class InvoiceCalculationRead(BaseModel):
    items: List[CalculatedLine]
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


class InvoiceNumberSuggestion(BaseModel):
    invoice_number: str
