"""Invoice item schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceItemBase(BaseModel):
    product_id: Optional[int] = None
    description: str = ""
    quantity: Decimal
    unit_price: Decimal


class InvoiceItemCreate(InvoiceItemBase):
    description: str = Field(default="", max_length=255)
    # Client-side row identifier used while the form is being edited.
    temp_id: Optional[str] = None


class InvoiceItemRead(InvoiceItemBase):
    id: int
    invoice_id: int
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)
