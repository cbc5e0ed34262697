"""Currency catalogue schema."""

from pydantic import BaseModel


class CurrencyRead(BaseModel):
    code: str
    name: str
    symbol: str
