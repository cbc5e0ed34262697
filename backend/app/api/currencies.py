"""Supported currency catalogue."""

from typing import List

from fastapi import APIRouter

from backend.app.schemas.currency import CurrencyRead
from backend.app.services.formatting import CURRENCIES

router = APIRouter(prefix="/currencies", tags=["currencies"])


@router.get("", response_model=List[CurrencyRead])
async def list_currencies():
    return CURRENCIES
