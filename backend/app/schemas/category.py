"""Category schemas for products and expenses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)


class CategoryRead(BaseModel):
    id: int
    owner_id: int
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
