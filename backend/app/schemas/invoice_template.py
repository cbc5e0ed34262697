"""Invoice template schemas."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict


class InvoiceTemplateRead(BaseModel):
    id: int
    name: str
    is_default: bool = False
    is_system: bool = True

    model_config = ConfigDict(from_attributes=True)


class TemplatePreviewBlock(BaseModel):
    block: str
    content: Dict[str, Any]


class TemplatePreviewRead(BaseModel):
    template_id: int
    name: str
    available: bool
    blocks: List[TemplatePreviewBlock]
