"""Invoice template catalog and preview endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.core.settings import get_settings
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.invoice_template import InvoiceTemplateRead, TemplatePreviewRead
from backend.app.services.invoice_templates import build_template_preview, get_template_catalog

router = APIRouter(prefix="/invoice-templates", tags=["invoice_templates"])


@router.get("", response_model=List[InvoiceTemplateRead])
async def list_invoice_templates(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_template_catalog(db)


@router.get("/{template_id}/preview", response_model=TemplatePreviewRead)
async def preview_invoice_template(template_id: int, current_user: User = Depends(get_current_user)):
    return build_template_preview(template_id, get_settings().document_footer)
