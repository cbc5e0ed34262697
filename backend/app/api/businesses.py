"""Business profile endpoints."""

import base64
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from backend.app.core.errors import InvoiceValidationError
from backend.app.core.security import get_current_user
from backend.app.core.settings import get_settings
from backend.app.crud.crud_business import business_crud
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.business import BusinessCreate, BusinessRead, BusinessUpdate

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get("", response_model=List[BusinessRead])
async def list_businesses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return business_crud.get_multi(db, owner_id=current_user.id)


@router.post("", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
async def create_business(
    business_in: BusinessCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return business_crud.create(db, obj_in=business_in, owner_id=current_user.id)


@router.get("/{business_id}", response_model=BusinessRead)
async def get_business(business_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return business_crud.get(db, obj_id=business_id, owner_id=current_user.id)


@router.put("/{business_id}", response_model=BusinessRead)
async def update_business(
    business_id: int,
    business_in: BusinessUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_crud.get(db, obj_id=business_id, owner_id=current_user.id)
    return business_crud.update(db, db_obj=business, obj_in=business_in)


@router.delete("/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business(business_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    business = business_crud.get(db, obj_id=business_id, owner_id=current_user.id)
    business_crud.delete(db, db_obj=business)


@router.post("/{business_id}/logo", response_model=BusinessRead)
async def upload_business_logo(
    business_id: int,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_crud.get(db, obj_id=business_id, owner_id=current_user.id)
    if file is None:
        raise InvoiceValidationError.for_field(["file"], "No file uploaded")
    content = await file.read()
    if not content:
        raise InvoiceValidationError.for_field(["file"], "No file uploaded")
    if len(content) > get_settings().max_logo_bytes:
        raise InvoiceValidationError.for_field(["file"], "Logo exceeds the maximum upload size")
    media_type = file.content_type or "application/octet-stream"
    data_url = f"data:{media_type};base64,{base64.b64encode(content).decode('ascii')}"
    return business_crud.set_logo(db, db_obj=business, data_url=data_url)
