"""Owner-scoped CRUD helpers shared by the catalog resources."""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from backend.app.core.errors import OwnershipError, ResourceNotFoundError, StorageError
from backend.app.db.base_class import Base

LOGGER = structlog.get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


def commit_or_raise(db: Session, event: str, **context: Any) -> None:
    """Commit the unit of work, rolling back and raising StorageError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("storage_failure", operation=event, **context)
        raise StorageError() from exc


class CRUDOwned(Generic[ModelType]):
    """Records scoped by ``owner_id``: unknown ids are 404, foreign ids are 403."""

    order_by: Optional[str] = None

    def __init__(self, model: Type[ModelType], resource: str):
        self.model = model
        self.resource = resource

    def query(self, db: Session, *, owner_id: int) -> Query:
        query = db.query(self.model).filter(self.model.owner_id == owner_id)
        if self.order_by:
            query = query.order_by(getattr(self.model, self.order_by).desc())
        return query

    def get(self, db: Session, *, obj_id: int, owner_id: int) -> ModelType:
        obj = db.get(self.model, obj_id)
        if obj is None:
            raise ResourceNotFoundError(self.resource)
        if obj.owner_id != owner_id:
            raise OwnershipError(self.resource)
        return obj

    def get_optional(self, db: Session, *, obj_id: Optional[int], owner_id: int) -> Optional[ModelType]:
        if obj_id is None:
            return None
        return self.get(db, obj_id=obj_id, owner_id=owner_id)

    def get_multi(self, db: Session, *, owner_id: int) -> List[ModelType]:
        return self.query(db, owner_id=owner_id).all()

    def check_references(self, db: Session, *, data: Dict[str, Any], owner_id: int) -> None:
        """Hook for resources that point at other owned records."""

    def create(self, db: Session, *, obj_in: BaseModel, owner_id: int) -> ModelType:
        data = obj_in.model_dump()
        self.check_references(db, data=data, owner_id=owner_id)
        obj = self.model(owner_id=owner_id, **data)
        db.add(obj)
        commit_or_raise(db, f"{self.resource.lower()}_create", owner_id=owner_id)
        db.refresh(obj)
        return obj

    def update(self, db: Session, *, db_obj: ModelType, obj_in: BaseModel) -> ModelType:
        update_data = obj_in.model_dump(exclude_unset=True)
        self.check_references(db, data=update_data, owner_id=db_obj.owner_id)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        commit_or_raise(db, f"{self.resource.lower()}_update", id=db_obj.id)
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: ModelType) -> None:
        db.delete(db_obj)
        commit_or_raise(db, f"{self.resource.lower()}_delete", id=db_obj.id)
