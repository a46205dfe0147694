from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy import asc, desc
from sqlalchemy.orm import Session
from property_lister.core.database import Base, RecordNotFound

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

# (column name, 1 ascending | -1 descending)
SortSpec = Sequence[Tuple[str, int]]

class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Document-style operations over one table: find_one, find, count, create, update, delete."""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _query(self, db: Session, filters: Optional[Dict[str, Any]] = None, criteria: Sequence[Any] = ()):
        query = db.query(self.model)
        if filters:
            query = query.filter_by(**filters)
        if criteria:
            query = query.filter(*criteria)
        return query

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.get(self.model, id)

    def get_or_404(self, db: Session, id: Any) -> ModelType:
        obj = self.get(db, id)
        if obj is None:
            raise RecordNotFound(f"{self.model.__name__} not found")
        return obj

    def find_one(self, db: Session, *, criteria: Sequence[Any] = (), **filters: Any) -> Optional[ModelType]:
        return self._query(db, filters, criteria).first()

    def find(
        self,
        db: Session,
        *,
        criteria: Sequence[Any] = (),
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        **filters: Any
    ) -> List[ModelType]:
        query = self._query(db, filters, criteria)
        for column, direction in sort or ():
            field = getattr(self.model, column)
            query = query.order_by(desc(field) if direction < 0 else asc(field))
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, db: Session, *, criteria: Sequence[Any] = (), **filters: Any) -> int:
        return self._query(db, filters, criteria).count()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], commit: bool = True) -> ModelType:
        if isinstance(obj_in, dict):
            obj_in_data = obj_in
        else:
            obj_in_data = obj_in.model_dump(by_alias=False)
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        db.flush() # Populate defaults
        if commit:
            db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True, by_alias=False)
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, id: Any) -> Optional[ModelType]:
        obj = self.get(db, id)
        if not obj:
            return None
        db.delete(obj)
        db.commit()
        return obj
