# earnings_ledger/crud/base.py
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from earnings_ledger.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: str) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()
