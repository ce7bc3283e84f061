"""CRUD 基类：为各实体提供通用的数据访问方法。"""

from typing import Generic, Type, TypeVar

from sqlalchemy.orm import Session

from treearchive.packages.archive.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """封装通用的查询与保存逻辑。"""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def save(self, db: Session, db_obj: ModelType, *, auto_commit: bool = True) -> ModelType:
        db.add(db_obj)
        if auto_commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def query(self, db: Session):
        return db.query(self.model)
