"""对象数据 CRUD：按引用 ID 读取或登记对象属性。"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from treearchive.packages.archive.crud.base import CRUDBase
from treearchive.packages.archive.models.objects import ObjectData, ObjectReference


class CRUDObjectData(CRUDBase[ObjectData]):
    def get_by_ref(self, db: Session, ref_id: int) -> Optional[ObjectData]:
        return (
            self.query(db)
            .join(ObjectReference, ObjectReference.obj_id == ObjectData.obj_id)
            .filter(ObjectReference.ref_id == ref_id)
            .first()
        )

    def create_for_ref(
        self, db: Session, ref_id: int, obj_in: Dict[str, Any], *, auto_commit: bool = True
    ) -> ObjectData:
        """登记对象数据并挂上引用 ``ref_id``（对象与引用一对一的常见场景）。"""
        db_obj = self.model(**obj_in)
        db_obj.references.append(ObjectReference(ref_id=ref_id))
        return self.save(db, db_obj, auto_commit=auto_commit)


object_data_crud = CRUDObjectData(ObjectData)
