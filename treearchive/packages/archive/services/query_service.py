"""只读派生查询：在固定父节点下按类型、标题、创建年份筛选直接子节点。

所有查询都按 ``tree_id`` 隔离，并通过
``tree_nodes -> object_references -> object_data`` 关联对象属性；
没有对象数据的节点不会出现在结果中。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, Select, cast, distinct, extract, func, select
from sqlalchemy.orm import Session, aliased

from treearchive.packages.archive.core.exceptions import NodeNotFound
from treearchive.packages.archive.core.timezone import format_local
from treearchive.packages.archive.models.objects import ObjectData, ObjectReference
from treearchive.packages.archive.models.tree import TreeNode

CREATE_YEAR = cast(extract("year", ObjectData.create_date), Integer)


@dataclass(frozen=True)
class ChildSummary:
    ref_id: int
    title: str
    create_date: Optional[datetime]

    def as_dict(self) -> dict:
        return {
            "ref_id": self.ref_id,
            "title": self.title,
            "create_date": format_local(self.create_date),
        }


class TreeQueryService:
    def __init__(self, tree_id: int) -> None:
        self.tree_id = tree_id

    def _children(self, *columns, parent_id: int, type_tag: str) -> Select:
        return (
            select(*columns)
            .select_from(TreeNode)
            .join(ObjectReference, ObjectReference.ref_id == TreeNode.id)
            .join(ObjectData, ObjectData.obj_id == ObjectReference.obj_id)
            .where(
                TreeNode.tree_id == self.tree_id,
                TreeNode.parent_id == parent_id,
                ObjectData.type == type_tag,
            )
        )

    def years_of_children(self, db: Session, parent_id: int, type_tag: str) -> set[int]:
        """返回 ``parent_id`` 下类型为 ``type_tag`` 的直接子节点的创建年份集合。"""
        stmt = self._children(distinct(CREATE_YEAR), parent_id=parent_id, type_tag=type_tag)
        return {int(year) for year in db.execute(stmt).scalars() if year is not None}

    def find_child_by_title(self, db: Session, parent_id: int, type_tag: str, title: str) -> int:
        """按标题精确匹配直接子节点；存在重名时返回其中任意一个（此处取 ID 最小者）。"""
        stmt = (
            self._children(TreeNode.id, parent_id=parent_id, type_tag=type_tag)
            .where(ObjectData.title == title)
            .order_by(TreeNode.id.asc())
            .limit(1)
        )
        child_id = db.execute(stmt).scalar()
        if child_id is None:
            raise NodeNotFound(
                f"节点 {parent_id} 下不存在标题为“{title}”的 {type_tag} 对象",
                {"parent_id": parent_id, "type": type_tag, "title": title, "tree_id": self.tree_id},
            )
        return child_id

    def children_in_year(self, db: Session, parent_id: int, type_tag: str, year: int) -> list[int]:
        stmt = (
            self._children(TreeNode.id, parent_id=parent_id, type_tag=type_tag)
            .where(CREATE_YEAR == year)
            .order_by(TreeNode.lft.asc())
        )
        return list(db.execute(stmt).scalars())

    def empty_children(
        self, db: Session, parent_id: int, type_tag: str, excluded_type: str
    ) -> list[ChildSummary]:
        """返回没有“实际内容”的直接子节点：其后代中除 ``excluded_type`` 外的对象数为 0。

        后代按嵌套集区间判定（同树且 ``lft``、``rgt`` 均落在子节点区间内），
        因此只挂着一个 ``excluded_type`` 记录的节点会被视为空。
        """
        inner = aliased(TreeNode)
        inner_ref = aliased(ObjectReference)
        inner_obj = aliased(ObjectData)
        content_count = (
            select(func.count())
            .select_from(inner)
            .join(inner_ref, inner_ref.ref_id == inner.id)
            .join(inner_obj, inner_obj.obj_id == inner_ref.obj_id)
            .where(
                inner.tree_id == TreeNode.tree_id,
                inner.lft > TreeNode.lft,
                inner.rgt < TreeNode.rgt,
                inner_obj.type != excluded_type,
            )
            .correlate(TreeNode)
            .scalar_subquery()
        )
        stmt = (
            self._children(
                TreeNode.id,
                ObjectData.title,
                ObjectData.create_date,
                parent_id=parent_id,
                type_tag=type_tag,
            )
            .where(content_count == 0)
            .order_by(TreeNode.lft.asc())
        )
        return [
            ChildSummary(ref_id=row.id, title=row.title, create_date=row.create_date)
            for row in db.execute(stmt)
        ]
