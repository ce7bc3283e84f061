"""对象属性模型：树节点通过引用表关联到对象数据（标题、类型、创建时间）。

查询层只读这些表，移动子树时从不改动它们：
`tree_nodes.id = object_references.ref_id`，`object_references.obj_id = object_data.obj_id`。
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from treearchive.packages.archive.models.base import Base


class ObjectData(Base):
    """对象主数据；`type` 为类型标记，例如 `crs`（课程）、`cat`（分类）、`rolf`（角色目录）。"""

    __tablename__ = "object_data"

    obj_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(String(4), index=True)
    title: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    create_date: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    last_update: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    references: Mapped[list["ObjectReference"]] = relationship(back_populates="object")


class ObjectReference(Base):
    """对象引用：同一对象可以在树中出现多次，每次出现对应一个 ref_id（即树节点 ID）。"""

    __tablename__ = "object_references"

    ref_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    obj_id: Mapped[int] = mapped_column(Integer, ForeignKey("object_data.obj_id"), index=True)

    object: Mapped[ObjectData] = relationship(back_populates="references")
