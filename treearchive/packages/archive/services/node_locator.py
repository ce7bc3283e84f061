"""节点定位：在指定树中解析节点当前的 ``{parent_id, lft, rgt, depth}``。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from treearchive.packages.archive.core.exceptions import NodeNotFound
from treearchive.packages.archive.crud.tree import tree_node_crud


@dataclass(frozen=True)
class NodePosition:
    """某一时刻节点在嵌套集中的位置快照；后续批量更新不会改变它。"""

    id: int
    tree_id: int
    parent_id: Optional[int]
    lft: int
    rgt: int
    depth: int

    @property
    def width(self) -> int:
        return self.rgt - self.lft + 1

    def contains(self, other: "NodePosition") -> bool:
        """``other`` 是否落在本节点的闭区间内（含自身）。"""
        return self.tree_id == other.tree_id and other.lft >= self.lft and other.rgt <= self.rgt

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "tree_id": self.tree_id,
            "parent_id": self.parent_id,
            "lft": self.lft,
            "rgt": self.rgt,
            "depth": self.depth,
            "width": self.width,
        }


class NodeLocator:
    def __init__(self, tree_id: int) -> None:
        self.tree_id = tree_id

    def locate(self, db: Session, node_id: int, *, for_update: bool = False) -> NodePosition:
        rows = tree_node_crud.fetch_positions(db, self.tree_id, [node_id], for_update=for_update)
        if not rows:
            raise NodeNotFound(
                f"节点 {node_id} 不存在于树 {self.tree_id} 中",
                {"node_id": node_id, "tree_id": self.tree_id},
            )
        return NodePosition(**rows[0]._mapping)

    def locate_many(self, db: Session, *node_ids: int, for_update: bool = False) -> list[NodePosition]:
        """一次查询解析多个节点，按传入顺序返回；任一缺失即抛出 ``NodeNotFound``。"""
        rows = tree_node_crud.fetch_positions(db, self.tree_id, set(node_ids), for_update=for_update)
        found = {row.id: NodePosition(**row._mapping) for row in rows}
        missing = [node_id for node_id in node_ids if node_id not in found]
        if missing:
            raise NodeNotFound(
                f"节点 {', '.join(str(i) for i in missing)} 不存在于树 {self.tree_id} 中",
                {"node_ids": missing, "tree_id": self.tree_id},
            )
        return [found[node_id] for node_id in node_ids]
