"""子树移动：把一个节点连同全部后代移动为另一节点的最后一个子节点。

整棵树（而不仅仅是被移动的行）在移动后仍是合法的嵌套集编码。移动分三步，
全部带 ``tree_id`` 过滤，并在同一事务中执行：

1. 在目标节点的右边界之前腾出 ``spread_width`` 个单位的空档；
2. 把源子树平移进空档，调整深度，并把子树根的 ``parent_id`` 改为目标节点；
3. 回收源子树原位置留下的空档。

若源子树整体位于目标右侧，第 1 步会把它一起右移 ``spread_width``，
第 2、3 步必须使用平移后的边界（``where_offset``）。
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from treearchive.packages.archive.core.exceptions import (
    CyclicMove,
    InvalidMove,
    RelocationFailed,
    TreeError,
)
from treearchive.packages.archive.core.logger import get_logger
from treearchive.packages.archive.crud.tree import tree_node_crud
from treearchive.packages.archive.db.transaction import transaction
from treearchive.packages.archive.services.node_locator import NodeLocator, NodePosition
from treearchive.packages.archive.services.tree_integrity import TreeIntegrityService

logger = get_logger("relocation")


@dataclass(frozen=True)
class RelocationPlan:
    """一次移动所需的全部偏移量，仅由移动前的源/目标位置推导。"""

    source: NodePosition
    target: NodePosition

    @property
    def spread_width(self) -> int:
        return self.source.width

    @property
    def source_after_target(self) -> bool:
        return self.source.lft > self.target.rgt

    @property
    def where_offset(self) -> int:
        return self.spread_width if self.source_after_target else 0

    @property
    def move_offset(self) -> int:
        if self.source_after_target:
            return self.target.rgt - self.source.lft - self.spread_width
        return self.target.rgt - self.source.lft

    @property
    def depth_offset(self) -> int:
        return self.target.depth - self.source.depth + 1

    @property
    def shifted_lft(self) -> int:
        """第 1 步之后源子树的左边界。"""
        return self.source.lft + self.where_offset

    @property
    def shifted_rgt(self) -> int:
        return self.source.rgt + self.where_offset


@dataclass(frozen=True)
class RelocationResult:
    source_id: int
    target_id: int
    tree_id: int
    old_parent_id: Optional[int]
    moved_nodes: int
    width: int
    move_offset: int
    depth_offset: int

    def as_dict(self) -> dict:
        return asdict(self)


def validate_move(source: NodePosition, target: NodePosition) -> None:
    """移动前校验：源与目标不能相同，目标不能位于源子树内。"""
    if source.id == target.id:
        raise InvalidMove(
            f"不能把节点 {source.id} 移动到它自身之下",
            {"source_id": source.id, "target_id": target.id},
        )
    if target.lft >= source.lft and target.rgt <= source.rgt:
        raise CyclicMove(
            f"目标节点 {target.id} 是源节点 {source.id} 的后代",
            {"source_id": source.id, "target_id": target.id},
        )


class SubtreeRelocator:
    """在单棵树内执行三步区间更新，整体原子提交或整体回滚。"""

    def __init__(
        self,
        tree_id: int,
        *,
        verify: bool = True,
        lock: bool = True,
        locator: Optional[NodeLocator] = None,
        integrity: Optional[TreeIntegrityService] = None,
    ) -> None:
        self.tree_id = tree_id
        self.verify = verify
        self.lock = lock
        self.locator = locator or NodeLocator(tree_id)
        self.integrity = integrity or TreeIntegrityService(tree_id)

    def plan(self, db: Session, source_id: int, target_id: int) -> RelocationPlan:
        """解析源/目标并校验，不做任何写入。"""
        source, target = self.locator.locate_many(db, source_id, target_id)
        validate_move(source, target)
        return RelocationPlan(source=source, target=target)

    def relocate(self, db: Session, source_id: int, target_id: int) -> RelocationResult:
        logger.info(
            "relocate.start tree_id=%s source_id=%s target_id=%s", self.tree_id, source_id, target_id
        )
        try:
            with transaction(db):
                if self.lock:
                    tree_node_crud.lock_tree(db, self.tree_id)
                plan = self.plan(db, source_id, target_id)
                moved = self._apply(db, plan)
                if self.verify:
                    self._verify(db, plan)
        except TreeError as exc:
            logger.warning(
                "relocate.rejected tree_id=%s source_id=%s target_id=%s reason=%s",
                self.tree_id,
                source_id,
                target_id,
                exc.msg,
            )
            raise
        except SQLAlchemyError as exc:
            logger.exception(
                "relocate.failed tree_id=%s source_id=%s target_id=%s", self.tree_id, source_id, target_id
            )
            raise RelocationFailed(
                f"移动节点 {source_id} 失败，已回滚",
                {"source_id": source_id, "target_id": target_id, "tree_id": self.tree_id},
            ) from exc

        result = RelocationResult(
            source_id=source_id,
            target_id=target_id,
            tree_id=self.tree_id,
            old_parent_id=plan.source.parent_id,
            moved_nodes=moved,
            width=plan.spread_width,
            move_offset=plan.move_offset,
            depth_offset=plan.depth_offset,
        )
        logger.info(
            "relocate.done tree_id=%s source_id=%s target_id=%s moved=%s offset=%s depth_offset=%s",
            self.tree_id,
            source_id,
            target_id,
            moved,
            plan.move_offset,
            plan.depth_offset,
        )
        return result

    def _apply(self, db: Session, plan: RelocationPlan) -> int:
        tree_node_crud.open_gap(db, tree_id=self.tree_id, at=plan.target.rgt, width=plan.spread_width)
        moved = tree_node_crud.shift_span(
            db,
            tree_id=self.tree_id,
            lft=plan.shifted_lft,
            rgt=plan.shifted_rgt,
            offset=plan.move_offset,
            depth_offset=plan.depth_offset,
            root_id=plan.source.id,
            new_parent_id=plan.target.id,
        )
        if moved < 1:
            raise RelocationFailed(
                f"节点 {plan.source.id} 在平移区间 [{plan.shifted_lft}, {plan.shifted_rgt}] 中未命中任何行",
                {"source_id": plan.source.id, "tree_id": self.tree_id},
            )
        tree_node_crud.close_gap(
            db,
            tree_id=self.tree_id,
            lft=plan.shifted_lft,
            rgt=plan.shifted_rgt,
            width=plan.spread_width,
        )
        return moved

    def _verify(self, db: Session, plan: RelocationPlan) -> None:
        violations = self.integrity.check(db)
        if violations:
            raise RelocationFailed(
                f"移动节点 {plan.source.id} 后树 {self.tree_id} 不再一致，已回滚",
                {
                    "source_id": plan.source.id,
                    "target_id": plan.target.id,
                    "violations": [v.as_dict() for v in violations[:50]],
                },
            )
