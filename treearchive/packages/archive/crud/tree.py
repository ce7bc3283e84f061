"""树节点 CRUD：嵌套集表的区间读取与批量区间更新。

本模块中的每一条语句都带有 ``tree_id`` 过滤条件，保证同表中的多棵树互不干扰，
即便边界数值恰好相同。三个批量更新均为单条 ``UPDATE ... SET col = CASE ...``，
其复杂度与被移动子树的大小无关；调用方负责把它们放进同一个事务。
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sqlalchemy import Row, case, select, update
from sqlalchemy.orm import Session

from treearchive.packages.archive.crud.base import CRUDBase
from treearchive.packages.archive.models.tree import TreeNode

# 读取节点位置时只取列值，避免 Session 身份映射返回批量更新前的旧对象
POSITION_COLUMNS = (
    TreeNode.id,
    TreeNode.tree_id,
    TreeNode.parent_id,
    TreeNode.lft,
    TreeNode.rgt,
    TreeNode.depth,
)


class CRUDTreeNode(CRUDBase[TreeNode]):
    """提供按树隔离的节点读取与三类区间更新。"""

    def fetch_positions(
        self,
        db: Session,
        tree_id: int,
        node_ids: Optional[Iterable[int]] = None,
        *,
        for_update: bool = False,
    ) -> Sequence[Row]:
        """读取节点的 ``(id, tree_id, parent_id, lft, rgt, depth)`` 行；``node_ids`` 为空时返回整棵树。"""
        stmt = select(*POSITION_COLUMNS).where(TreeNode.tree_id == tree_id)
        if node_ids is not None:
            stmt = stmt.where(TreeNode.id.in_(list(node_ids)))
        stmt = stmt.order_by(TreeNode.lft.asc())
        if for_update:
            stmt = stmt.with_for_update()
        return db.execute(stmt).all()

    def lock_tree(self, db: Session, tree_id: int) -> int:
        """对整棵树的行加排他锁直至事务结束；不支持行锁的方言（如 SQLite）忽略 FOR UPDATE。"""
        stmt = select(TreeNode.id).where(TreeNode.tree_id == tree_id).with_for_update()
        return len(db.execute(stmt).all())

    def open_gap(self, db: Session, *, tree_id: int, at: int, width: int) -> int:
        """在边界 ``at`` 之前腾出 ``width`` 个单位：``lft > at`` 与 ``rgt >= at`` 分别右移。"""
        stmt = (
            update(TreeNode)
            .where(TreeNode.tree_id == tree_id)
            .values(
                lft=case((TreeNode.lft > at, TreeNode.lft + width), else_=TreeNode.lft),
                rgt=case((TreeNode.rgt >= at, TreeNode.rgt + width), else_=TreeNode.rgt),
            )
            .execution_options(synchronize_session=False)
        )
        return db.execute(stmt).rowcount

    def shift_span(
        self,
        db: Session,
        *,
        tree_id: int,
        lft: int,
        rgt: int,
        offset: int,
        depth_offset: int,
        root_id: int,
        new_parent_id: int,
    ) -> int:
        """平移区间 ``[lft, rgt]`` 内的整棵子树，并只改写子树根节点的 ``parent_id``。"""
        stmt = (
            update(TreeNode)
            .where(
                TreeNode.tree_id == tree_id,
                TreeNode.lft >= lft,
                TreeNode.rgt <= rgt,
            )
            .values(
                parent_id=case((TreeNode.id == root_id, new_parent_id), else_=TreeNode.parent_id),
                lft=TreeNode.lft + offset,
                rgt=TreeNode.rgt + offset,
                depth=TreeNode.depth + depth_offset,
            )
            .execution_options(synchronize_session=False)
        )
        return db.execute(stmt).rowcount

    def close_gap(self, db: Session, *, tree_id: int, lft: int, rgt: int, width: int) -> int:
        """回收子树移走后留下的空档：``lft >= lft`` 与 ``rgt >= rgt`` 分别左移 ``width``。"""
        stmt = (
            update(TreeNode)
            .where(TreeNode.tree_id == tree_id)
            .values(
                lft=case((TreeNode.lft >= lft, TreeNode.lft - width), else_=TreeNode.lft),
                rgt=case((TreeNode.rgt >= rgt, TreeNode.rgt - width), else_=TreeNode.rgt),
            )
            .execution_options(synchronize_session=False)
        )
        return db.execute(stmt).rowcount


tree_node_crud = CRUDTreeNode(TreeNode)
