"""树节点模型：邻接表（parent_id）与嵌套集（lft/rgt/depth）双编码。

存储规则：
- 同一张表承载多棵树，`tree_id` 为分区键；所有区间运算都必须带上 `tree_id`；
- `id` 在整张表内唯一（即对象引用 ID），不仅仅在单棵树内唯一；
- 节点的全部后代恰好是同树内 `lft`、`rgt` 均落在 (lft, rgt) 开区间内的节点；
- `parent_id` 与嵌套集包含关系保持同步，`depth` 等于父节点 `depth + 1`。
"""

from typing import Optional

from sqlalchemy import CheckConstraint, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from treearchive.packages.archive.models.base import Base


class TreeNode(Base):
    __tablename__ = "tree_nodes"
    __table_args__ = (
        # 边界唯一性不做数据库约束：批量区间更新过程中会短暂重叠
        CheckConstraint("lft < rgt", name="boundaries"),
        Index("ix_tree_nodes_tree_lft", "tree_id", "lft"),
        Index("ix_tree_nodes_tree_rgt", "tree_id", "rgt"),
        Index("ix_tree_nodes_tree_parent", "tree_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    tree_id: Mapped[int] = mapped_column(Integer, nullable=False)
    # 根节点为 NULL（或 0，取决于数据来源）
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lft: Mapped[int] = mapped_column(Integer, nullable=False)
    rgt: Mapped[int] = mapped_column(Integer, nullable=False)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def width(self) -> int:
        return self.rgt - self.lft + 1

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"TreeNode(id={self.id}, tree_id={self.tree_id}, parent_id={self.parent_id}, "
            f"lft={self.lft}, rgt={self.rgt}, depth={self.depth})"
        )
