"""树结构完整性校验：检查一棵树的嵌套集编码与邻接表是否一致。

校验规则（均在单个 ``tree_id`` 范围内）：
- ``boundary_order``：每个节点 ``lft < rgt``；
- ``duplicate_boundary``：任意两个边界值不相同；
- ``overlap``：两个节点的区间要么不相交，要么严格包含；
- ``parent_mismatch``：紧邻包含某节点的区间即为其 ``parent_id`` 所指节点；
- ``depth_mismatch``：节点 ``depth`` 等于父节点 ``depth + 1``；
- ``multiple_roots``：一棵树只允许一个不被任何节点包含的根。

边界序列允许存在空档，校验不要求编号连续。
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from treearchive.packages.archive.crud.tree import tree_node_crud
from treearchive.packages.archive.services.node_locator import NodePosition


@dataclass(frozen=True)
class TreeViolation:
    node_id: int
    rule: str
    detail: str

    def as_dict(self) -> dict:
        return asdict(self)


def check_tree(nodes: Iterable[NodePosition]) -> list[TreeViolation]:
    """对一棵树的全部节点执行校验，返回违规列表（为空表示一致）。"""
    ordered = sorted(nodes, key=lambda n: n.lft)
    violations: list[TreeViolation] = []

    counts = Counter()
    for node in ordered:
        counts[node.lft] += 1
        counts[node.rgt] += 1
        if node.lft >= node.rgt:
            violations.append(
                TreeViolation(node.id, "boundary_order", f"lft={node.lft} 不小于 rgt={node.rgt}")
            )
    duplicated = {value for value, count in counts.items() if count > 1}
    for node in ordered:
        for value in (node.lft, node.rgt):
            if value in duplicated:
                violations.append(TreeViolation(node.id, "duplicate_boundary", f"边界值 {value} 被重复使用"))

    # 先序遍历：栈中保存当前节点的全部祖先，栈顶即紧邻包含者
    stack: list[NodePosition] = []
    root: Optional[NodePosition] = None
    for node in ordered:
        while stack and stack[-1].rgt < node.lft:
            stack.pop()
        container = stack[-1] if stack else None
        if container is not None and node.rgt > container.rgt:
            violations.append(
                TreeViolation(
                    node.id,
                    "overlap",
                    f"区间 [{node.lft}, {node.rgt}] 与节点 {container.id} 的 "
                    f"[{container.lft}, {container.rgt}] 部分重叠",
                )
            )
        if container is None:
            if root is not None:
                violations.append(
                    TreeViolation(node.id, "multiple_roots", f"节点 {root.id} 已是根节点")
                )
            else:
                root = node
        else:
            if node.parent_id != container.id:
                violations.append(
                    TreeViolation(
                        node.id,
                        "parent_mismatch",
                        f"parent_id={node.parent_id}，但紧邻包含它的节点是 {container.id}",
                    )
                )
            if node.depth != container.depth + 1:
                violations.append(
                    TreeViolation(
                        node.id,
                        "depth_mismatch",
                        f"depth={node.depth}，父节点 {container.id} 的 depth={container.depth}",
                    )
                )
        stack.append(node)
    return violations


class TreeIntegrityService:
    """读取整棵树并执行 :func:`check_tree`。"""

    def __init__(self, tree_id: int) -> None:
        self.tree_id = tree_id

    def load(self, db: Session) -> list[NodePosition]:
        return [NodePosition(**row._mapping) for row in tree_node_crud.fetch_positions(db, self.tree_id)]

    def check(self, db: Session) -> list[TreeViolation]:
        return check_tree(self.load(db))
