"""测试辅助：描述待插入树结构的小工具。"""

from datetime import datetime
from typing import Any, Optional


def node(
    node_id: int,
    *children: dict,
    type: Optional[str] = None,
    title: Optional[str] = None,
    created: Optional[datetime] = None,
) -> dict[str, Any]:
    """描述一个待插入的节点；``type`` 为空时只写树节点，不写对象数据。"""
    return {
        "id": node_id,
        "type": type,
        "title": title if title is not None else f"node-{node_id}",
        "created": created,
        "children": list(children),
    }
