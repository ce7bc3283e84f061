"""树节点与子树移动相关的请求/响应模型。"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from treearchive.packages.archive.api.v1.schemas.common import ResponseEnvelope


class NodePositionItem(BaseModel):
    """节点在嵌套集中的位置。"""

    id: int
    tree_id: int
    parent_id: Optional[int]
    lft: int
    rgt: int
    depth: int
    width: int
    title: Optional[str] = None
    type: Optional[str] = None


NodePositionResponse = ResponseEnvelope[NodePositionItem]
NodeListResponse = ResponseEnvelope[list[NodePositionItem]]


class MoveRequest(BaseModel):
    """把 ``source_id`` 及其子树移动为 ``target_id`` 的最后一个子节点。"""

    source_id: int = Field(..., ge=0)
    target_id: int = Field(..., ge=0)


class RelocationItem(BaseModel):
    source_id: int
    target_id: int
    tree_id: int
    old_parent_id: Optional[int]
    moved_nodes: int
    width: int
    move_offset: int
    depth_offset: int


RelocationResponse = ResponseEnvelope[RelocationItem]


class ViolationItem(BaseModel):
    node_id: int
    rule: str
    detail: str


class IntegrityReport(BaseModel):
    tree_id: int
    node_count: int
    consistent: bool
    violations: list[ViolationItem]


IntegrityResponse = ResponseEnvelope[IntegrityReport]
