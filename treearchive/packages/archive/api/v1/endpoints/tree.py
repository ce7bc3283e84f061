"""树节点查询与子树移动路由。"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from treearchive.packages.archive.api.v1.schemas.tree import (
    IntegrityResponse,
    MoveRequest,
    NodeListResponse,
    NodePositionResponse,
    RelocationResponse,
)
from treearchive.packages.archive.core.constants import HTTP_STATUS_OK
from treearchive.packages.archive.core.dependencies import get_db, get_tree_services
from treearchive.packages.archive.core.responses import create_response
from treearchive.packages.archive.crud.objects import object_data_crud
from treearchive.packages.archive.services import TreeServices

router = APIRouter(prefix="/tree", tags=["tree"])


@router.get("/nodes", response_model=NodeListResponse)
def list_nodes(
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> NodeListResponse:
    """按先序（lft 升序）返回整棵树的节点位置。"""
    positions = services.integrity.load(db)
    return create_response("获取树节点成功", [p.as_dict() for p in positions], HTTP_STATUS_OK)


@router.get("/nodes/{node_id}", response_model=NodePositionResponse)
def get_node(
    node_id: int,
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> NodePositionResponse:
    """返回单个节点的位置，附带对象标题与类型（若存在对象数据）。"""
    data = services.locator.locate(db, node_id).as_dict()
    obj = object_data_crud.get_by_ref(db, node_id)
    if obj is not None:
        data.update(title=obj.title, type=obj.type)
    return create_response("获取节点成功", data, HTTP_STATUS_OK)


@router.post("/move", response_model=RelocationResponse)
def move_node(
    payload: MoveRequest,
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> RelocationResponse:
    """把源节点及其子树移动为目标节点的最后一个子节点。"""
    result = services.relocator.relocate(db, payload.source_id, payload.target_id)
    return create_response("移动节点成功", result.as_dict(), HTTP_STATUS_OK)


@router.get("/integrity", response_model=IntegrityResponse)
def check_integrity(
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> IntegrityResponse:
    """校验整棵树的嵌套集编码，返回违规明细。"""
    positions = services.integrity.load(db)
    violations = services.integrity.check(db)
    report = {
        "tree_id": services.integrity.tree_id,
        "node_count": len(positions),
        "consistent": not violations,
        "violations": [v.as_dict() for v in violations],
    }
    return create_response("树结构校验完成", report, HTTP_STATUS_OK)
