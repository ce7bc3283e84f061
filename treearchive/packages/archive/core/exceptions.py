"""异常处理模块：定义统一的业务异常、树操作异常与响应格式。"""

from typing import Any, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from treearchive.packages.archive.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_INTERNAL_SERVER_ERROR,
    HTTP_STATUS_NOT_FOUND,
)


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data

    @property
    def msg(self) -> str:
        return str(self.detail)


class TreeError(AppException):
    """树结构操作相关异常的基类，`code` 由子类确定。"""

    default_code = HTTP_STATUS_BAD_REQUEST

    def __init__(self, msg: str, data: Optional[Any] = None) -> None:
        super().__init__(msg, self.default_code, data)


class NodeNotFound(TreeError):
    """节点 ID 在指定树中不存在（ID 过期或属于其它树）。"""

    default_code = HTTP_STATUS_NOT_FOUND


class InvalidMove(TreeError):
    """源节点与目标节点相同。"""


class CyclicMove(TreeError):
    """目标节点位于源节点子树内，移动会形成自包含结构。"""


class RelocationFailed(TreeError):
    """移动过程中存储层失败或复核不变式失败；抛出前事务已回滚。"""

    default_code = HTTP_STATUS_INTERNAL_SERVER_ERROR


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    """将 FastAPI 的 ``HTTPException`` 转换为统一响应格式。"""
    payload = {"msg": exc.detail, "data": getattr(exc, "data", None), "code": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=payload)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    """兜底处理：将未捕获异常转换为标准的 500 响应结构。"""
    payload = {
        "msg": "服务器内部错误",
        "data": None,
        "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
