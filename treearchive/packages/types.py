"""业务包描述：主应用只通过这里声明的入口与业务包交互。"""

from __future__ import annotations

from dataclasses import dataclass
from logging import Logger
from typing import Callable

from fastapi import APIRouter


@dataclass(frozen=True)
class AppPackage:
    """业务包对主应用暴露的路由、配置、日志、建表与异常处理入口。

    ``get_services`` 返回按配置装配好的服务集合，启动时预先构造一次，
    以便配置错误（例如树 ID 非法）在接收请求前暴露。
    """

    name: str
    description: str
    api_router: APIRouter
    get_settings: Callable[[], object]
    get_services: Callable[[], object]
    setup_logging: Callable[[], None]
    logger: Logger
    init_db: Callable[[], None]
    create_response: Callable[..., dict]
    http_exception_handler: Callable[..., object]
    generic_exception_handler: Callable[..., object]
