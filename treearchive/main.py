"""应用入口：负责创建 FastAPI 实例并绑定生命周期事件。"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from treearchive.middleware.request_id import RequestIdMiddleware
from treearchive.packages import get_active_package
from treearchive.packages.archive.core.constants import HTTP_STATUS_UNPROCESSABLE_ENTITY

package = get_active_package()
package.setup_logging()
settings = package.get_settings()
logger = package.logger
create_response = package.create_response


@asynccontextmanager
async def lifespan(_: FastAPI):
    """初始化数据库表结构，确认服务可用后输出成功日志。"""
    package.init_db()
    services = package.get_services()
    logger.info(
        "SUCCESS - Application running at http://127.0.0.1:%s (tree_id=%s)",
        settings.app_port,
        services.locator.tree_id,
    )
    yield


app = FastAPI(
    title=settings.project_name,
    description=package.description,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request, exc):  # pragma: no cover - framework glue
    """将 ``HTTPException`` 转换为统一的响应结构。"""
    return await package.http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def custom_generic_exception_handler(request, exc):  # pragma: no cover - framework glue
    """捕获未预料异常并包装为标准错误响应。"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await package.generic_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):  # pragma: no cover - framework glue
    """统一处理请求体验证失败的场景。"""
    def _serialize(obj: Any) -> Any:
        if isinstance(obj, Exception):
            return str(obj)
        if isinstance(obj, dict):
            return {key: _serialize(value) for key, value in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [_serialize(item) for item in obj]
        return obj

    serialized_errors = _serialize(exc.errors())
    return JSONResponse(
        status_code=HTTP_STATUS_UNPROCESSABLE_ENTITY,
        content=create_response("请求参数验证失败", serialized_errors, HTTP_STATUS_UNPROCESSABLE_ENTITY),
    )


@app.get("/health")
async def health_check() -> dict:
    """提供健康检查接口，便于编排器与监控系统探活。"""
    return create_response("OK", {"status": "healthy"})


app.include_router(package.api_router, prefix=settings.api_v1_str)
