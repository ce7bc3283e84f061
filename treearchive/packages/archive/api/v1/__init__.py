"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from treearchive.packages.archive.api.v1.endpoints import courses, tree

api_router = APIRouter()
api_router.include_router(tree.router)
api_router.include_router(courses.router)
api_router.include_router(courses.archive_router)
