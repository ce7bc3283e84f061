"""依赖注入模块：封装 FastAPI 中复用度高的依赖函数。"""

from collections.abc import Generator

from sqlalchemy.orm import Session

from treearchive.packages.archive.db import session as db_session
from treearchive.packages.archive.services import TreeServices, get_services


def get_db() -> Generator[Session, None, None]:
    """生成一个数据库会话，并在请求结束后自动关闭。"""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_tree_services() -> TreeServices:
    """返回按配置装配的树服务集合；测试中可通过 ``dependency_overrides`` 替换。"""
    return get_services()
