"""测试夹具：为 pytest 提供数据库、客户端与树构造工具的共享配置。"""

import os
from datetime import datetime
from typing import Callable, Generator, Optional

TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test.db")
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"

# 必须在导入业务包之前写入：配置对象会被缓存
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TREE_ID"] = "1"
os.environ["MAIN_CATEGORY_ID"] = "10"
os.environ["ARCHIVE_CATEGORY_ID"] = "20"
os.environ["RELOCATION_VERIFY"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from treearchive.packages.archive.core.dependencies import get_db
from treearchive.packages.archive.crud.objects import object_data_crud
from treearchive.packages.archive.db import session as db_session
from treearchive.packages.archive.db.init_db import init_db
from treearchive.packages.archive.models import ObjectData, ObjectReference, TreeNode
from treearchive.main import app

from tests.helpers import node


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理。"""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    engine = db_session.build_engine(TEST_DATABASE_URL)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    init_db()
    yield

    engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    """每个用例开始前清空树与对象表，用例之间互不影响。"""
    with db_session.SessionLocal() as session:
        session.execute(delete(TreeNode))
        session.execute(delete(ObjectReference))
        session.execute(delete(ObjectData))
        session.commit()
    yield


@pytest.fixture()
def db_session_fixture() -> Generator[Session, None, None]:
    """提供给测试用例使用的数据库会话。"""
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session_fixture):
    """构建 FastAPI TestClient，并注入测试专用的数据库依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

@pytest.fixture()
def build_tree(db_session_fixture: Session) -> Callable[..., None]:
    """按嵌套结构插入一棵紧凑编号的树：先序遍历分配 lft/rgt，depth 逐层加一。"""

    def _insert(spec: dict, tree_id: int, parent_id: Optional[int], depth: int, counter: int) -> int:
        lft = counter
        counter += 1
        for child in spec["children"]:
            counter = _insert(child, tree_id, spec["id"], depth + 1, counter)
        db_session_fixture.add(
            TreeNode(id=spec["id"], tree_id=tree_id, parent_id=parent_id, lft=lft, rgt=counter, depth=depth)
        )
        if spec["type"] is not None:
            payload = {"obj_id": spec["id"], "type": spec["type"], "title": spec["title"]}
            if spec["created"] is not None:
                payload["create_date"] = spec["created"]
            object_data_crud.create_for_ref(db_session_fixture, spec["id"], payload, auto_commit=False)
        return counter + 1

    def _build(root: dict, *, tree_id: int = 1, root_depth: int = 0, parent_id: Optional[int] = None) -> None:
        _insert(root, tree_id, parent_id, root_depth, 1)
        db_session_fixture.commit()

    return _build


@pytest.fixture()
def insert_rows(db_session_fixture: Session) -> Callable[..., None]:
    """直接写入 ``(id, parent_id, lft, rgt, depth)`` 元组，用于构造带空档的树。"""

    def _insert(rows, *, tree_id: int = 1) -> None:
        for node_id, parent_id, lft, rgt, depth in rows:
            db_session_fixture.add(
                TreeNode(id=node_id, tree_id=tree_id, parent_id=parent_id, lft=lft, rgt=rgt, depth=depth)
            )
        db_session_fixture.commit()

    return _insert


@pytest.fixture()
def snapshot(db_session_fixture: Session) -> Callable[[int], dict[int, tuple]]:
    """读取一棵树当前的 ``{id: (parent_id, lft, rgt, depth)}``，绕过 Session 缓存。"""

    def _snapshot(tree_id: int = 1) -> dict[int, tuple]:
        db_session_fixture.expire_all()
        rows = db_session_fixture.execute(
            select(TreeNode.id, TreeNode.parent_id, TreeNode.lft, TreeNode.rgt, TreeNode.depth)
            .where(TreeNode.tree_id == tree_id)
        ).all()
        return {row.id: (row.parent_id, row.lft, row.rgt, row.depth) for row in rows}

    return _snapshot


@pytest.fixture()
def platform_tree(build_tree) -> None:
    """课程平台示例：主分类 10 下的课程与归档分类 20 下的年份分类（根节点 depth=1）。"""
    build_tree(
        node(
            1,
            node(
                10,
                node(101, node(1011, type="rolf"), type="crs", title="Analysis I", created=datetime(2019, 10, 1)),
                node(
                    102,
                    node(1021, type="rolf"),
                    node(1022, node(10221, type="file", title="skript.pdf"), type="fold", title="Skripte"),
                    type="crs",
                    title="Lineare Algebra",
                    created=datetime(2019, 4, 1),
                ),
                node(
                    103,
                    node(1031, type="rolf"),
                    node(1032, type="file", title="folien.pdf"),
                    type="crs",
                    title="Statistik",
                    created=datetime(2020, 10, 1),
                ),
                node(104, type="crs", title="Numerik", created=datetime(2023, 4, 1)),
                node(105, node(1051, type="rolf"), type="crs", title="Optimierung", created=datetime(2024, 4, 1)),
                node(106, type="cat", title="Sonstiges", created=datetime(2019, 1, 1)),
                type="cat",
                title="Kurse",
            ),
            node(
                20,
                node(201, type="cat", title="2019"),
                node(202, type="cat", title="2021"),
                node(203, type="crs", title="2020"),
                type="cat",
                title="Archiv",
            ),
            type="root",
            title="Repository",
        ),
        root_depth=1,
    )
