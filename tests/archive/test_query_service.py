"""派生查询（年份、标题、空节点）的测试。"""

from datetime import datetime

import pytest

from treearchive.packages.archive.core.exceptions import NodeNotFound
from treearchive.packages.archive.services.query_service import TreeQueryService

from tests.helpers import node

queries = TreeQueryService(1)


def test_years_of_children_are_distinct(db_session_fixture, build_tree):
    build_tree(
        node(
            1,
            node(2, type="crs", created=datetime(2019, 3, 1)),
            node(3, type="crs", created=datetime(2020, 5, 1)),
            node(4, type="crs", created=datetime(2020, 11, 30)),
            node(5, type="crs", created=datetime(2021, 1, 1)),
            type="cat",
        )
    )

    assert queries.years_of_children(db_session_fixture, 1, "crs") == {2019, 2020, 2021}


def test_years_ignore_other_types_and_grandchildren(db_session_fixture, platform_tree):
    years = queries.years_of_children(db_session_fixture, 10, "crs")

    # 106 是分类，2019 只因课程 101/102 出现一次
    assert years == {2019, 2020, 2023, 2024}
    assert queries.years_of_children(db_session_fixture, 10, "fold") == set()


def test_years_of_childless_parent_is_empty(db_session_fixture, platform_tree):
    assert queries.years_of_children(db_session_fixture, 104, "crs") == set()


def test_find_child_by_title(db_session_fixture, platform_tree):
    assert queries.find_child_by_title(db_session_fixture, 20, "cat", "2019") == 201
    assert queries.find_child_by_title(db_session_fixture, 20, "cat", "2021") == 202


def test_find_child_by_title_respects_type(db_session_fixture, platform_tree):
    with pytest.raises(NodeNotFound) as exc_info:
        queries.find_child_by_title(db_session_fixture, 20, "cat", "2020")

    assert exc_info.value.status_code == 404
    assert exc_info.value.data["title"] == "2020"


def test_find_child_by_title_only_looks_at_direct_children(db_session_fixture, platform_tree):
    with pytest.raises(NodeNotFound):
        queries.find_child_by_title(db_session_fixture, 1, "cat", "2019")


def test_duplicate_titles_return_lowest_id(db_session_fixture, build_tree):
    build_tree(
        node(
            30,
            node(32, type="cat", title="2022"),
            node(31, type="cat", title="2022"),
            type="cat",
        )
    )

    assert queries.find_child_by_title(db_session_fixture, 30, "cat", "2022") == 31


def test_children_in_year_follow_tree_order(db_session_fixture, platform_tree):
    assert queries.children_in_year(db_session_fixture, 10, "crs", 2019) == [101, 102]
    assert queries.children_in_year(db_session_fixture, 10, "crs", 2024) == [105]
    assert queries.children_in_year(db_session_fixture, 10, "crs", 2022) == []


def test_empty_children_ignore_bookkeeping_type(db_session_fixture, platform_tree):
    empty = queries.empty_children(db_session_fixture, 10, "crs", "rolf")

    assert [c.ref_id for c in empty] == [101, 104, 105]
    assert empty[0].as_dict() == {
        "ref_id": 101,
        "title": "Analysis I",
        "create_date": "2019-10-01 00:00:00",
    }


def test_nested_content_makes_child_non_empty(db_session_fixture, build_tree):
    build_tree(
        node(
            1,
            node(2, node(21, type="rolf"), node(22, node(221, type="file"), type="rolf"), type="crs"),
            node(3, node(31, type="rolf"), type="crs"),
            type="cat",
        )
    )

    empty = queries.empty_children(db_session_fixture, 1, "crs", "rolf")

    # 2 的文件挂在角色目录之下，仍算作内容
    assert [c.ref_id for c in empty] == [3]


def test_queries_are_scoped_by_tree(db_session_fixture, build_tree):
    build_tree(node(1, node(2, type="crs", created=datetime(2019, 1, 1)), type="cat"), tree_id=1)
    build_tree(node(5, node(6, type="crs", created=datetime(2030, 1, 1)), type="cat"), tree_id=2)

    assert queries.years_of_children(db_session_fixture, 1, "crs") == {2019}
    assert TreeQueryService(2).years_of_children(db_session_fixture, 5, "crs") == {2030}
    assert TreeQueryService(2).children_in_year(db_session_fixture, 1, "crs", 2019) == []
