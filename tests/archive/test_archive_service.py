"""课程归档流程的测试。"""

from datetime import date

import pytest

from treearchive.packages.archive.services.archive_service import (
    STATUS_KEPT,
    STATUS_MOVED,
    STATUS_PLANNED,
    STATUS_SKIPPED,
    ArchiveLayout,
    ArchiveService,
    YearOutcome,
)
from treearchive.packages.archive.services.query_service import TreeQueryService
from treearchive.packages.archive.services.relocation_service import SubtreeRelocator
from treearchive.packages.archive.services.tree_integrity import TreeIntegrityService


@pytest.fixture()
def archive_service() -> ArchiveService:
    layout = ArchiveLayout(main_category_id=10, archive_category_id=20)
    return ArchiveService(layout, queries=TreeQueryService(1), relocator=SubtreeRelocator(1))


def test_active_course_years_are_sorted(db_session_fixture, platform_tree, archive_service):
    assert archive_service.active_course_years(db_session_fixture) == [2019, 2020, 2023, 2024]


def test_archive_moves_old_courses_into_year_category(
    db_session_fixture, platform_tree, archive_service, snapshot
):
    outcomes = archive_service.archive_courses(db_session_fixture, as_of=date(2024, 6, 1))

    assert outcomes == [
        YearOutcome(year=2019, status=STATUS_MOVED, target_id=201, moved=[101, 102]),
        YearOutcome(year=2020, status=STATUS_SKIPPED),
        YearOutcome(year=2023, status=STATUS_KEPT),
        YearOutcome(year=2024, status=STATUS_KEPT),
    ]

    state = snapshot()
    assert state[101][0] == 201 and state[102][0] == 201
    assert state[101][1] < state[102][1]
    # 根节点 depth=1，归档年份分类 depth=3
    assert state[101][3] == 4
    assert state[1011][3] == 5
    assert state[10221][3] == 6
    assert state[103][0] == 10
    assert TreeIntegrityService(1).check(db_session_fixture) == []


def test_archive_skips_year_without_category(db_session_fixture, platform_tree, archive_service, snapshot):
    outcomes = archive_service.archive_courses(db_session_fixture, as_of=date(2024, 1, 1))

    skipped = [o for o in outcomes if o.status == STATUS_SKIPPED]
    assert [o.year for o in skipped] == [2020]
    assert snapshot()[103][0] == 10


def test_recent_years_are_kept(db_session_fixture, platform_tree, archive_service, snapshot):
    before = snapshot()

    outcomes = archive_service.archive_courses(db_session_fixture, as_of=date(2020, 12, 31))

    # 2020 - 2 = 2018：所有课程都在保留期内
    assert {o.status for o in outcomes} == {STATUS_KEPT}
    assert snapshot() == before


def test_dry_run_plans_without_moving(db_session_fixture, platform_tree, archive_service, snapshot):
    before = snapshot()

    outcomes = archive_service.archive_courses(db_session_fixture, dry_run=True, as_of=date(2024, 6, 1))

    assert outcomes[0] == YearOutcome(year=2019, status=STATUS_PLANNED, target_id=201, moved=[101, 102])
    assert snapshot() == before


def test_second_run_has_nothing_left_for_archived_year(
    db_session_fixture, platform_tree, archive_service
):
    archive_service.archive_courses(db_session_fixture, as_of=date(2024, 6, 1))

    outcomes = archive_service.archive_courses(db_session_fixture, as_of=date(2024, 6, 1))

    assert [o.year for o in outcomes] == [2020, 2023, 2024]


def test_list_empty_courses(db_session_fixture, platform_tree, archive_service):
    courses = archive_service.list_empty_courses(db_session_fixture)

    assert [(c.ref_id, c.title) for c in courses] == [
        (101, "Analysis I"),
        (104, "Numerik"),
        (105, "Optimierung"),
    ]
