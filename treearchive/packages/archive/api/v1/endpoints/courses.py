"""课程查询与归档路由：年份分组、空课程列表与按年份归档。"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from treearchive.packages.archive.api.v1.schemas.courses import (
    ArchiveCategoryResponse,
    ArchiveRunResponse,
    CourseIdListResponse,
    CourseYearsResponse,
    EmptyCourseListResponse,
)
from treearchive.packages.archive.core.constants import HTTP_STATUS_OK
from treearchive.packages.archive.core.dependencies import get_db, get_tree_services
from treearchive.packages.archive.core.responses import create_response
from treearchive.packages.archive.services import TreeServices

router = APIRouter(prefix="/courses", tags=["courses"])
archive_router = APIRouter(prefix="/archive", tags=["archive"])


@router.get("/years", response_model=CourseYearsResponse)
def list_course_years(
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> CourseYearsResponse:
    """主分类下课程的创建年份（去重、升序）。"""
    years = services.archive.active_course_years(db)
    return create_response("获取课程年份成功", years, HTTP_STATUS_OK)


@router.get("", response_model=CourseIdListResponse)
def list_courses_in_year(
    year: int = Query(..., ge=1900, le=9999),
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> CourseIdListResponse:
    layout = services.archive.layout
    ids = services.queries.children_in_year(db, layout.main_category_id, layout.course_type, year)
    return create_response("获取课程列表成功", ids, HTTP_STATUS_OK)


@router.get("/empty", response_model=EmptyCourseListResponse)
def list_empty_courses(
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> EmptyCourseListResponse:
    """没有任何内容（角色目录除外）的课程。"""
    courses = services.archive.list_empty_courses(db)
    return create_response("获取空课程列表成功", [c.as_dict() for c in courses], HTTP_STATUS_OK)


@router.get("/empty/export")
def export_empty_courses(
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
):
    return services.archive.export_empty_courses(db)


@archive_router.get("/categories", response_model=ArchiveCategoryResponse)
def find_archive_category(
    title: str = Query(..., min_length=1, max_length=255),
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> ArchiveCategoryResponse:
    """在归档分类下按标题（通常为年份）查找子分类。"""
    layout = services.archive.layout
    ref_id = services.queries.find_child_by_title(
        db, layout.archive_category_id, layout.category_type, title
    )
    return create_response("获取归档分类成功", {"ref_id": ref_id, "title": title}, HTTP_STATUS_OK)


@archive_router.post("/run", response_model=ArchiveRunResponse)
def run_archive(
    dry_run: bool = Query(False),
    year_of: Optional[int] = Query(None, ge=1900, le=9999, description="按指定年份计算保留期，默认今年"),
    db: Session = Depends(get_db),
    services: TreeServices = Depends(get_tree_services),
) -> ArchiveRunResponse:
    """把早于保留期的课程移动到归档分类中对应年份的子分类。"""
    as_of = date(year_of, 12, 31) if year_of is not None else None
    outcomes = services.archive.archive_courses(db, dry_run=dry_run, as_of=as_of)
    msg = "归档预览完成" if dry_run else "归档完成"
    return create_response(msg, [o.as_dict() for o in outcomes], HTTP_STATUS_OK)
