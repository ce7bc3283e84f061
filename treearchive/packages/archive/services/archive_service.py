"""课程归档业务：把主分类下较早年份创建的课程移动到归档分类中对应年份的子分类。"""

from __future__ import annotations

import io
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional

from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session

from treearchive.packages.archive.core.constants import XLSX_MEDIA_TYPE
from treearchive.packages.archive.core.exceptions import NodeNotFound
from treearchive.packages.archive.core.logger import get_logger
from treearchive.packages.archive.core.timezone import format_local, local_now, local_today
from treearchive.packages.archive.services.query_service import ChildSummary, TreeQueryService
from treearchive.packages.archive.services.relocation_service import SubtreeRelocator

logger = get_logger("archive")

STATUS_MOVED = "moved"
STATUS_SKIPPED = "skipped"
STATUS_KEPT = "kept"
STATUS_PLANNED = "planned"


@dataclass(frozen=True)
class ArchiveLayout:
    """归档流程依赖的固定节点与类型标记，由配置在构造时传入。"""

    main_category_id: int
    archive_category_id: int
    course_type: str = "crs"
    category_type: str = "cat"
    role_folder_type: str = "rolf"
    keep_years: int = 2


@dataclass
class YearOutcome:
    year: int
    status: str
    target_id: Optional[int] = None
    moved: list[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


class ArchiveService:
    def __init__(
        self,
        layout: ArchiveLayout,
        *,
        queries: TreeQueryService,
        relocator: SubtreeRelocator,
    ) -> None:
        self.layout = layout
        self.queries = queries
        self.relocator = relocator

    def active_course_years(self, db: Session) -> list[int]:
        """主分类下现有课程的创建年份，升序。"""
        return sorted(
            self.queries.years_of_children(db, self.layout.main_category_id, self.layout.course_type)
        )

    def archive_category_for(self, db: Session, year: int) -> int:
        return self.queries.find_child_by_title(
            db, self.layout.archive_category_id, self.layout.category_type, str(year)
        )

    def archive_courses(
        self, db: Session, *, dry_run: bool = False, as_of: Optional[date] = None
    ) -> list[YearOutcome]:
        """归档早于保留期的课程；最近 ``keep_years`` 年（含今年）的课程保持不动。

        对每个年份：找不到同名归档分类时记为 ``skipped``；否则逐个移动该年创建的课程。
        单次移动失败会原样抛出，已完成的移动各自独立提交，不受影响。
        """
        current_year = (as_of or local_today()).year
        newest_archivable = current_year - self.layout.keep_years
        outcomes: list[YearOutcome] = []

        for year in self.active_course_years(db):
            if year > newest_archivable:
                outcomes.append(YearOutcome(year=year, status=STATUS_KEPT))
                continue

            try:
                target_id = self.archive_category_for(db, year)
            except NodeNotFound:
                logger.warning("archive.skip year=%s reason=no archive category", year)
                outcomes.append(YearOutcome(year=year, status=STATUS_SKIPPED))
                continue

            courses = self.queries.children_in_year(
                db, self.layout.main_category_id, self.layout.course_type, year
            )
            if dry_run:
                outcomes.append(
                    YearOutcome(year=year, status=STATUS_PLANNED, target_id=target_id, moved=courses)
                )
                continue

            for course_id in courses:
                self.relocator.relocate(db, course_id, target_id)
            logger.info("archive.year year=%s target_id=%s moved=%s", year, target_id, len(courses))
            outcomes.append(
                YearOutcome(year=year, status=STATUS_MOVED, target_id=target_id, moved=courses)
            )
        return outcomes

    def list_empty_courses(self, db: Session) -> list[ChildSummary]:
        return self.queries.empty_children(
            db,
            self.layout.main_category_id,
            self.layout.course_type,
            self.layout.role_folder_type,
        )

    def export_empty_courses(self, db: Session) -> StreamingResponse:
        """把空课程列表导出为 Excel 文件。"""
        courses = self.list_empty_courses(db)

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "空课程"
        sheet.append(["ref_id", "标题", "创建时间"])
        for course in courses:
            sheet.append([course.ref_id, course.title, format_local(course.create_date) or ""])

        buffer = io.BytesIO()
        workbook.save(buffer)
        buffer.seek(0)

        timestamp = local_now().strftime("%Y%m%d%H%M%S")
        response = StreamingResponse(buffer, media_type=XLSX_MEDIA_TYPE)
        response.headers["Content-Disposition"] = f"attachment; filename=empty-courses-{timestamp}.xlsx"
        return response
