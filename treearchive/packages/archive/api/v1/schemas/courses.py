"""课程查询与归档流程的响应模型。"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from treearchive.packages.archive.api.v1.schemas.common import ResponseEnvelope


class CourseSummaryItem(BaseModel):
    ref_id: int
    title: str
    create_date: Optional[str] = None


CourseYearsResponse = ResponseEnvelope[list[int]]
CourseIdListResponse = ResponseEnvelope[list[int]]
EmptyCourseListResponse = ResponseEnvelope[list[CourseSummaryItem]]


class ArchiveCategoryItem(BaseModel):
    ref_id: int
    title: str


ArchiveCategoryResponse = ResponseEnvelope[ArchiveCategoryItem]


class YearOutcomeItem(BaseModel):
    """单个年份的归档结果：moved / planned / skipped / kept。"""

    year: int
    status: str
    target_id: Optional[int] = None
    moved: list[int]


ArchiveRunResponse = ResponseEnvelope[list[YearOutcomeItem]]
