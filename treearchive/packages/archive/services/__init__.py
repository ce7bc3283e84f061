"""服务装配：根据配置一次性构造树相关服务，树 ID 等常量只在这里注入。"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from treearchive.packages.archive.core.config import Settings, get_settings
from treearchive.packages.archive.services.archive_service import ArchiveLayout, ArchiveService
from treearchive.packages.archive.services.node_locator import NodeLocator
from treearchive.packages.archive.services.query_service import TreeQueryService
from treearchive.packages.archive.services.relocation_service import SubtreeRelocator
from treearchive.packages.archive.services.tree_integrity import TreeIntegrityService


@dataclass(frozen=True)
class TreeServices:
    locator: NodeLocator
    relocator: SubtreeRelocator
    integrity: TreeIntegrityService
    queries: TreeQueryService
    archive: ArchiveService


def build_services(settings: Settings) -> TreeServices:
    tree_id = settings.tree_id
    locator = NodeLocator(tree_id)
    integrity = TreeIntegrityService(tree_id)
    relocator = SubtreeRelocator(
        tree_id,
        verify=settings.relocation_verify,
        lock=settings.relocation_lock_tree,
        locator=locator,
        integrity=integrity,
    )
    queries = TreeQueryService(tree_id)
    layout = ArchiveLayout(
        main_category_id=settings.main_category_id,
        archive_category_id=settings.archive_category_id,
        course_type=settings.course_type,
        category_type=settings.category_type,
        role_folder_type=settings.role_folder_type,
        keep_years=settings.archive_keep_years,
    )
    archive = ArchiveService(layout, queries=queries, relocator=relocator)
    return TreeServices(
        locator=locator,
        relocator=relocator,
        integrity=integrity,
        queries=queries,
        archive=archive,
    )


@lru_cache
def get_services() -> TreeServices:
    """返回基于全局配置构造的服务集合（进程内单例）。"""
    return build_services(get_settings())
