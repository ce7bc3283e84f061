"""Database bootstrapping utilities."""

from __future__ import annotations

import logging

from treearchive.packages.archive.db import session as db_session
from treearchive.packages.archive.models import ObjectData, ObjectReference, TreeNode  # noqa: F401 - register tables
from treearchive.packages.archive.models.base import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create the tree and object tables if they do not exist.

    Rows are owned by the surrounding platform; nothing is seeded here.
    """
    Base.metadata.create_all(bind=db_session.engine)
    logger.debug("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
