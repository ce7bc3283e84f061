"""归档业务包：嵌套集树的子树移动、派生查询与课程归档流程。"""

from treearchive.packages.types import AppPackage

from .api.v1 import api_router
from .core.config import get_settings
from .core.exceptions import generic_exception_handler, http_exception_handler
from .core.logger import logger, setup_logging
from .core.responses import create_response
from .db.init_db import init_db
from .services import get_services

package = AppPackage(
    name="archive",
    description="嵌套集树的子树移动、课程年份查询与按年份归档",
    api_router=api_router,
    get_settings=get_settings,
    get_services=get_services,
    setup_logging=setup_logging,
    logger=logger,
    init_db=init_db,
    create_response=create_response,
    http_exception_handler=http_exception_handler,
    generic_exception_handler=generic_exception_handler,
)

__all__ = ["package", "api_router", "get_settings", "get_services"]
