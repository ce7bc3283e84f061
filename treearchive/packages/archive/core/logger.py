"""日志配置模块：统一全局日志格式，并为树移动等写操作提供可追踪的输出。"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Optional

from .config import get_settings

LOGGER_NAME = "treearchive"


class _TZFormatter(logging.Formatter):
    """按 Settings.timezone 渲染时间戳；未指定 datefmt 时输出带毫秒的 ISO-8601。"""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: D401
        tz = get_settings().timezone_info
        dt = datetime.fromtimestamp(record.created, tz)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(sep=" ", timespec="milliseconds")


class ColorFormatter(_TZFormatter):
    """ANSI 彩色格式化器：根据不同日志级别渲染不同颜色，便于快速辨识。"""

    RESET = "\033[0m"
    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }

    def __init__(
        self,
        fmt: str,
        datefmt: Optional[str] = None,
        style: str = "%",
        use_colors: Optional[bool] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        if use_colors is None:
            use_colors = sys.stderr.isatty()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_colors:
            return message
        color = self.COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{self.RESET}"


class JsonFormatter(_TZFormatter):
    """结构化 JSON 日志，便于采集端按字段检索（如 tree_id、request_id）。"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, datefmt=None),
            "logger": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestIdFilter(logging.Filter):
    """把上下文中的 request_id 注入每条 LogRecord。"""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        setattr(record, "request_id", _request_id_ctx.get())
        return True


def setup_logging() -> None:
    """初始化日志系统，确保项目所有模块使用统一的输出格式与级别。"""
    settings = get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)

    formatter_name = "json" if settings.log_json else "standard"
    module_path = __name__

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "()": f"{module_path}.ColorFormatter",
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
            },
            "plain": {
                "()": f"{module_path}._TZFormatter",
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
            },
            "json": {
                "()": f"{module_path}.JsonFormatter",
            },
        },
        "filters": {
            "request_id": {
                "()": f"{module_path}.RequestIdFilter",
            }
        },
        "handlers": {
            "default": {
                "level": settings.log_level,
                "class": "logging.StreamHandler",
                "formatter": formatter_name,
                "filters": ["request_id"],
            },
            "file": {
                "level": settings.log_level,
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": "json" if settings.log_json else "plain",
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
                "delay": True,
                "filters": ["request_id"],
            },
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default", "file"],
                "level": settings.log_level,
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["default", "file"],
                "level": settings.log_level,
                "propagate": False,
            },
            LOGGER_NAME: {
                "handlers": ["default", "file"],
                "level": settings.log_level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["default"],
            "level": settings.log_level,
        },
    }
    logging.config.dictConfig(logging_config)


logger = logging.getLogger(LOGGER_NAME)


def get_logger(name: str) -> logging.Logger:
    """返回挂在包日志器下的子日志器，例如 ``treearchive.relocation``。"""
    return logger.getChild(name)


def set_request_id(request_id: Optional[str]) -> None:
    _request_id_ctx.set(request_id)
