"""配置模块：负责加载和缓存基于环境变量的应用设置。"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# 探测项目根目录并加载环境文件，支持通过 ENV_FILE/ENVIRONMENT 定制优先级。
def _detect_base_dir() -> Path:
    """向上遍历目录树，寻找包含 `treearchive` 包目录的项目根路径。"""
    current = Path(__file__).resolve()
    for candidate in current.parents:
        if (candidate / "treearchive").is_dir():
            return candidate
    # 回退到文件所在目录，避免在极端情况下抛异常
    return current.parent


BASE_DIR = _detect_base_dir()


def _as_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_environment() -> None:
    env_file_override = os.getenv("ENV_FILE")
    if env_file_override:
        candidate = BASE_DIR / env_file_override
        if candidate.exists():
            load_dotenv(candidate, override=True, encoding="utf-8")
        return

    base_env = BASE_DIR / ".env"
    if base_env.exists():
        load_dotenv(base_env, override=False, encoding="utf-8")

    environment = os.getenv("ENVIRONMENT")
    if environment is None and _as_bool(os.getenv("DEBUG")):
        environment = "development"

    if environment:
        if environment.startswith(".env"):
            candidate_name = environment
        else:
            candidate_name = f".env.{environment}"
        candidate_path = BASE_DIR / candidate_name
        if candidate_path.exists():
            load_dotenv(candidate_path, override=True, encoding="utf-8")


_load_environment()


class Settings(BaseSettings):
    """
    封装应用运行所需的所有配置项，每个字段都可以通过环境变量重写。
    树相关的常量（树 ID、主分类、归档分类、对象类型）只在这里声明，
    由服务层在构造时显式传入算法，避免在代码中散落魔法数字。
    """

    project_name: str = Field(default="Tree Archive API", alias="PROJECT_NAME")
    api_v1_str: str = Field(default="/api/v1", alias="API_V1_STR")
    debug: bool = Field(default=False, alias="DEBUG")

    # 完整连接串优先（例如 sqlite:///./archive.db），为空时按分项拼接 PostgreSQL 连接串
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    database_host: str = Field(default="localhost", alias="DATABASE_HOST")
    database_port: int = Field(default=5432, alias="DATABASE_PORT")
    database_user: str = Field(default="postgres", alias="DATABASE_USER")
    database_password: str = Field(default="postgres", alias="DATABASE_PASSWORD")
    database_name: str = Field(default="treearchive", alias="DATABASE_NAME")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # 树与对象类型
    tree_id: int = Field(default=1, alias="TREE_ID")
    main_category_id: int = Field(default=0, alias="MAIN_CATEGORY_ID")
    archive_category_id: int = Field(default=0, alias="ARCHIVE_CATEGORY_ID")
    course_type: str = Field(default="crs", alias="COURSE_TYPE")
    category_type: str = Field(default="cat", alias="CATEGORY_TYPE")
    role_folder_type: str = Field(default="rolf", alias="ROLE_FOLDER_TYPE")
    # 保留最近 N 年（含今年）的课程不归档
    archive_keep_years: int = Field(default=2, alias="ARCHIVE_KEEP_YEARS")

    # 移动子树后在同一事务内复核嵌套集不变式；失败则整体回滚
    relocation_verify: bool = Field(default=True, alias="RELOCATION_VERIFY")
    relocation_lock_tree: bool = Field(default=True, alias="RELOCATION_LOCK_TREE")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="log", alias="LOG_DIR")
    log_file_name: str = Field(default="treearchive.log", alias="LOG_FILE_NAME")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    app_port: int = Field(default=8000, alias="APP_PORT")
    timezone: str = Field(default="Europe/Berlin", alias="TIMEZONE")

    model_config = SettingsConfigDict(extra='ignore')

    @property
    def sql_database_url(self) -> str:
        """返回数据库连接串：显式配置的 DATABASE_URL 优先，否则拼接 PostgreSQL 连接串。"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    def _resolve_path(self, raw: str) -> Path:
        path = Path(raw)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path

    @property
    def log_directory(self) -> Path:
        """返回日志目录的绝对路径，支持相对路径配置。"""
        return self._resolve_path(self.log_dir)

    @property
    def log_file_path(self) -> Path:
        """组合日志目录与文件名，得到完整的日志文件路径。"""
        return self.log_directory / self.log_file_name

    @property
    def timezone_info(self) -> ZoneInfo:
        """返回当前配置对应的时区信息，无法解析时回退到 UTC。"""
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            return ZoneInfo("UTC")


@lru_cache
def get_settings() -> Settings:
    """返回单例化的配置对象，避免重复解析环境变量造成性能浪费。"""
    return Settings()
