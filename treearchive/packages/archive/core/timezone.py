"""时区工具：归档判断“今年”与报表中的时间都按配置时区计算。"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from treearchive.packages.archive.core.config import get_settings


def local_now() -> datetime:
    return datetime.now(get_settings().timezone_info)


def local_today() -> date:
    """配置时区下的当天日期；跨年边界以该时区为准。"""
    return local_now().date()


def format_local(value: Optional[datetime]) -> Optional[str]:
    """格式化为 ``YYYY-MM-DD HH:MM:SS``。

    ``object_data.create_date`` 以无时区的本地时间存储，视为配置时区；
    带时区的值先换算到配置时区。
    """
    if value is None:
        return None
    tz = get_settings().timezone_info
    localized = value.replace(tzinfo=tz) if value.tzinfo is None else value.astimezone(tz)
    return localized.strftime("%Y-%m-%d %H:%M:%S")
