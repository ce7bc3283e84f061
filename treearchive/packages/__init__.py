"""业务包注册中心：主应用按名称选择要挂载的业务包。"""

from __future__ import annotations

import os
from typing import Dict

from . import archive
from .types import AppPackage

DEFAULT_PACKAGE = archive.package.name

PACKAGE_REGISTRY: Dict[str, AppPackage] = {
    archive.package.name: archive.package,
}


def get_active_package() -> AppPackage:
    """按 ``TREEARCHIVE_PACKAGE`` 环境变量选择业务包，未设置时使用归档包。"""
    package_name = os.getenv("TREEARCHIVE_PACKAGE", DEFAULT_PACKAGE)
    if package_name not in PACKAGE_REGISTRY:
        available = ", ".join(sorted(PACKAGE_REGISTRY))
        raise RuntimeError(f"未知的业务包 '{package_name}'，可用选项：{available}")
    return PACKAGE_REGISTRY[package_name]


__all__ = ["archive", "DEFAULT_PACKAGE", "PACKAGE_REGISTRY", "get_active_package"]
