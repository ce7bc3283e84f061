"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from treearchive.packages.archive.models.objects import ObjectData, ObjectReference
from treearchive.packages.archive.models.tree import TreeNode

__all__ = [
    "ObjectData",
    "ObjectReference",
    "TreeNode",
]
