"""
livelinks/links/classifier.py

引用类型判定 - 纯函数，无副作用
"""
from enum import Enum
from typing import Any, List, Optional

from livelinks.ontology.interface import is_entity, is_entity_set


class ReferenceKind(str, Enum):
    """引用类型"""

    NONE = "none"               # 空引用
    SINGLE = "single"           # 单个实体
    COLLECTION = "collection"   # 有序实体列表


def classify(raw: Any) -> ReferenceKind:
    """
    判定原始值的引用类型

    - 实体集合或有序序列（list/tuple） -> COLLECTION
    - 实体或非空字符串 -> SINGLE
    - 其他（None、空字符串、数字、布尔值…） -> NONE
    """
    if is_entity_set(raw) or isinstance(raw, (list, tuple)):
        return ReferenceKind.COLLECTION
    if is_entity(raw) or (isinstance(raw, str) and raw != ""):
        return ReferenceKind.SINGLE
    return ReferenceKind.NONE


def reference_id(value: Any) -> Optional[str]:
    """
    实体归约为其标识符，非空字符串原样返回

    Returns:
        标识符；无法作为引用时返回 None
    """
    if is_entity(value):
        value = value.id
    if isinstance(value, str) and value != "":
        return value
    return None


def canonical_ids(raw: Any) -> List[str]:
    """
    规范化为去重的有序标识符列表

    Entities are reduced to their id, duplicates dropped keeping the first
    occurrence, anything that is not a non-empty string id skipped.

    Example:
        >>> canonical_ids(["a", room_b, "a", "", 3])
        ['a', 'b']
    """
    items = list(raw) if raw is not None else []
    ids: List[str] = []
    for item in items:
        ident = reference_id(item)
        if ident is not None and ident not in ids:
            ids.append(ident)
    return ids


__all__ = ["ReferenceKind", "classify", "reference_id", "canonical_ids"]
