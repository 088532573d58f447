"""
livelinks/exceptions.py

异常定义

    LinkError (base)
    |
    +-- LinkConstructionError   invalid owner / attribute / source
    +-- LinkUsageError          operating on a missing link, bad callback
    +-- EntitySetError          collaborator misuse (non-entity members)

An identifier that does not resolve is not an error: the link stays in its
waiting (invalid) state until the entity arrives.
"""
from typing import Any, Optional


class LinkError(Exception):
    """链接异常基类"""

    pass


class LinkConstructionError(LinkError, TypeError):
    """
    链接构造参数无效

    Attributes:
        argument: 出错的参数名 ("owner", "attribute", "source")
        value: 传入的值
    """

    def __init__(self, argument: str, value: Any, message: str):
        super().__init__(message)
        self.argument = argument
        self.value = value


class LinkUsageError(LinkError):
    """
    链接使用错误

    Attributes:
        attribute: 相关属性名（如果有）
    """

    def __init__(self, message: str, attribute: Optional[str] = None):
        super().__init__(message)
        self.attribute = attribute


class EntitySetError(LinkError):
    """实体集合使用错误"""

    pass


__all__ = [
    "LinkError",
    "LinkConstructionError",
    "LinkUsageError",
    "EntitySetError",
]
