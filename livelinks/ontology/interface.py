"""
livelinks/ontology/interface.py

能力契约 - 链接引擎所依赖的实体/实体集合接口

Any object satisfying these protocols can act as an owner, a referenced
entity or a source collection; the bundled Entity and EntitySet are one
implementation.
"""
from typing import Any, Iterator, Optional, Protocol, Set, runtime_checkable

from livelinks.engine.events import EventEmitter


@runtime_checkable
class EntityLike(Protocol):
    """
    实体契约

    Events expected on ``events``: ``change:<attr>``, ``change``, ``destroy``.
    """

    id: Any
    events: EventEmitter
    backlinks: Set[Any]

    def get(self, attr: str, default: Any = None) -> Any:
        ...

    def set(self, key: Any, value: Any = None, **options: Any) -> Any:
        ...


@runtime_checkable
class EntitySetLike(Protocol):
    """
    实体集合契约

    Events expected on ``events``: ``add`` / ``remove`` (entity, set, options)
    and ``reset`` (set, options).
    """

    events: EventEmitter

    def get(self, key: Any) -> Optional[Any]:
        ...

    def add(self, entities: Any, **options: Any) -> Any:
        ...

    def remove(self, entities: Any, **options: Any) -> Any:
        ...

    def reset(self, entities: Any = None, **options: Any) -> Any:
        ...

    def __iter__(self) -> Iterator[Any]:
        ...


def is_entity(value: Any) -> bool:
    """值是否满足实体契约（集合优先判定）"""
    return not isinstance(value, EntitySetLike) and isinstance(value, EntityLike)


def is_entity_set(value: Any) -> bool:
    """值是否满足实体集合契约"""
    return isinstance(value, EntitySetLike)


__all__ = ["EntityLike", "EntitySetLike", "is_entity", "is_entity_set"]
