"""
livelinks/ontology/collection.py

可观察实体集合 - 有序、按标识符去重
发布 add / remove / reset / sort / update 事件
"""
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type
from collections.abc import Hashable
import logging

from livelinks.engine.events import EventEmitter
from livelinks.engine.ledger import SubscriptionLedger
from livelinks.exceptions import EntitySetError
from livelinks.ontology.base import Entity
from livelinks.ontology.interface import is_entity

logger = logging.getLogger(__name__)

Comparator = Callable[[Any], Any]


def _as_list(entities: Any) -> List[Any]:
    if entities is None:
        return []
    if isinstance(entities, (list, tuple)):
        return list(entities)
    if isinstance(entities, EntitySet):
        return entities.to_list()
    return [entities]


class EntitySet:
    """
    实体集合

    Handlers receive ``(entity, entity_set, options)`` for "add"/"remove" and
    ``(entity_set, options)`` for "reset"/"sort"/"update". Keyword options
    given to a mutating call are passed through to the handlers.

    Attributes:
        comparator: 排序键函数；None 则保持插入顺序
        entity_class: 由映射构造实体时使用的类
        events: 事件发布者

    Example:
        >>> rooms = EntitySet([{"id": "101"}, {"id": "102"}])
        >>> rooms.get("101")
        Entity(id='101')
        >>> rooms.remove("101")
    """

    entity_class: Type[Entity] = Entity

    def __init__(
        self,
        entities: Any = None,
        *,
        comparator: Optional[Comparator] = None,
        entity_class: Optional[Type[Entity]] = None,
    ):
        self.events = EventEmitter(name=type(self).__name__)
        self.comparator = comparator
        if entity_class is not None:
            self.entity_class = entity_class
        self._entities: List[Any] = []
        self._by_id: Dict[Any, Any] = {}
        self._members = SubscriptionLedger()
        if entities is not None:
            self.reset(entities, silent=True)

    # ============== 查询 ==============

    def get(self, key: Any) -> Optional[Any]:
        """
        按标识符或实体查找

        Args:
            key: 标识符，或实体（按其 id 查找，无 id 时按身份查找）

        Returns:
            集合中的实体，不存在时返回 None
        """
        if key is None:
            return None
        if is_entity(key):
            if key.id is not None:
                found = self._by_id.get(key.id)
                if found is not None:
                    return found
            return key if any(e is key for e in self._entities) else None
        if not isinstance(key, Hashable):
            return None
        return self._by_id.get(key)

    def has(self, key: Any) -> bool:
        return self.get(key) is not None

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._entities))

    def __len__(self) -> int:
        return len(self._entities)

    def __getitem__(self, index: int) -> Any:
        return self._entities[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.ids()!r})"

    def index_of(self, key: Any) -> int:
        """实体位置，不存在时返回 -1"""
        entity = self.get(key)
        for index, member in enumerate(self._entities):
            if member is entity:
                return index
        return -1

    def ids(self) -> List[Any]:
        """按顺序返回所有实体的标识符"""
        return [e.id for e in self._entities]

    def to_list(self) -> List[Any]:
        return list(self._entities)

    def to_dicts(self) -> List[Dict[str, Any]]:
        """序列化为字典列表"""
        return [e.to_dict() for e in self._entities]

    # ============== 变更 ==============

    def add(
        self,
        entities: Any,
        *,
        silent: bool = False,
        at: Optional[int] = None,
        sort: bool = True,
        **options: Any,
    ) -> List[Any]:
        """
        添加实体（已存在的忽略）

        Args:
            entities: 实体、映射或它们的列表
            silent: True 则不发布事件
            at: 插入位置；None 则追加（有 comparator 时随后排序）
            sort: False 则跳过排序

        Returns:
            实际添加的实体列表
        """
        added: List[Any] = []
        for item in _as_list(entities):
            entity = self._prepare(item)
            if self.get(entity) is not None or any(e is entity for e in added):
                continue
            added.append(entity)

        if not added:
            return added

        if at is None:
            self._entities.extend(added)
        else:
            self._entities[at:at] = added
        for entity in added:
            self._index(entity)

        sorted_ = False
        if self.comparator is not None and at is None and sort:
            sorted_ = self._sort()

        if not silent:
            for entity in added:
                self.events.emit("add", entity, self, dict(options))
            if sorted_:
                self.events.emit("sort", self, dict(options))
            self.events.emit("update", self, dict(options, changes={"added": added, "removed": []}))

        return added

    def remove(self, entities: Any, *, silent: bool = False, **options: Any) -> List[Any]:
        """
        移除实体（不存在的忽略）

        The "remove" options carry the entity's former ``index``.

        Returns:
            实际移除的实体列表
        """
        removed: List[Any] = []
        for item in _as_list(entities):
            entity = self.get(item)
            if entity is None:
                continue
            index = self.index_of(entity)
            del self._entities[index]
            self._unindex(entity)
            removed.append(entity)
            if not silent:
                self.events.emit("remove", entity, self, dict(options, index=index))

        if removed and not silent:
            self.events.emit("update", self, dict(options, changes={"added": [], "removed": removed}))
        return removed

    def reset(self, entities: Any = None, *, silent: bool = False, **options: Any) -> List[Any]:
        """
        整体替换内容，只发布一个 "reset" 事件

        The "reset" options carry ``previous_entities``.
        """
        incoming = _as_list(entities)
        previous = list(self._entities)
        for entity in previous:
            self._unindex(entity)
        self._entities = []
        self.add(incoming, silent=True)

        if not silent:
            self.events.emit("reset", self, dict(options, previous_entities=previous))
        return self.to_list()

    def set(
        self,
        entities: Any,
        *,
        silent: bool = False,
        add: bool = True,
        remove: bool = True,
        **options: Any,
    ) -> List[Any]:
        """
        智能更新：移除不在列表中的实体，添加新实体，然后排序

        Without a comparator the resulting order follows the given list.

        Returns:
            更新后的实体列表
        """
        targets: List[Any] = []
        for item in _as_list(entities):
            entity = self._prepare(item)
            existing = self.get(entity)
            target = existing if existing is not None else entity
            if not any(t is target for t in targets):
                targets.append(target)

        if remove:
            stale = [e for e in self._entities if not any(t is e for t in targets)]
            if stale:
                self.remove(stale, silent=silent, **options)

        if add:
            fresh = [t for t in targets if self.get(t) is None]
            if fresh:
                self.add(fresh, silent=silent, sort=False, **options)

        if self.comparator is not None:
            reordered = self._sort()
        else:
            reordered = self._reorder(targets)
        if reordered and not silent:
            self.events.emit("sort", self, dict(options))

        return self.to_list()

    def sort(self, *, silent: bool = False, **options: Any) -> "EntitySet":
        """按 comparator 重新排序"""
        if self.comparator is None:
            raise EntitySetError("Cannot sort an entity set without a comparator")
        self._sort()
        if not silent:
            self.events.emit("sort", self, dict(options))
        return self

    # ============== 内部 ==============

    def _prepare(self, item: Any) -> Any:
        if is_entity(item):
            return item
        if isinstance(item, Mapping):
            return self.entity_class(item)
        raise EntitySetError(f"Cannot add {item!r} to {type(self).__name__}: expected an entity or mapping")

    def _sort(self) -> bool:
        before = list(self._entities)
        self._entities.sort(key=self.comparator)
        return any(a is not b for a, b in zip(before, self._entities))

    def _reorder(self, targets: List[Any]) -> bool:
        order = [t for t in targets if any(t is e for e in self._entities)]
        extra = [e for e in self._entities if not any(e is t for t in order)]
        before = self._entities
        self._entities = order + extra
        return any(a is not b for a, b in zip(before, self._entities))

    def _index(self, entity: Any) -> None:
        if entity.id is not None:
            self._by_id[entity.id] = entity

        id_attribute = getattr(entity, "id_attribute", "id")

        def on_destroy(destroyed: Any, options: Dict[str, Any]) -> None:
            self.remove(destroyed, **options)

        def on_id_change(changed: Any, new_id: Any, options: Dict[str, Any]) -> None:
            old_id = changed.previous(id_attribute) if hasattr(changed, "previous") else None
            if old_id is not None and self._by_id.get(old_id) is changed:
                del self._by_id[old_id]
            if new_id is not None:
                self._by_id[new_id] = changed

        self._members.listen_to(entity.events, "destroy", on_destroy)
        self._members.listen_to(entity.events, f"change:{id_attribute}", on_id_change)

    def _unindex(self, entity: Any) -> None:
        if entity.id is not None and self._by_id.get(entity.id) is entity:
            del self._by_id[entity.id]
        self._members.release(entity.events)


__all__ = ["Comparator", "EntitySet"]
