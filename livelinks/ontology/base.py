"""
livelinks/ontology/base.py

可观察实体 - 带标识符的属性容器
属性变化时发布 "change:<attr>" 与 "change" 事件，销毁时发布 "destroy"
"""
from typing import Any, Dict, Mapping, Optional, Set
import logging

from livelinks.engine.events import EventEmitter

logger = logging.getLogger(__name__)

_MISSING = object()


def is_equal(a: Any, b: Any) -> bool:
    """
    类型严格的相等判断

    ``1`` and ``True`` are different values here; entities and entity sets
    compare by identity.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    return bool(a == b)


class Entity:
    """
    可观察实体

    Nested set() calls made from "change:<attr>" handlers fire their own
    "change:<attr>" events but are folded into the single "change" event of
    the outermost set().

    Attributes:
        attributes: 属性字典
        events: 事件发布者
        backlinks: 当前解析到本实体的链接（旁路通道，仅用于观察）

    Example:
        >>> room = Entity({"id": "101", "floor": 1})
        >>> room.events.subscribe("change:floor", lambda e, v, opts: print(v))
        >>> room.set("floor", 2)
        2
    """

    id_attribute = "id"

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        self.events = EventEmitter(name=type(self).__name__)
        self.attributes: Dict[str, Any] = {}
        self.backlinks: Set[Any] = set()
        self._changing = False
        self._pending: Optional[Dict[str, Any]] = None
        self._previous_attributes: Dict[str, Any] = {}
        self._changed: Dict[str, Any] = {}

        initial = dict(attributes or {})
        initial.update(kwargs)
        self.set(initial, silent=True)

    @property
    def id(self) -> Any:
        return self.attributes.get(self.id_attribute)

    def get(self, attr: str, default: Any = None) -> Any:
        """获取属性值"""
        return self.attributes.get(attr, default)

    def has(self, attr: str) -> bool:
        """属性是否存在且非 None"""
        return self.attributes.get(attr) is not None

    def set(
        self,
        key: Any,
        value: Any = None,
        *,
        silent: bool = False,
        unset: bool = False,
        **options: Any,
    ) -> "Entity":
        """
        设置一个或多个属性

        Args:
            key: 属性名，或 {属性名: 值} 映射
            value: 属性值（key 为属性名时）
            silent: True 则不发布事件
            unset: True 则删除属性
            **options: 透传给事件处理器的选项

        Returns:
            self
        """
        if key is None:
            return self
        attrs = dict(key) if isinstance(key, Mapping) else {key: value}
        if unset:
            options["unset"] = True

        changing = self._changing
        self._changing = True
        try:
            if not changing:
                self._previous_attributes = dict(self.attributes)
                self._changed = {}

            changes = []
            for attr, val in attrs.items():
                current = self.attributes.get(attr, _MISSING)
                if unset:
                    if current is _MISSING:
                        continue
                    del self.attributes[attr]
                    self._changed[attr] = None
                else:
                    if current is not _MISSING and is_equal(current, val):
                        continue
                    self.attributes[attr] = val
                    self._changed[attr] = val
                changes.append(attr)

            if not silent:
                if changes:
                    self._pending = options
                for attr in changes:
                    self.events.emit(f"change:{attr}", self, self.attributes.get(attr), options)

            if not changing and not silent:
                while self._pending is not None:
                    pending, self._pending = self._pending, None
                    self.events.emit("change", self, pending)
        finally:
            if not changing:
                self._pending = None
                self._changing = False

        return self

    def unset(self, attr: str, **options: Any) -> "Entity":
        """删除属性"""
        return self.set(attr, None, unset=True, **options)

    def previous(self, attr: str) -> Any:
        """最近一次 set() 之前的属性值"""
        return self._previous_attributes.get(attr)

    def changed_attributes(self) -> Dict[str, Any]:
        """最近一次 set() 改变的属性"""
        return dict(self._changed)

    def has_changed(self, attr: Optional[str] = None) -> bool:
        if attr is None:
            return bool(self._changed)
        return attr in self._changed

    def destroy(self, **options: Any) -> "Entity":
        """发布 destroy 事件（集合会移除该实体，链接会断开）"""
        logger.debug(f"{self!r} destroyed")
        self.events.emit("destroy", self, options)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为字典表示

        Returns:
            属性字典的浅拷贝
        """
        return dict(self.attributes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


__all__ = ["Entity", "is_equal"]
