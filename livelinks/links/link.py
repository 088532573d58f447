"""
livelinks/links/link.py

引用链接 - 把所有者实体的一个属性与源集合中的实体实时关联

While attached, the owner's attribute holds the resolved form (an entity, or
an ordered SubsetView collection); the identifier form lives in
``raw_value`` and is written back on detach.

Lifecycle:

    DETACHED --attach()--> ATTACHED --detach() / owner destroyed--> DETACHED

Notifications (on ``link.events``):
    attach(link), detach(link), update(link), kind(kind),
    valid(valid), change(resolved, previous)

"valid" and "change" are edge-triggered: they fire only when the value
differs from the last announced one.
"""
from typing import Any, Callable, Dict, List, Optional, Union
import logging

from pydantic import BaseModel, ConfigDict, ValidationError

from livelinks.engine.events import EventEmitter, Subscription
from livelinks.engine.ledger import SubscriptionLedger
from livelinks.exceptions import LinkConstructionError, LinkUsageError
from livelinks.links.classifier import ReferenceKind, canonical_ids, classify, reference_id
from livelinks.links.resolver import SingleReferenceResolver
from livelinks.links.subset import CollectionFactory, SubsetView
from livelinks.ontology.collection import EntitySet
from livelinks.ontology.interface import is_entity, is_entity_set

logger = logging.getLogger(__name__)

ArrivalCallback = Callable[[Any, "ReferenceLink"], Any]

_ABSENT = object()


class LinkOptions(BaseModel):
    """
    链接选项

    Attributes:
        collection_factory: 构造子集视图集合的工厂，调用方式
            ``factory(entities, comparator=key)``；None 使用 EntitySet
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    collection_factory: Optional[Callable[..., Any]] = None


def _union(first: List[Any], second: List[Any]) -> List[Any]:
    merged = list(first)
    for item in second:
        if item not in merged:
            merged.append(item)
    return merged


class ReferenceLink:
    """
    引用链接

    Attributes:
        owner: 所有者实体
        attribute: 关联的属性名
        source: 源集合
        options: LinkOptions
        active: 是否已挂接
        kind: 当前引用类型
        raw_value: 标识符形式（None / id / id 列表）
        resolved_value: 解析形式（None / 实体 / 子集视图集合）
        valid: 所有标识符当前都能解析时为 True
        events: 链接事件

    Example:
        >>> owner = Entity({"id": "1", "foo": "2"})
        >>> link = ReferenceLink(owner, "foo", rooms)
        >>> owner.get("foo"), link.valid
        (None, False)
        >>> rooms.add({"id": "2"})
        >>> owner.get("foo")
        Entity(id='2')
    """

    def __init__(
        self,
        owner: Any,
        attribute: str,
        source: Any,
        options: Union[LinkOptions, Dict[str, Any], None] = None,
    ):
        self.validate(owner, attribute, source)

        self.owner = owner
        self.attribute = attribute
        self.source = source
        self.options = self.coerce_options(options)
        self.events = EventEmitter(name=f"ReferenceLink({attribute!r})")

        self.active = False
        self.kind = ReferenceKind.NONE
        self.raw_value: Any = None
        self.resolved_value: Any = None
        self.valid = True

        self._first_pass = True
        self._ever_valid = False
        self._updating = False
        self._announced_valid = True
        self._announced_resolved: Any = None

        self._resolver: Optional[SingleReferenceResolver] = None
        self._view: Optional[SubsetView] = None

        # released at the start of every update pass
        self._pass_subscriptions = SubscriptionLedger(name=f"{self!r} pass")
        # released when the reference kind changes or the link resets
        self._subscriptions = SubscriptionLedger(name=f"{self!r}")
        # released on detach
        self._owner_subscriptions = SubscriptionLedger(name=f"{self!r} owner")

        self.attach()

    @staticmethod
    def validate(owner: Any, attribute: Any, source: Any) -> None:
        """
        校验构造参数（在任何订阅之前）

        Raises:
            LinkConstructionError: owner 不是实体、attribute 不是非空字符串、
                或 source 不是实体集合
        """
        if not is_entity(owner):
            raise LinkConstructionError("owner", owner, "Expecting an entity for the owner.")
        if not isinstance(attribute, str) or attribute == "":
            raise LinkConstructionError("attribute", attribute, "Expecting non-empty string for attribute.")
        if not is_entity_set(source):
            raise LinkConstructionError("source", source, "Expecting an entity set for the source.")

    @staticmethod
    def coerce_options(options: Union[LinkOptions, Dict[str, Any], None]) -> LinkOptions:
        """
        校验并转换链接选项

        Raises:
            LinkConstructionError: 未知选项或类型不符
        """
        if isinstance(options, LinkOptions):
            return options
        try:
            return LinkOptions(**(options or {}))
        except (TypeError, ValidationError) as e:
            raise LinkConstructionError("options", options, f"Invalid link options: {e}") from e

    def __repr__(self) -> str:
        return f"ReferenceLink({self.attribute!r})"

    @property
    def has_been_valid(self) -> bool:
        """自当前引用类型建立以来是否曾经有效"""
        return self._ever_valid

    @property
    def subset(self) -> Optional[SubsetView]:
        return self._view

    # ============== 生命周期 ==============

    def attach(self) -> "ReferenceLink":
        """挂接：重置到空基线，执行一次 update，然后监听所有者"""
        self.detach()
        self._reset()
        self.active = True

        self.update()

        self._owner_subscriptions.listen_to(
            self.owner.events, f"change:{self.attribute}", self._on_owner_change
        )
        self._owner_subscriptions.listen_to(self.owner.events, "destroy", self._on_owner_destroy)

        logger.info(f"Link attached: {self.owner!r}.{self.attribute} ({self.kind.value})")
        self.events.emit("attach", self)
        return self

    def detach(self) -> "ReferenceLink":
        """断开：释放所有订阅并把标识符形式写回所有者属性"""
        if not self.active:
            return self

        raw = list(self.raw_value) if isinstance(self.raw_value, list) else self.raw_value

        self._reset()
        self._flush_changes()

        self.active = False
        self._owner_subscriptions.release_all()

        self.owner.set(self.attribute, raw)

        logger.info(f"Link detached: {self.owner!r}.{self.attribute}")
        self.events.emit("detach", self)
        return self

    def _on_owner_change(self, *args: Any) -> None:
        self.update(field_changed=True)

    def _on_owner_destroy(self, *args: Any) -> None:
        self.detach()

    def _on_source_reset(self, *args: Any) -> None:
        self.update()

    # ============== 协调 ==============

    def update(self, field_changed: bool = False) -> "ReferenceLink":
        """
        协调一次：读取所有者属性、判定类型、解析并写回解析形式

        A call arriving while a pass is already running for this link is
        ignored, so writes to the owner made by the pass itself do not
        re-enter it.

        Args:
            field_changed: 由所有者属性变更触发；此时属性值按原样判定，
                等待中的单引用不会保留旧标识符
        """
        if not self.active or self._updating:
            return self
        self._updating = True

        try:
            self.events.emit("update", self)
            self._pass_subscriptions.release_all()

            raw = self.owner.get(self.attribute)

            # a waiting single link leaves None in the field; keep the id
            if not field_changed and self.kind is ReferenceKind.SINGLE and raw is self.resolved_value:
                raw = self.raw_value

            kind = classify(raw)
            if kind is ReferenceKind.SINGLE and reference_id(raw) is None:
                kind = ReferenceKind.NONE

            if kind is not self.kind:
                self._clean()
                self._ever_valid = False
                self.kind = kind
                logger.debug(f"{self!r} kind -> {kind.value}")
                self.events.emit("kind", kind)
                if kind is not ReferenceKind.NONE:
                    self._subscriptions.listen_to(self.source.events, "reset", self._on_source_reset)

            if kind is ReferenceKind.COLLECTION:
                self._update_collection(raw)
            elif kind is ReferenceKind.SINGLE:
                self._update_single(raw)
            else:
                self._set_raw(None)
                self._set_valid(True)
                self._set_resolved(None)

            self._write_resolved()
            self._flush_changes()
            self._first_pass = False
        finally:
            self._updating = False

        return self

    def _update_single(self, raw: Any) -> None:
        ident = reference_id(raw)
        self._set_raw(ident)

        if self._resolver is None:
            self._resolver = SingleReferenceResolver(
                self.source, self._on_single_change, ledger=self._pass_subscriptions
            )
        entity = self._resolver.resolve(ident)

        self._set_valid(entity is not None)
        self._set_resolved(entity)

    def _on_single_change(self, entity: Optional[Any]) -> None:
        if not self.active:
            return
        self._set_valid(entity is not None)
        self._set_resolved(entity)
        self._write_resolved()
        self._flush_changes()

    def _update_collection(self, raw: Any) -> None:
        if self._view is not None and raw is self._view.collection:
            ids = self._merged_ids()
        else:
            ids = canonical_ids(raw)
        self._set_raw(ids)

        if self._view is None:
            self._view = SubsetView(self, self.source, self._collection_factory())
        self._view.sync(ids)

        self._set_valid(self._view.covers(ids))
        self._set_resolved(self._view.collection)

    def _collection_factory(self) -> CollectionFactory:
        return self.options.collection_factory or EntitySet

    def _merged_ids(self, removed: Optional[str] = None) -> List[str]:
        ids = self._view.ids() if self._view is not None else []
        if self._first_pass or not self.valid:
            # keep ids whose entities have not arrived yet
            previous = self.raw_value if isinstance(self.raw_value, list) else []
            ids = _union(previous, ids)
            if removed is not None:
                ids = [ident for ident in ids if ident != removed]
        return canonical_ids(ids)

    def merge_from_subset(self, removed: Optional[str] = None) -> None:
        """
        把子集视图的当前成员合并回标识符列表

        Args:
            removed: 本次从视图中移除的标识符
        """
        if not self.active or self._view is None:
            return
        ids = self._merged_ids(removed)
        logger.debug(f"{self!r} merged subset ids -> {ids}")
        self._set_raw(ids)
        self._set_valid(self._view.covers(ids))
        self._flush_changes()

    # ============== 状态 ==============

    def _set_raw(self, value: Any) -> None:
        self.raw_value = value
        self.kind = classify(value)

    def _set_valid(self, valid: bool) -> None:
        self.valid = bool(valid)
        if self.valid:
            self._ever_valid = True

    def _set_resolved(self, value: Any) -> None:
        previous = self.resolved_value
        if previous is value:
            return
        if is_entity(previous):
            previous.backlinks.discard(self)
        self.resolved_value = value
        if is_entity(value):
            value.backlinks.add(self)

    def _write_resolved(self) -> None:
        if not self.active:
            return
        # an attribute removed from the owner stays removed while the link is empty
        if self.resolved_value is None and self.owner.get(self.attribute, _ABSENT) is _ABSENT:
            return
        updating, self._updating = self._updating, True
        try:
            self.owner.set(self.attribute, self.resolved_value)
        finally:
            self._updating = updating

    def _flush_changes(self) -> None:
        if not self.active:
            return

        if self._announced_valid is not self.valid:
            self._announced_valid = self.valid
            self.events.emit("valid", self.valid)

        if self._announced_resolved is not self.resolved_value:
            previous, self._announced_resolved = self._announced_resolved, self.resolved_value
            self.events.emit("change", self.resolved_value, previous)

    def _clean(self) -> None:
        self._pass_subscriptions.release_all()
        self._subscriptions.release_all()
        if self._resolver is not None:
            self._resolver.release()
            self._resolver = None
        if self._view is not None:
            self._view.destroy()
            self._view = None

    def _reset(self) -> None:
        self._clean()
        self._first_pass = True
        self._ever_valid = False
        self._set_raw(None)
        self.valid = True
        self._set_resolved(None)

    # ============== 查询 ==============

    def contains(self, key: Any) -> bool:
        """
        标识符形式是否包含某个实体或标识符

        Args:
            key: 实体或标识符
        """
        if self.raw_value is None:
            return False
        ident = reference_id(key)
        if ident is None:
            return False
        if isinstance(self.raw_value, list):
            return ident in self.raw_value
        return self.raw_value == ident

    def wait_for_valid(self, callback: ArrivalCallback) -> Optional[Subscription]:
        """
        有效时调用回调

        Calls ``callback(resolved_value, link)`` right away when the link is
        valid, otherwise exactly once on the next transition to valid.

        Returns:
            等待中的订阅；已立即调用时返回 None
        """
        if not callable(callback):
            raise LinkUsageError("Expecting function for callback.", self.attribute)

        if self.valid:
            callback(self.resolved_value, self)
            return None

        subscription: Optional[Subscription] = None

        def on_valid(valid: bool) -> None:
            if not valid:
                return
            subscription.cancel()
            callback(self.resolved_value, self)

        subscription = self.events.subscribe("valid", on_valid)
        return subscription


__all__ = ["LinkOptions", "ArrivalCallback", "ReferenceLink"]
