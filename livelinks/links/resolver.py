"""
livelinks/links/resolver.py

单引用解析 - 在实体集合中解析单个标识符

Two states, exactly one source subscription alive in each:

    WAITING  (id not in source)  --add of id-->      RESOLVED
    RESOLVED (entity in source)  --remove of it-->   WAITING
"""
from enum import Enum
from typing import Any, Callable, Optional
import logging

from livelinks.engine.ledger import SubscriptionLedger
from livelinks.ontology.interface import EntitySetLike

logger = logging.getLogger(__name__)


class ResolverState(str, Enum):
    """解析状态"""

    IDLE = "idle"
    WAITING = "waiting"
    RESOLVED = "resolved"


class SingleReferenceResolver:
    """
    单引用解析器

    ``on_change`` is called with the newly resolved entity (or None) whenever
    a source add/remove moves the resolver between states. resolve() itself
    never calls it; the caller uses the returned entity.

    Example:
        >>> resolver = SingleReferenceResolver(rooms, on_change=print)
        >>> resolver.resolve("101")   # None, now waiting
        >>> rooms.add({"id": "101"})
        Entity(id='101')
    """

    def __init__(
        self,
        source: EntitySetLike,
        on_change: Callable[[Optional[Any]], None],
        ledger: Optional[SubscriptionLedger] = None,
    ):
        self.source = source
        self.on_change = on_change
        self.state = ResolverState.IDLE
        self.reference_id: Optional[str] = None
        self.entity: Optional[Any] = None
        self._subscriptions = ledger if ledger is not None else SubscriptionLedger(name="SingleReferenceResolver")

    def resolve(self, reference_id: str) -> Optional[Any]:
        """
        解析标识符并安装对应方向的监听

        Args:
            reference_id: 要解析的标识符

        Returns:
            找到的实体，不存在时返回 None
        """
        self._subscriptions.release_all()
        self.reference_id = reference_id

        entity = self.source.get(reference_id)
        if entity is not None:
            self._watch_removal(entity)
        else:
            self._watch_arrival(reference_id)
        return entity

    def release(self) -> None:
        """释放监听，回到空闲状态"""
        self._subscriptions.release_all()
        self.state = ResolverState.IDLE
        self.reference_id = None
        self.entity = None

    def _watch_removal(self, entity: Any) -> None:
        self.state = ResolverState.RESOLVED
        self.entity = entity

        def on_remove(removed: Any, *args: Any) -> None:
            if removed is not entity:
                return
            logger.debug(f"{entity!r} left the source, waiting for it to return")
            self._subscriptions.release_all()
            self._watch_arrival(self.reference_id)
            self.on_change(None)

        self._subscriptions.listen_to(self.source.events, "remove", on_remove)

    def _watch_arrival(self, reference_id: Optional[str]) -> None:
        self.state = ResolverState.WAITING
        self.entity = None

        def on_add(added: Any, *args: Any) -> None:
            if added.id != reference_id:
                return
            self._subscriptions.release_all()
            self._watch_removal(added)
            self.on_change(added)

        self._subscriptions.listen_to(self.source.events, "add", on_add)


__all__ = ["ResolverState", "SingleReferenceResolver"]
