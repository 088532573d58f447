"""
livelinks/engine/ledger.py

订阅账本 - 记录对其他可观察对象的所有订阅，以便一次性释放
"""
from typing import Any, List, Optional
import logging

from livelinks.engine.events import EventEmitter, Handler, Subscription

logger = logging.getLogger(__name__)


class SubscriptionLedger:
    """
    订阅账本

    Every subscription made through the ledger is recorded so release_all()
    can undo all of them, however many branches the caller took to install
    them.

    Example:
        >>> ledger = SubscriptionLedger()
        >>> ledger.listen_to(entity_set.events, "add", on_add)
        >>> ledger.release_all()
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._subscriptions: List[Subscription] = []

    def __len__(self) -> int:
        return sum(1 for s in self._subscriptions if s.active)

    def __bool__(self) -> bool:
        return len(self) > 0

    def listen_to(
        self,
        emitter: EventEmitter,
        event: str,
        handler: Handler,
        once: bool = False,
    ) -> Subscription:
        """
        订阅并记录

        Args:
            emitter: 目标发布者
            event: 事件名
            handler: 处理函数
            once: 是否只触发一次

        Returns:
            Subscription 对象
        """
        subscription = emitter.subscribe(event, handler, once=once)
        self._subscriptions.append(subscription)
        return subscription

    def listen_to_many(self, emitter: EventEmitter, handlers: dict) -> List[Subscription]:
        """批量订阅 {event: handler}"""
        return [self.listen_to(emitter, event, handler) for event, handler in handlers.items()]

    def release(self, emitter: Optional[EventEmitter] = None, event: Optional[str] = None) -> int:
        """
        释放匹配的订阅

        Args:
            emitter: None 匹配所有发布者
            event: None 匹配所有事件

        Returns:
            释放的数量
        """
        kept: List[Subscription] = []
        released = 0
        for subscription in self._subscriptions:
            matches = (emitter is None or subscription.emitter is emitter) and (
                event is None or subscription.event == event
            )
            if matches:
                if subscription.active:
                    released += 1
                subscription.cancel()
            elif subscription.active:
                kept.append(subscription)
        self._subscriptions = kept
        return released

    def release_all(self) -> int:
        """释放所有订阅并清空账本"""
        subscriptions, self._subscriptions = self._subscriptions, []
        released = 0
        for subscription in subscriptions:
            if subscription.active:
                released += 1
            subscription.cancel()
        if released and self.name:
            logger.debug(f"{self.name}: released {released} subscriptions")
        return released

    def emitters(self) -> List[Any]:
        """当前持有订阅的发布者（去重，用于调试）"""
        seen: List[Any] = []
        for subscription in self._subscriptions:
            if subscription.active and not any(e is subscription.emitter for e in seen):
                seen.append(subscription.emitter)
        return seen


__all__ = ["SubscriptionLedger"]
