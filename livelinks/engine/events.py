"""
livelinks/engine/events.py

可观察对象 - 按事件名订阅/取消订阅/发布
每个实体、集合和链接各自持有一个 EventEmitter（组合而非继承）。

Dispatch is synchronous: every handler runs to completion before emit()
returns. A subscription cancelled while an emit is in progress is skipped
for the rest of that dispatch.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from livelinks.config import get_settings

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


@dataclass(eq=False)
class Subscription:
    """
    单个订阅

    Attributes:
        emitter: 发布者
        event: 事件名
        handler: 处理函数
        once: 是否只触发一次
        active: 是否仍然有效
    """

    emitter: "EventEmitter"
    event: str
    handler: Handler
    once: bool = False
    active: bool = True

    def cancel(self) -> None:
        """取消订阅（幂等）"""
        if self.active:
            self.emitter._discard(self)


@dataclass
class DispatchResult:
    """
    事件分发结果

    Attributes:
        event: 事件名
        subscriber_count: 订阅者数量
        success_count: 成功处理的数量
        failure_count: 失败的数量（仅在隔离模式下）
        errors: (handler, exception) 列表
    """

    event: str
    subscriber_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    errors: List[Tuple[Handler, Exception]] = field(default_factory=list)


class EventEmitter:
    """
    事件发布者

    Example:
        >>> emitter = EventEmitter(name="Entity(id=1)")
        >>> sub = emitter.subscribe("change", lambda *args: print(args))
        >>> emitter.emit("change", 1, 2)
        (1, 2)
        >>> sub.cancel()
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._subscribers: Dict[str, List[Subscription]] = {}

    def __repr__(self) -> str:
        return f"EventEmitter({self.name!r})"

    def subscribe(self, event: str, handler: Handler, once: bool = False) -> Subscription:
        """
        订阅事件

        Args:
            event: 事件名（如 "change:foo", "add"）
            handler: 处理函数，接收 emit() 的位置参数
            once: True 则在第一次触发后自动取消

        Returns:
            Subscription 对象，可用于取消
        """
        if not callable(handler):
            raise TypeError(f"Handler for '{event}' must be callable")

        subscription = Subscription(self, event, handler, once=once)
        self._subscribers.setdefault(event, []).append(subscription)
        return subscription

    def once(self, event: str, handler: Handler) -> Subscription:
        """订阅一次"""
        return self.subscribe(event, handler, once=True)

    def unsubscribe(self, event: Optional[str] = None, handler: Optional[Handler] = None) -> int:
        """
        取消订阅

        Args:
            event: 事件名；None 匹配所有事件
            handler: 处理函数；None 匹配所有处理函数

        Returns:
            取消的订阅数量
        """
        events = [event] if event is not None else list(self._subscribers)
        removed = 0
        for name in events:
            for subscription in list(self._subscribers.get(name, [])):
                if handler is None or subscription.handler == handler:
                    self._discard(subscription)
                    removed += 1
        return removed

    def _discard(self, subscription: Subscription) -> None:
        subscription.active = False
        subscriptions = self._subscribers.get(subscription.event)
        if not subscriptions:
            return
        try:
            subscriptions.remove(subscription)
        except ValueError:
            return
        if not subscriptions:
            del self._subscribers[subscription.event]

    def emit(self, event: str, *args: Any) -> DispatchResult:
        """
        发布事件（同步执行所有处理器）

        Handler exceptions propagate unless ISOLATE_HANDLER_ERRORS is set,
        in which case they are logged and collected in the result.

        Args:
            event: 事件名
            *args: 传给处理器的参数

        Returns:
            DispatchResult
        """
        subscriptions = list(self._subscribers.get(event, ()))
        result = DispatchResult(event=event, subscriber_count=len(subscriptions))
        if not subscriptions:
            return result

        current = get_settings()
        if current.TRACE_EVENTS:
            logger.debug(f"{self.name or 'emitter'} -> {event} ({len(subscriptions)} handlers)")

        for subscription in subscriptions:
            if not subscription.active:
                continue
            if subscription.once:
                subscription.cancel()

            if not current.ISOLATE_HANDLER_ERRORS:
                subscription.handler(*args)
                result.success_count += 1
                continue

            try:
                subscription.handler(*args)
                result.success_count += 1
            except Exception as e:
                result.failure_count += 1
                result.errors.append((subscription.handler, e))
                logger.error(
                    f"Handler {getattr(subscription.handler, '__name__', subscription.handler)!r} "
                    f"failed for {event} on {self.name or 'emitter'}: {e}",
                    exc_info=True,
                )

        return result

    def subscriber_count(self, event: Optional[str] = None) -> int:
        """获取订阅者数量（用于调试和测试）"""
        if event is not None:
            return len(self._subscribers.get(event, ()))
        return sum(len(subs) for subs in self._subscribers.values())

    def get_subscribers(self) -> Dict[str, List[str]]:
        """事件名到处理器名称列表的映射（用于调试）"""
        return {
            name: [getattr(s.handler, "__name__", repr(s.handler)) for s in subs]
            for name, subs in self._subscribers.items()
        }

    def clear(self) -> None:
        """清空所有订阅"""
        for subscriptions in list(self._subscribers.values()):
            for subscription in list(subscriptions):
                self._discard(subscription)


__all__ = [
    "Handler",
    "Subscription",
    "DispatchResult",
    "EventEmitter",
]
