"""
livelinks/engine - 事件基础设施

- events: 可观察对象（订阅/取消订阅/发布）
- ledger: 订阅账本（批量释放）
"""

from livelinks.engine.events import (
    Handler,
    Subscription,
    DispatchResult,
    EventEmitter,
)
from livelinks.engine.ledger import SubscriptionLedger

__all__ = [
    "Handler",
    "Subscription",
    "DispatchResult",
    "EventEmitter",
    "SubscriptionLedger",
]
