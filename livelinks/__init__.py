"""
livelinks - 实时引用链接

在可观察实体的一个属性与可观察实体集合之间维护外键式的实时引用：
属性中存放标识符（或标识符列表），链接挂接期间该属性被替换为解析后的实体
（或有序子集视图），并随集合和属性的变化保持同步。

使用方式:
    >>> from livelinks import EntitySet, LinkableEntity
    >>> users = EntitySet([{"id": "u1"}])
    >>> post = LinkableEntity({"id": "p1", "author": "u1"})
    >>> link = post.create_link("author", users)
    >>> post.get("author")
    Entity(id='u1')
    >>> post.to_dict()
    {'id': 'p1', 'author': 'u1'}
"""

from livelinks.config import Settings, configure_logging, get_settings, settings
from livelinks.exceptions import (
    LinkError,
    LinkConstructionError,
    LinkUsageError,
    EntitySetError,
)
from livelinks.engine import EventEmitter, Subscription, DispatchResult, SubscriptionLedger
from livelinks.ontology import Entity, EntitySet, EntityLike, EntitySetLike
from livelinks.links import (
    ReferenceKind,
    classify,
    SYNC_OPTION,
    SubsetView,
    SingleReferenceResolver,
    LinkOptions,
    ReferenceLink,
    LinkHostMixin,
    LinkableEntity,
)

__version__ = "0.1.0"

__all__ = [
    # 配置
    "Settings",
    "configure_logging",
    "get_settings",
    "settings",
    # 异常
    "LinkError",
    "LinkConstructionError",
    "LinkUsageError",
    "EntitySetError",
    # 事件
    "EventEmitter",
    "Subscription",
    "DispatchResult",
    "SubscriptionLedger",
    # 实体
    "Entity",
    "EntitySet",
    "EntityLike",
    "EntitySetLike",
    # 链接
    "ReferenceKind",
    "classify",
    "SYNC_OPTION",
    "SubsetView",
    "SingleReferenceResolver",
    "LinkOptions",
    "ReferenceLink",
    "LinkHostMixin",
    "LinkableEntity",
]
