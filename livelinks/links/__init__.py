"""
livelinks/links - 引用链接引擎

- classifier: 引用类型判定
- resolver: 单引用解析
- subset: 子集视图
- link: 链接协调器
- host: 宿主集成接口
"""

from livelinks.links.classifier import ReferenceKind, classify, reference_id, canonical_ids
from livelinks.links.resolver import ResolverState, SingleReferenceResolver
from livelinks.links.subset import SYNC_OPTION, CollectionFactory, SubsetView, link_suppressed
from livelinks.links.link import ArrivalCallback, LinkOptions, ReferenceLink
from livelinks.links.host import LinkHostMixin, LinkableEntity

__all__ = [
    "ReferenceKind",
    "classify",
    "reference_id",
    "canonical_ids",
    "ResolverState",
    "SingleReferenceResolver",
    "SYNC_OPTION",
    "CollectionFactory",
    "SubsetView",
    "link_suppressed",
    "ArrivalCallback",
    "LinkOptions",
    "ReferenceLink",
    "LinkHostMixin",
    "LinkableEntity",
]
