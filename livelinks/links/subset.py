"""
livelinks/links/subset.py

子集视图 - 按标识符列表过滤并排序的源集合投影

The view is owned by exactly one ReferenceLink. It bridges two directions:

- source -> view: an entity added to the source joins the view when its id
  is in the link's raw ids; an entity removed from the source always leaves
  the view.
- view -> link: a consumer adding/removing/resetting the view directly makes
  the link merge the view's membership back into its raw ids.

Mutations the link makes itself carry ``sync_link=False`` so they are not
merged back.
"""
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional
import logging

from livelinks.engine.ledger import SubscriptionLedger
from livelinks.ontology.interface import EntitySetLike

if TYPE_CHECKING:
    from livelinks.links.link import ReferenceLink

logger = logging.getLogger(__name__)

# 抑制标志：带 sync_link=False 的变更不会回写到链接
SYNC_OPTION = "sync_link"

CollectionFactory = Callable[..., Any]


def link_suppressed(options: Optional[Dict[str, Any]]) -> bool:
    """变更调用方是否选择不让链接响应"""
    return bool(options) and options.get(SYNC_OPTION) is False


class SubsetView:
    """
    子集视图

    Ordering: an entity sits at the index of its id in the link's raw ids.
    Entities whose id is not (yet) in the raw ids go after all known ones
    once the link has been valid at least once, and in front before that.

    Attributes:
        link: 所属链接
        source: 源集合
        collection: 对外暴露的有序集合（链接的解析值）
    """

    def __init__(self, link: "ReferenceLink", source: EntitySetLike, factory: CollectionFactory):
        self.link = link
        self.source = source
        self.collection = factory([], comparator=self._position)
        self._subscriptions = SubscriptionLedger(name="SubsetView")

        self._subscriptions.listen_to_many(
            source.events,
            {
                "add": self._on_source_add,
                "remove": self._on_source_remove,
            },
        )
        self._subscriptions.listen_to_many(
            self.collection.events,
            {
                "add": self._on_view_add,
                "remove": self._on_view_remove,
                "reset": self._on_view_reset,
            },
        )

    def __repr__(self) -> str:
        return f"SubsetView({self.ids()!r})"

    def _position(self, entity: Any) -> int:
        raw = self.link.raw_value
        ids = raw if isinstance(raw, list) else []
        if entity.id in ids:
            return ids.index(entity.id)
        return len(ids) if self.link.has_been_valid else -1

    def ids(self) -> List[Any]:
        return [entity.id for entity in self.collection]

    def covers(self, ids: List[str]) -> bool:
        """每个标识符都有对应实体在视图中"""
        return all(self.collection.get(ident) is not None for ident in ids)

    def sync(self, ids: List[str]) -> None:
        """
        把视图内容替换为源集合中当前存在的这些实体（缺失的忽略）

        Args:
            ids: 规范化后的标识符列表
        """
        entities = [self.source.get(ident) for ident in ids]
        present = [entity for entity in entities if entity is not None]

        # members replaced in the source (e.g. by a reset) are swapped for the current object
        stale = [m for m in self.collection if not any(m is p for p in present)]
        if stale:
            self.collection.remove(stale, **{SYNC_OPTION: False})
        self.collection.set(present, **{SYNC_OPTION: False})

    def destroy(self) -> None:
        """释放监听并清空视图"""
        self._subscriptions.release_all()
        self.collection.reset(None, **{SYNC_OPTION: False})

    # ============== source -> view ==============

    def _on_source_add(self, entity: Any, source: Any, options: Dict[str, Any]) -> None:
        raw = self.link.raw_value
        if isinstance(raw, list) and entity.id in raw:
            self.collection.add(entity)

    def _on_source_remove(self, entity: Any, source: Any, options: Dict[str, Any]) -> None:
        self.collection.remove(entity)

    # ============== view -> link ==============

    def _on_view_add(self, entity: Any, collection: Any, options: Dict[str, Any]) -> None:
        if not link_suppressed(options):
            self.link.merge_from_subset()

    def _on_view_remove(self, entity: Any, collection: Any, options: Dict[str, Any]) -> None:
        if not link_suppressed(options):
            self.link.merge_from_subset(removed=entity.id)

    def _on_view_reset(self, collection: Any, options: Dict[str, Any]) -> None:
        if not link_suppressed(options):
            self.link.merge_from_subset()


__all__ = ["SYNC_OPTION", "CollectionFactory", "link_suppressed", "SubsetView"]
