"""
livelinks/links/host.py

宿主集成 - 为实体类型提供按属性管理链接的固定接口

    create_link / get_link / links / remove_link / deref / on_arrival
    to_dict (linked attributes serialize in identifier form)
"""
from typing import Any, Dict, Optional, Union
import logging

from livelinks.exceptions import LinkUsageError
from livelinks.links.link import ArrivalCallback, LinkOptions, ReferenceLink
from livelinks.ontology.base import Entity

logger = logging.getLogger(__name__)


class LinkHostMixin:
    """
    链接宿主混入类

    The host must provide ``events``, ``get``/``set`` and ``to_dict`` (see
    Entity). Owner notifications: "link" (link) after create_link, "unlink"
    (link) after each removal.
    """

    def _link_registry(self) -> Dict[str, ReferenceLink]:
        registry = self.__dict__.get("_links")
        if registry is None:
            registry = self.__dict__["_links"] = {}
        return registry

    def create_link(
        self,
        attribute: str,
        source: Any,
        options: Union[LinkOptions, Dict[str, Any], None] = None,
    ) -> ReferenceLink:
        """
        在属性上建立链接（替换已有链接）

        Args:
            attribute: 属性名
            source: 源实体集合
            options: LinkOptions 或等价字典

        Returns:
            新建并已挂接的链接

        Raises:
            LinkConstructionError: 参数无效（已有链接保持不变）
        """
        ReferenceLink.validate(self, attribute, source)
        options = ReferenceLink.coerce_options(options)
        self.remove_link(attribute)

        link = ReferenceLink(self, attribute, source, options)
        self._link_registry()[attribute] = link

        logger.info(f"{self!r}: linked '{attribute}'")
        self.events.emit("link", link)
        return link

    def get_link(self, attribute: str) -> Optional[ReferenceLink]:
        """按属性获取链接"""
        return self._link_registry().get(attribute)

    def links(self) -> Dict[str, ReferenceLink]:
        """所有链接（副本）"""
        return dict(self._link_registry())

    def remove_link(self, attribute: Optional[str] = None) -> "LinkHostMixin":
        """
        断开并移除链接

        Args:
            attribute: 属性名；None 移除全部链接

        Returns:
            self
        """
        registry = self._link_registry()
        if attribute is None:
            for key in list(registry):
                self.remove_link(key)
            return self

        link = registry.get(attribute)
        if link is None:
            return self

        link.detach()
        del registry[attribute]

        logger.info(f"{self!r}: unlinked '{attribute}'")
        self.events.emit("unlink", link)
        return self

    def deref(self, attribute: str) -> Any:
        """
        获取属性的标识符形式

        Returns:
            链接的 raw_value；没有链接时返回 None
        """
        link = self.get_link(attribute)
        if link is None:
            return None
        raw = link.raw_value
        return list(raw) if isinstance(raw, list) else raw

    def on_arrival(self, attribute: str, callback: ArrivalCallback) -> "LinkHostMixin":
        """
        等待链接有效后调用 callback(resolved_value, link)

        Raises:
            LinkUsageError: 属性上没有链接，或 callback 不可调用
        """
        link = self.get_link(attribute)
        if link is None:
            raise LinkUsageError(f"No link at attribute '{attribute}'.", attribute)
        if not callable(callback):
            raise LinkUsageError("Expecting function for callback.", attribute)

        link.wait_for_valid(callback)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """序列化时已挂接的链接属性使用标识符形式"""
        data = super().to_dict()
        for attribute, link in self._link_registry().items():
            if link.active and attribute in data:
                raw = link.raw_value
                data[attribute] = list(raw) if isinstance(raw, list) else raw
        return data


class LinkableEntity(LinkHostMixin, Entity):
    """
    可建立链接的实体

    Example:
        >>> post = LinkableEntity({"id": "p1", "author": "u1"})
        >>> post.create_link("author", users)
        >>> post.on_arrival("author", lambda user, link: print(user))
    """


__all__ = ["LinkHostMixin", "LinkableEntity"]
