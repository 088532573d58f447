"""
livelinks/ontology - 实体抽象层

- interface: 能力契约（EntityLike, EntitySetLike）
- base: 可观察实体
- collection: 可观察实体集合
"""

from livelinks.ontology.interface import EntityLike, EntitySetLike, is_entity, is_entity_set
from livelinks.ontology.base import Entity, is_equal
from livelinks.ontology.collection import Comparator, EntitySet

__all__ = [
    "EntityLike",
    "EntitySetLike",
    "is_entity",
    "is_entity_set",
    "Entity",
    "is_equal",
    "Comparator",
    "EntitySet",
]
