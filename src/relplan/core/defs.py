"""
Core dataclass definitions for relplan.

These describe the declared entity/relation schema the resolver walks. All of
them are frozen: the registry builds them once and never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional


Cardinality = Literal["one", "many"]


@dataclass(frozen=True)
class RelationDescriptor:
    """
    Definition of a relation field on an entity.

    Example: Post.category where category_id -> Category.id

        RelationDescriptor(
            name="category",
            target="Category",
            cardinality="one",
            foreign_key_field="category_id",
            foreign_reference_field="id",
        )
    """
    name: str  # field name on the owning entity
    target: str  # related entity name
    cardinality: Cardinality  # "one" (singular) or "many" (list)
    foreign_key_field: Optional[str] = None  # local join column, if declared
    foreign_reference_field: str = "id"  # join target on the related entity

    @property
    def is_list(self) -> bool:
        return self.cardinality == "many"


@dataclass(frozen=True)
class RelationSchema:
    """Relation fields of one entity, split by cardinality."""
    singular: tuple[RelationDescriptor, ...] = ()
    list: tuple[RelationDescriptor, ...] = ()

    @classmethod
    def from_descriptors(cls, descriptors) -> "RelationSchema":
        descriptors = tuple(descriptors)
        return cls(
            singular=tuple(d for d in descriptors if not d.is_list),
            list=tuple(d for d in descriptors if d.is_list),
        )

    def __iter__(self):
        yield from self.list
        yield from self.singular

    def __len__(self) -> int:
        return len(self.singular) + len(self.list)

    def get(self, name: str) -> Optional[RelationDescriptor]:
        for descriptor in self:
            if descriptor.name == name:
                return descriptor
        return None


@dataclass(frozen=True)
class EntityDef:
    """Complete definition of an entity as seen by the resolver."""
    name: str
    keys: tuple[str, ...] = ("id",)
    fields: frozenset[str] = field(default_factory=frozenset)
    unique_fields: frozenset[str] = field(default_factory=frozenset)
    relations: RelationSchema = field(default_factory=RelationSchema)
