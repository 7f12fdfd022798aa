"""
Schema registry - read-only view of the declared entity/relation schema.

The resolver only ever asks two questions of it: the relations of an entity
and the unique fields of an entity. Everything else here is about building it.

Usage:
    from relplan.core.registry import SchemaRegistry

    registry = SchemaRegistry.from_file("schema.yaml")
    registry.get_relations("Post")       # RelationSchema
    registry.get_unique_fields("User")   # frozenset({"email"})

    # or straight from SQLAlchemy declarative models
    registry = SchemaRegistry.from_models([Post, Tag, Category])
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from sqlalchemy import UniqueConstraint, inspect
from sqlalchemy.orm import MANYTOONE

from .compiler import compile_schema
from .defs import EntityDef, RelationDescriptor, RelationSchema
from .errors import SchemaConfigError, UnknownEntityError
from .utils import to_pascal_case


logger = logging.getLogger(__name__)


class SchemaRegistry:
    """
    Immutable lookup of entity definitions.

    Entity names are matched across naming conventions, so "post_tag",
    "postTag" and "PostTag" all address the same entity.
    """

    def __init__(self, entities: Mapping[str, EntityDef]):
        self._entities: dict[str, EntityDef] = dict(entities)
        self._lookup: dict[str, str] = {}

        errors = []
        for name in self._entities:
            key = to_pascal_case(name)
            existing = self._lookup.get(key)
            if existing is not None:
                errors.append(f"[{name}] Entity name clashes with '{existing}'")
                continue
            self._lookup[key] = name
        if errors:
            raise SchemaConfigError(errors)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_graph(cls, document: dict[str, Any]) -> "SchemaRegistry":
        """Build a registry from a schema document dict."""
        entities = compile_schema(document)
        logger.info(f"Schema registry built with {len(entities)} entities")
        return cls(entities)

    @classmethod
    def from_file(cls, path: Path | str) -> "SchemaRegistry":
        """Build a registry from a YAML or JSON schema document."""
        path = Path(path)
        if not path.exists():
            raise SchemaConfigError([f"Schema file '{path}' not found"])

        text = path.read_text()
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)

        if not isinstance(data, dict):
            raise SchemaConfigError([f"Schema file '{path}' must contain a mapping"])

        logger.info(f"Loading schema from {path}")
        return cls.from_graph(data)

    @classmethod
    def from_models(cls, models: Iterable[type]) -> "SchemaRegistry":
        """
        Build a registry from SQLAlchemy declarative mapped classes.

        Relationships become relation descriptors, columns declared unique
        (directly or through a single-column UniqueConstraint) become unique fields.
        """
        entities: dict[str, EntityDef] = {}
        for model in models:
            entity = _entity_from_model(model)
            entities[entity.name] = entity

        errors = [
            f"[{entity.name}.{rel.name}] Unknown target entity '{rel.target}'"
            for entity in entities.values()
            for rel in entity.relations
            if rel.target not in entities
        ]
        if errors:
            raise SchemaConfigError(errors)

        logger.info(f"Schema registry built from {len(entities)} mapped models")
        return cls(entities)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_entity(self, name: str) -> EntityDef:
        """Get the full definition of an entity."""
        key = self._lookup.get(to_pascal_case(name))
        if key is None:
            raise UnknownEntityError(name, list(self._entities))
        return self._entities[key]

    def get_relations(self, name: str) -> RelationSchema:
        """Relation fields of an entity, split into singular and list."""
        return self.get_entity(name).relations

    def get_unique_fields(self, name: str) -> frozenset[str]:
        """Fields declared unique on an entity (primary keys excluded)."""
        return self.get_entity(name).unique_fields

    def has_entity(self, name: str) -> bool:
        return to_pascal_case(name) in self._lookup

    @property
    def entity_names(self) -> list[str]:
        return list(self._entities)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_entity(name)

    def __len__(self) -> int:
        return len(self._entities)


def _entity_from_model(model: type) -> EntityDef:
    """Read one mapped class into an EntityDef."""
    mapper = inspect(model)
    table = mapper.local_table

    keys = tuple(column.key for column in mapper.primary_key)
    fields = frozenset(attr.key for attr in mapper.column_attrs)

    unique = {column.key for column in table.columns if column.unique}
    for constraint in table.constraints:
        if isinstance(constraint, UniqueConstraint) and len(constraint.columns) == 1:
            unique.update(column.key for column in constraint.columns)

    descriptors = []
    for rel in mapper.relationships:
        foreign_key_field = None
        foreign_reference_field = "id"
        # local_remote_pairs is (local column, remote column); only a MANYTOONE
        # side owns the foreign key column.
        if rel.direction is MANYTOONE and rel.local_remote_pairs:
            local, remote = rel.local_remote_pairs[0]
            foreign_key_field = local.key
            foreign_reference_field = remote.key

        descriptors.append(RelationDescriptor(
            name=rel.key,
            target=rel.mapper.class_.__name__,
            cardinality="many" if rel.uselist else "one",
            foreign_key_field=foreign_key_field,
            foreign_reference_field=foreign_reference_field,
        ))

    return EntityDef(
        name=model.__name__,
        keys=keys or ("id",),
        fields=fields,
        unique_fields=frozenset(unique - set(keys)),
        relations=RelationSchema.from_descriptors(descriptors),
    )
