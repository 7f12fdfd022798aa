"""
Pydantic models for schema documents.

A schema document is the JSON/YAML description of entities and their
relations the registry is built from:

{
    "version": 1,
    "entities": {
        "Post": {
            "keys": ["id"],
            "fields": {
                "id": {"type": "string"},
                "slug": {"type": "string", "unique": true},
                "category_id": {"type": "string"}
            },
            "relations": {
                "tags": {"target": "Tag", "cardinality": "many"},
                "category": {
                    "target": "Category",
                    "cardinality": "one",
                    "ref": {"from_field": "category_id", "to_field": "id"}
                }
            }
        }
    }
}
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldDocument(BaseModel):
    """Scalar field declaration."""
    model_config = ConfigDict(extra="allow")

    type: str = "string"
    unique: bool = False
    nullable: bool = True


class RefDocument(BaseModel):
    """Direct foreign-key reference of a relation."""
    from_field: Optional[str] = None
    to_field: str = "id"


class RelationDocument(BaseModel):
    """Relation declaration."""
    model_config = ConfigDict(extra="allow")

    target: str
    cardinality: str = "one"  # checked by the compiler
    ref: Optional[RefDocument] = None


class EntityDocument(BaseModel):
    """Entity declaration."""
    model_config = ConfigDict(extra="allow")

    keys: list[str] = Field(default_factory=lambda: ["id"])
    fields: dict[str, FieldDocument] = Field(default_factory=dict)
    relations: dict[str, RelationDocument] = Field(default_factory=dict)


class SchemaDocument(BaseModel):
    """Top-level schema document."""
    version: int = 1
    entities: dict[str, EntityDocument] = Field(default_factory=dict)
