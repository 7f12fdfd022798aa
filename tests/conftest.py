from __future__ import annotations

import copy

import pytest

from relplan import PlannerConfig, RelationResolver, SchemaRegistry


SCHEMA = {
    "version": 1,
    "entities": {
        "Post": {
            "keys": ["id"],
            "fields": {
                "id": {"type": "string"},
                "title": {"type": "string"},
                "slug": {"type": "string", "unique": True},
                "category_id": {"type": "string"},
                "author_id": {"type": "string"},
            },
            "relations": {
                "tags": {"target": "Tag", "cardinality": "many"},
                "comments": {"target": "Comment", "cardinality": "many"},
                "category": {
                    "target": "Category",
                    "cardinality": "one",
                    "ref": {"from_field": "category_id", "to_field": "id"},
                },
                "author": {
                    "target": "User",
                    "cardinality": "one",
                    "ref": {"from_field": "author_id"},
                },
            },
        },
        "Tag": {
            "fields": {
                "id": {"type": "string"},
                "label": {"type": "string"},
            },
        },
        "Category": {
            "fields": {
                "id": {"type": "string"},
                "name": {"type": "string"},
                "parent_id": {"type": "string"},
            },
            "relations": {
                "parent": {
                    "target": "Category",
                    "cardinality": "one",
                    "ref": {"from_field": "parent_id"},
                },
                "posts": {"target": "Post", "cardinality": "many"},
            },
        },
        "User": {
            "fields": {
                "id": {"type": "string"},
                "email": {"type": "string", "unique": True},
                "username": {"type": "string", "unique": True},
                "name": {"type": "string"},
            },
            "relations": {
                "profile": {"target": "Profile", "cardinality": "one"},
            },
        },
        "Profile": {
            "fields": {
                "id": {"type": "string"},
                "bio": {"type": "string"},
                "user_id": {"type": "string"},
            },
        },
        "Comment": {
            "fields": {
                "id": {"type": "string"},
                "body": {"type": "string"},
            },
            "relations": {
                "author": {"target": "User", "cardinality": "one"},
            },
        },
    },
}


@pytest.fixture
def schema_document() -> dict:
    return copy.deepcopy(SCHEMA)


@pytest.fixture
def registry(schema_document) -> SchemaRegistry:
    return SchemaRegistry.from_graph(schema_document)


@pytest.fixture
def resolver(registry) -> RelationResolver:
    return RelationResolver(registry)


@pytest.fixture
def post_relations(registry):
    return registry.get_relations("Post")


@pytest.fixture
def config() -> PlannerConfig:
    return PlannerConfig()
