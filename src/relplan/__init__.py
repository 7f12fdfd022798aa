"""
relplan - relation mutation planning for schema-driven CRUD layers.

Compiles nested write payloads (an entity together with its related
entities) into store-native relation mutations: create, connect, update,
delete and disconnect per relation field.

Usage:
    from relplan import EntityPlanner, SchemaRegistry

    registry = SchemaRegistry.from_file("schema.yaml")
    planner = EntityPlanner(registry, "Post")
    args = planner.plan_update_one(
        {"id": "p1"},
        {"tags": [{"id": "t1"}, {"id": "t2", "apiAction": "disconnect"}]},
    )
"""

from __future__ import annotations

from .config import PlannerConfig, load_config
from .core import (
    ALLOWED_ACTIONS,
    STORE_OPERATIONS,
    ApiAction,
    ConnectClassifier,
    EntityDef,
    InvalidActionUsage,
    InvalidActionValue,
    ItemKind,
    NestingTooDeep,
    NoUniqueIdentifier,
    RelationDescriptor,
    RelationResolver,
    RelationSchema,
    RelplanError,
    ResolutionError,
    SchemaConfigError,
    SchemaRegistry,
    UnknownEntityError,
    is_mutation_format,
    resolve_relations,
    scrub_markers,
    validate_action,
)
from .service import CREATE_IGNORED_ACTIONS, UPDATE_IGNORED_ACTIONS, EntityPlanner

__version__ = "0.1.0"

__all__ = [
    # Config
    "PlannerConfig",
    "load_config",
    # Definitions
    "EntityDef",
    "RelationDescriptor",
    "RelationSchema",
    # Errors
    "RelplanError",
    "ResolutionError",
    "InvalidActionValue",
    "InvalidActionUsage",
    "NoUniqueIdentifier",
    "NestingTooDeep",
    "SchemaConfigError",
    "UnknownEntityError",
    # Registry
    "SchemaRegistry",
    # Resolution
    "ApiAction",
    "ALLOWED_ACTIONS",
    "STORE_OPERATIONS",
    "validate_action",
    "is_mutation_format",
    "ConnectClassifier",
    "RelationResolver",
    "ItemKind",
    "resolve_relations",
    "scrub_markers",
    # Service
    "EntityPlanner",
    "CREATE_IGNORED_ACTIONS",
    "UPDATE_IGNORED_ACTIONS",
]
