"""
Core module - schema definitions, registry and the relation resolver.
"""

from __future__ import annotations

from .actions import (
    ALLOWED_ACTIONS,
    DEFAULT_ACTION_KEY,
    STORE_OPERATIONS,
    ApiAction,
    is_mutation_format,
    normalize_actions,
    read_action,
    validate_action,
)
from .compiler import (
    CompilationError,
    CompilationResult,
    SchemaCompiler,
    compile_schema,
)
from .connect import ConnectClassifier
from .defs import Cardinality, EntityDef, RelationDescriptor, RelationSchema
from .errors import (
    InvalidActionUsage,
    InvalidActionValue,
    NestingTooDeep,
    NoUniqueIdentifier,
    RelplanError,
    ResolutionError,
    SchemaConfigError,
    UnknownEntityError,
)
from .registry import SchemaRegistry
from .resolver import FieldPlan, ItemKind, RelationResolver, resolve_relations
from .scrub import contains_marker, scrub_markers
from .utils import deep_merge, to_camel_case, to_pascal_case, to_snake_case

__all__ = [
    # Definitions
    "Cardinality",
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
    # Actions
    "ApiAction",
    "ALLOWED_ACTIONS",
    "DEFAULT_ACTION_KEY",
    "STORE_OPERATIONS",
    "validate_action",
    "read_action",
    "normalize_actions",
    "is_mutation_format",
    # Compiler
    "SchemaCompiler",
    "CompilationResult",
    "CompilationError",
    "compile_schema",
    # Registry
    "SchemaRegistry",
    # Classifier
    "ConnectClassifier",
    # Resolver
    "RelationResolver",
    "ItemKind",
    "FieldPlan",
    "resolve_relations",
    # Scrubber
    "scrub_markers",
    "contains_marker",
    # Utils
    "to_snake_case",
    "to_camel_case",
    "to_pascal_case",
    "deep_merge",
]
