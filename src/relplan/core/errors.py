"""
Custom exceptions for relplan.
"""

from __future__ import annotations

from typing import Any, Optional


class RelplanError(Exception):
    """Base exception for all relplan errors."""
    pass


class ResolutionError(RelplanError):
    """
    Raised when a write payload cannot be compiled into a mutation plan.

    Carries a stable ``code`` and an HTTP-like ``status_code`` so the
    surrounding request layer can map it to a response without string matching.
    """

    code = "ResolutionError"
    status_code = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidActionValue(ResolutionError):
    """Raised when a marker carries a value outside the allowed verb set."""

    code = "InvalidActionValue"

    def __init__(self, value: Any, allowed: list[str], action_key: str = "apiAction"):
        self.value = value
        self.allowed = allowed
        super().__init__(
            f'Unknown value "{value}" for {action_key} field, '
            f"available values are {', '.join(allowed)}.",
            {"value": value, "allowed": allowed},
        )


class InvalidActionUsage(ResolutionError):
    """Raised when a marker appears outside of a relation value."""

    code = "InvalidActionUsage"
    status_code = 500

    def __init__(self, action_key: str = "apiAction", body: Optional[dict[str, Any]] = None):
        super().__init__(
            f"Invalid usage of {action_key} field, it must only be used on "
            "relation fields whether single or multiple.",
            {"data": body} if body is not None else None,
        )


class NoUniqueIdentifier(ResolutionError):
    """Raised when an item to update/disconnect/delete has no identifying field."""

    code = "NoUniqueIdentifier"

    def __init__(self, entity: str, item: dict[str, Any]):
        self.entity = entity
        super().__init__(
            f"No unique fields on {entity} item to be used in the where clause",
            {"entity": entity, "data": item},
        )


class NestingTooDeep(ResolutionError):
    """Raised when relations are nested deeper than the configured limit."""

    code = "NestingTooDeep"

    def __init__(self, max_depth: int, path: str):
        self.max_depth = max_depth
        self.path = path
        super().__init__(
            f"Relation nesting exceeds max depth {max_depth} at '{path}'",
            {"max_depth": max_depth, "path": path},
        )


class SchemaConfigError(RelplanError):
    """Raised when a schema document is invalid."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Schema validation failed:\n" + "\n".join(errors))


class UnknownEntityError(SchemaConfigError):
    """Raised when looking up an entity the registry does not declare."""

    def __init__(self, entity: str, available: Optional[list[str]] = None):
        self.entity = entity
        message = f"Unknown entity '{entity}'"
        if available:
            message += f". Available: {sorted(available)}"
        super().__init__([message])
