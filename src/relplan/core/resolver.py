"""
Relation mutation resolver - compiles nested write payloads into store-native
relation mutations.

A client sends an entity together with its related entities:

{
    "title": "Hello",
    "category": {"name": "Books"},
    "tags": [
        {"id": "t1"},
        {"id": "t2", "label": "renamed"},
        {"id": "t3", "apiAction": "disconnect"},
        {"label": "new"}
    ]
}

and the resolver turns every declared relation field into the mutation the
store expects:

{
    "title": "Hello",
    "category": {"create": {"name": "Books"}},
    "tags": {
        "create": [{"label": "new"}],
        "connect": [{"id": "t1"}],
        "update": [{"where": {"id": "t2"}, "data": {"label": "renamed"}}],
        "disconnect": [{"id": "t3"}]
    }
}

Nested objects are classified by shape unless they carry an explicit marker:
only an identifying field -> connect, no identity -> create, identity plus
other fields -> update. Values already shaped as store mutations pass through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from ..config import PlannerConfig
from .actions import (
    ApiAction,
    is_mutation_format,
    normalize_actions,
    read_action,
    strip_action,
)
from .connect import ConnectClassifier
from .defs import RelationDescriptor, RelationSchema
from .errors import InvalidActionUsage, NestingTooDeep, NoUniqueIdentifier
from .registry import SchemaRegistry
from .scrub import scrub_markers


logger = logging.getLogger(__name__)


class ItemKind(str, Enum):
    """What a single relation value resolves to."""
    CREATE = "create"
    CONNECT = "connect"
    UPDATE = "update"
    DELETE = "delete"
    DISCONNECT = "disconnect"


@dataclass
class FieldPlan:
    """Accumulates the mutations of one list relation field."""
    create: list[Any] = field(default_factory=list)
    connect: list[dict[str, Any]] = field(default_factory=list)
    update: list[dict[str, Any]] = field(default_factory=list)
    disconnect: list[dict[str, Any]] = field(default_factory=list)
    delete_ids: list[Any] = field(default_factory=list)

    def add_delete_id(self, value: Any) -> None:
        # ordered set; ids may be unhashable (e.g. composite dicts)
        if value not in self.delete_ids:
            self.delete_ids.append(value)

    def build(self, identity_field: str = "id") -> dict[str, Any]:
        """Materialise only the non-empty members."""
        plan: dict[str, Any] = {}
        if self.create:
            plan["create"] = self.create
        if self.connect:
            plan["connect"] = self.connect
        if self.update:
            plan["update"] = self.update
        if self.disconnect:
            plan["disconnect"] = self.disconnect
        if self.delete_ids:
            plan["deleteMany"] = {identity_field: {"in": self.delete_ids}}
        return plan


class RelationResolver:
    """
    Resolves relation fields of write payloads against a schema registry.

    Stateless apart from the read-only registry and settings, so one instance
    can serve concurrent callers.

    Usage:
        resolver = RelationResolver(registry)
        data = resolver.resolve_entity("Post", body)
        data = resolver.resolve_entity("Post", body, ignore_actions=["delete"])
    """

    def __init__(self, registry: SchemaRegistry, config: Optional[PlannerConfig] = None):
        self.registry = registry
        self.config = config or PlannerConfig()
        self.action_key = self.config.action_key
        self.identity_field = self.config.identity_field
        self.max_depth = self.config.max_depth
        self.classifier = ConnectClassifier(
            registry,
            action_key=self.action_key,
            identity_field=self.identity_field,
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def resolve(
        self,
        body: dict[str, Any],
        schema: RelationSchema,
        ignore_actions: Iterable[Any] | None = None,
    ) -> dict[str, Any]:
        """
        Resolve every relation field of ``body`` declared in ``schema``.

        Args:
            body: Write payload of the root entity (left unmodified)
            schema: Relation schema of the root entity
            ignore_actions: Marker verbs whose values are dropped instead of resolved

        Returns:
            New payload with relation fields replaced by mutation objects and
            every marker removed

        Raises:
            InvalidActionValue: A marker (or ignore entry) is not an allowed verb
            InvalidActionUsage: The root payload itself carries a marker
            NoUniqueIdentifier: An item to update/disconnect/delete cannot be addressed
            NestingTooDeep: Relations nest deeper than the configured max_depth
        """
        if not isinstance(body, dict):
            raise TypeError(f"Expected a dict body, got {type(body).__name__}")

        ignored = normalize_actions(ignore_actions, self.action_key)

        if self.action_key in body:
            raise InvalidActionUsage(self.action_key, body)

        resolved = self._resolve_body(body, schema, ignored, depth=0, path="")
        return scrub_markers(resolved, self.action_key)

    def resolve_entity(
        self,
        entity: str,
        body: dict[str, Any],
        ignore_actions: Iterable[Any] | None = None,
    ) -> dict[str, Any]:
        """Resolve ``body`` against the relations the registry declares for ``entity``."""
        return self.resolve(body, self.registry.get_relations(entity), ignore_actions)

    # -------------------------------------------------------------------------
    # Body / field level
    # -------------------------------------------------------------------------

    def _resolve_body(
        self,
        body: dict[str, Any],
        schema: RelationSchema,
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> dict[str, Any]:
        result = dict(body)
        for descriptor in schema:
            self._resolve_field(result, descriptor, ignored, depth, path)
        return result

    def _resolve_field(
        self,
        result: dict[str, Any],
        descriptor: RelationDescriptor,
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> None:
        name = descriptor.name
        value = result.get(name)
        if value is None:
            return

        field_path = f"{path}.{name}" if path else name

        if read_action(value, self.action_key) in ignored:
            logger.debug(f"{field_path}: dropped, marker is ignored")
            del result[name]
            return

        if is_mutation_format(value, self.action_key):
            logger.debug(f"{field_path}: already a mutation object, passing through")
            return

        if descriptor.is_list and not isinstance(value, list):
            logger.debug(f"{field_path}: list relation is not a list, leaving untouched")
            return
        if not descriptor.is_list and not isinstance(value, dict):
            logger.debug(f"{field_path}: singular relation is not an object, leaving untouched")
            return

        if self.max_depth is not None and depth + 1 > self.max_depth:
            raise NestingTooDeep(self.max_depth, field_path)

        if descriptor.is_list:
            plan = self._resolve_list(descriptor, value, ignored, depth, field_path)
            if plan is None:
                logger.debug(f"{field_path}: dropped, every item is ignored")
                del result[name]
            else:
                result[name] = plan
        else:
            result[name] = self._resolve_single(descriptor, value, ignored, depth, field_path)

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def classify(self, entity: str, item: Any, action: Optional[ApiAction] = None) -> ItemKind:
        """
        Decide what a single relation value means.

        "delete" and "disconnect" markers win outright and "update" forces an
        update; otherwise the shape decides: only an identifying field ->
        CONNECT, no identity -> CREATE, identity plus other fields -> UPDATE.
        A "create" marker is the implicit default and does not override shape.
        """
        if not isinstance(item, dict):
            return ItemKind.CREATE

        if action is ApiAction.DELETE:
            return ItemKind.DELETE
        if action is ApiAction.DISCONNECT:
            return ItemKind.DISCONNECT
        if action is not ApiAction.UPDATE:
            if self.classifier.can_connect(entity, item):
                return ItemKind.CONNECT
            if not self.classifier.has_identity(item):
                return ItemKind.CREATE
        return ItemKind.UPDATE

    # -------------------------------------------------------------------------
    # List relations
    # -------------------------------------------------------------------------

    def _resolve_list(
        self,
        descriptor: RelationDescriptor,
        items: list[Any],
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> Optional[dict[str, Any]]:
        """Resolve a list relation; None when every item was ignored."""
        target = descriptor.target
        plan = FieldPlan()
        skipped = 0

        for index, item in enumerate(items):
            item_path = f"{path}[{index}]"
            action = read_action(item, self.action_key)
            if action in ignored:
                skipped += 1
                continue

            kind = self.classify(target, item, action)
            logger.debug(f"{item_path}: {kind.value}")

            if kind is ItemKind.DELETE:
                if not self.classifier.has_identity(item):
                    raise NoUniqueIdentifier(target, strip_action(item, self.action_key))
                plan.add_delete_id(item[self.identity_field])
            elif kind is ItemKind.DISCONNECT:
                data = strip_action(item, self.action_key)
                field_name, value = self.classifier.require_identifier(target, data)
                plan.disconnect.append({field_name: value})
            elif kind is ItemKind.CONNECT:
                plan.connect.append(strip_action(item, self.action_key))
            elif kind is ItemKind.CREATE:
                plan.create.append(self._resolve_create(target, item, ignored, depth, item_path))
            elif kind is ItemKind.UPDATE:
                plan.update.append(self._resolve_update(target, item, ignored, depth, item_path))
            else:
                raise AssertionError(f"Unhandled item kind {kind!r}")

        if items and skipped == len(items):
            return None

        return plan.build(self.identity_field)

    # -------------------------------------------------------------------------
    # Singular relations
    # -------------------------------------------------------------------------

    def _resolve_single(
        self,
        descriptor: RelationDescriptor,
        value: dict[str, Any],
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> dict[str, Any]:
        target = descriptor.target
        action = read_action(value, self.action_key)
        kind = self.classify(target, value, action)
        logger.debug(f"{path}: {kind.value}")

        if kind is ItemKind.DELETE:
            return {"delete": True}
        if kind is ItemKind.DISCONNECT:
            return {"disconnect": True}
        if kind is ItemKind.CONNECT:
            return {"connect": strip_action(value, self.action_key)}
        if kind is ItemKind.CREATE:
            return {"create": self._resolve_create(target, value, ignored, depth, path)}
        if kind is ItemKind.UPDATE:
            return {"update": self._resolve_update(target, value, ignored, depth, path)}
        raise AssertionError(f"Unhandled item kind {kind!r}")

    # -------------------------------------------------------------------------
    # Nested bodies
    # -------------------------------------------------------------------------

    def _resolve_create(
        self,
        target: str,
        item: Any,
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> Any:
        if not isinstance(item, dict):
            return item
        data = strip_action(item, self.action_key)
        return self._resolve_nested(target, data, ignored, depth, path)

    def _resolve_update(
        self,
        target: str,
        item: dict[str, Any],
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> dict[str, Any]:
        data = strip_action(item, self.action_key)
        field_name, value = self.classifier.require_identifier(target, data)
        del data[field_name]
        return {
            "where": {field_name: value},
            "data": self._resolve_nested(target, data, ignored, depth, path),
        }

    def _resolve_nested(
        self,
        target: str,
        data: dict[str, Any],
        ignored: frozenset[ApiAction],
        depth: int,
        path: str,
    ) -> dict[str, Any]:
        # Nested relations resolve against the related entity's own schema
        schema = self.registry.get_relations(target)
        if not schema:
            return data
        return self._resolve_body(data, schema, ignored, depth + 1, path)


def resolve_relations(
    registry: SchemaRegistry,
    body: dict[str, Any],
    schema: RelationSchema,
    ignore_actions: Iterable[Any] | None = None,
    config: Optional[PlannerConfig] = None,
) -> dict[str, Any]:
    """
    Convenience function to resolve a payload in one call.

    Args:
        registry: Schema registry used for nested relations and unique fields
        body: Write payload of the root entity
        schema: Relation schema of the root entity
        ignore_actions: Marker verbs to drop instead of resolving
        config: Optional settings (marker key, identity field, max depth)

    Returns:
        Resolved payload ready for the store
    """
    return RelationResolver(registry, config).resolve(body, schema, ignore_actions)
