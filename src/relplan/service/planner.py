"""
Entity planner - builds the argument objects the CRUD layer hands to the store.

Two calling conventions exist:

- creating a brand-new root entity must not update, delete or disconnect
  anything it is being linked to, so those markers are ignored;
- updating an existing root entity allows every verb.

Usage:
    planner = EntityPlanner(registry, "Post")
    args = planner.plan_create_one({"title": "Hi", "tags": [{"id": "t1"}]})
    # {"data": {"title": "Hi", "tags": {"connect": [{"id": "t1"}]}}}
    store.post.create(**args)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..config import PlannerConfig
from ..core.actions import ApiAction
from ..core.registry import SchemaRegistry
from ..core.resolver import RelationResolver
from ..core.utils import deep_merge


logger = logging.getLogger(__name__)


CREATE_IGNORED_ACTIONS = frozenset({
    ApiAction.DELETE,
    ApiAction.DISCONNECT,
    ApiAction.UPDATE,
})
UPDATE_IGNORED_ACTIONS: frozenset[ApiAction] = frozenset()


class EntityPlanner:
    """Plans create/update arguments for one entity."""

    def __init__(
        self,
        registry: SchemaRegistry,
        entity: str,
        config: Optional[PlannerConfig] = None,
    ):
        self.registry = registry
        self.entity = registry.get_entity(entity).name
        self.relations = registry.get_relations(self.entity)
        self.resolver = RelationResolver(registry, config)

    def plan_create_one(
        self,
        data: dict[str, Any],
        query_options: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Arguments for creating one record with its nested relations."""
        resolved = self.resolver.resolve(data, self.relations, CREATE_IGNORED_ACTIONS)
        logger.debug(f"Planned create for {self.entity}")
        return deep_merge({"data": resolved}, query_options)

    def plan_create_many(
        self,
        items: Iterable[dict[str, Any]],
        query_options: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Arguments for creating several records; each item is resolved on its own."""
        resolved = [
            self.resolver.resolve(item, self.relations, CREATE_IGNORED_ACTIONS)
            for item in items
        ]
        logger.debug(f"Planned create of {len(resolved)} {self.entity} records")
        return deep_merge({"data": resolved}, query_options)

    def plan_update_one(
        self,
        where: dict[str, Any],
        data: dict[str, Any],
        query_options: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Arguments for updating one record, any relation verb allowed."""
        resolved = self.resolver.resolve(data, self.relations, UPDATE_IGNORED_ACTIONS)
        logger.debug(f"Planned update for {self.entity} where {where}")
        return deep_merge({"where": dict(where), "data": resolved}, query_options)
