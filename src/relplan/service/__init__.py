"""
Service layer - store argument planning for CRUD operations.
"""

from __future__ import annotations

from .planner import CREATE_IGNORED_ACTIONS, UPDATE_IGNORED_ACTIONS, EntityPlanner

__all__ = [
    "EntityPlanner",
    "CREATE_IGNORED_ACTIONS",
    "UPDATE_IGNORED_ACTIONS",
]
