"""
Marker scrubber - removes every marker key from a nested structure.
"""

from __future__ import annotations

from typing import Any

from .actions import DEFAULT_ACTION_KEY


def scrub_markers(value: Any, action_key: str = DEFAULT_ACTION_KEY) -> Any:
    """
    Return a structural copy of ``value`` with ``action_key`` removed everywhere.

    Dicts and lists (and tuples, returned as lists) are rebuilt; scalars are
    shared. The input is never modified.

    Example:
        {"a": {"apiAction": "x", "b": [{"apiAction": "y", "c": 1}]}}
        ->
        {"a": {"b": [{"c": 1}]}}
    """
    if isinstance(value, dict):
        return {
            key: scrub_markers(item, action_key)
            for key, item in value.items()
            if key != action_key
        }
    if isinstance(value, (list, tuple)):
        return [scrub_markers(item, action_key) for item in value]
    return value


def contains_marker(value: Any, action_key: str = DEFAULT_ACTION_KEY) -> bool:
    """Check if ``action_key`` appears anywhere in ``value``."""
    if isinstance(value, dict):
        return action_key in value or any(
            contains_marker(item, action_key) for item in value.values()
        )
    if isinstance(value, (list, tuple)):
        return any(contains_marker(item, action_key) for item in value)
    return False
