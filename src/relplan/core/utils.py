"""
Utility functions for relplan.

Includes:
- Case conversion used to match entity names across conventions
- Deep merge of query option dicts
"""

from __future__ import annotations

import re
from typing import Any


# =============================================================================
# Case conversion utilities
# =============================================================================

_CAMEL_TO_SNAKE_PATTERN = re.compile(r'(?<!^)(?=[A-Z])')
_SNAKE_TO_CAMEL_PATTERN = re.compile(r'_([a-z0-9])')


def to_snake_case(name: str) -> str:
    """
    Convert camelCase or PascalCase to snake_case.

    Examples:
        postTags -> post_tags
        PostTag -> post_tag
        HTTPResponse -> http_response
    """
    # Handle consecutive uppercase (HTTP -> http)
    result = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    result = _CAMEL_TO_SNAKE_PATTERN.sub('_', result)
    return result.replace('-', '_').replace('__', '_').lower()


def to_camel_case(name: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        post_tags -> postTags
        first_name -> firstName
    """
    return _SNAKE_TO_CAMEL_PATTERN.sub(lambda m: m.group(1).upper(), name)


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case or camelCase to PascalCase.

    Examples:
        post_tag -> PostTag
        postTag -> PostTag
    """
    camel = to_camel_case(to_snake_case(name))
    return camel[0].upper() + camel[1:] if camel else camel


# =============================================================================
# Merge utilities
# =============================================================================


def deep_merge(base: dict[str, Any], override: dict[str, Any] | None) -> dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    Nested dicts are merged, lists are concatenated, anything else in
    ``override`` replaces the value in ``base``. Neither input is modified.

    Example:
        deep_merge({"data": {"a": 1}}, {"data": {"b": 2}, "select": {"id": True}})
        ->
        {"data": {"a": 1, "b": 2}, "select": {"id": True}}
    """
    result = dict(base)
    if not override:
        return result

    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            result[key] = current + value
        else:
            result[key] = value

    return result
