"""
Action markers - the explicit verb a client may attach to a relation value.

    {"tags": [{"id": "t1", "apiAction": "disconnect"}]}
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional

from .errors import InvalidActionValue


DEFAULT_ACTION_KEY = "apiAction"


class ApiAction(str, Enum):
    """Verbs a marker may name."""
    CREATE = "create"
    CONNECT = "connect"
    UPDATE = "update"
    DELETE = "delete"
    DISCONNECT = "disconnect"


ALLOWED_ACTIONS = [action.value for action in ApiAction]

# Keys of a store-native relation mutation object
STORE_OPERATIONS = frozenset({
    "create",
    "connect",
    "update",
    "delete",
    "disconnect",
    "deleteMany",
    "connectOrCreate",
    "upsert",
    "set",
})


def validate_action(value: Any, action_key: str = DEFAULT_ACTION_KEY) -> Optional[ApiAction]:
    """
    Validate a marker value.

    Returns None when the marker is absent, otherwise the matching ApiAction.

    Raises:
        InvalidActionValue: If the value is not one of the allowed verbs
    """
    if value is None:
        return None
    if isinstance(value, ApiAction):
        return value
    try:
        return ApiAction(value)
    except (ValueError, TypeError):
        raise InvalidActionValue(value, ALLOWED_ACTIONS, action_key) from None


def read_action(value: Any, action_key: str = DEFAULT_ACTION_KEY) -> Optional[ApiAction]:
    """Read and validate the marker carried by a relation value, if any."""
    if not isinstance(value, dict):
        return None
    return validate_action(value.get(action_key), action_key)


def normalize_actions(
    actions: Iterable[Any] | None,
    action_key: str = DEFAULT_ACTION_KEY,
) -> frozenset[ApiAction]:
    """Validate a collection of verbs (e.g. an ignore list) into ApiAction members."""
    if not actions:
        return frozenset()
    return frozenset(validate_action(action, action_key) for action in actions)


def strip_action(value: dict[str, Any], action_key: str = DEFAULT_ACTION_KEY) -> dict[str, Any]:
    """Shallow copy of ``value`` without the marker key."""
    return {k: v for k, v in value.items() if k != action_key}


def is_mutation_format(value: Any, action_key: str = DEFAULT_ACTION_KEY) -> bool:
    """
    Check if a value is already shaped as a store-native mutation object.

    True for a non-empty dict whose keys, the marker aside, all name
    store operations:

        {"connect": [{"id": 1}], "create": [{"name": "x"}]}  -> True
        {"id": 1, "name": "x"}                               -> False
    """
    if not isinstance(value, dict):
        return False
    keys = [key for key in value if key != action_key]
    return bool(keys) and all(key in STORE_OPERATIONS for key in keys)
