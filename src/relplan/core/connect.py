"""
Connectability classifier.

Decides from shape alone whether a nested object only identifies an existing
record (so it can be connected) and, for updates, which field identifies it.
"""

from __future__ import annotations

from typing import Any, Optional

from .actions import DEFAULT_ACTION_KEY, ApiAction, read_action
from .errors import NoUniqueIdentifier
from .registry import SchemaRegistry


class ConnectClassifier:
    """
    Shape-based connect/identify checks for one registry.

    Usage:
        classifier = ConnectClassifier(registry)
        classifier.can_connect("Tag", {"id": "t1"})            # True
        classifier.can_connect("User", {"email": "a@b.c"})     # True if email is unique
        classifier.find_identifier("User", {"email": "a@b.c", "name": "A"})
        # ("email", "a@b.c")
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        action_key: str = DEFAULT_ACTION_KEY,
        identity_field: str = "id",
    ):
        self.registry = registry
        self.action_key = action_key
        self.identity_field = identity_field

    def can_connect(self, entity: str, candidate: Any) -> bool:
        """
        Check if ``candidate`` can be used to connect to an existing ``entity``.

        True when the candidate is explicitly marked "connect", or carries
        exactly one field which is the identity field or a unique field of
        ``entity``. Any other marker rules connecting out.
        """
        if not isinstance(candidate, dict) or not candidate:
            return False

        action = read_action(candidate, self.action_key)
        if action is ApiAction.CONNECT:
            return True
        if action is not None:
            return False

        if len(candidate) != 1:
            return False

        (field_name, value), = candidate.items()
        if value is None:
            return False
        if field_name == self.identity_field:
            return True

        return field_name in self.registry.get_unique_fields(entity)

    def has_identity(self, candidate: dict[str, Any]) -> bool:
        """Check if the identity field is present and set."""
        return candidate.get(self.identity_field) is not None

    def find_identifier(self, entity: str, candidate: dict[str, Any]) -> Optional[tuple[str, Any]]:
        """
        Find the (field, value) pair that addresses an existing record.

        The identity field wins when present; otherwise the first field that
        on its own would be connectable.
        """
        if self.has_identity(candidate):
            return self.identity_field, candidate[self.identity_field]

        for field_name, value in candidate.items():
            if field_name == self.action_key:
                continue
            if self.can_connect(entity, {field_name: value}):
                return field_name, value

        return None

    def require_identifier(self, entity: str, candidate: dict[str, Any]) -> tuple[str, Any]:
        """Like find_identifier, but raises NoUniqueIdentifier when nothing matches."""
        identifier = self.find_identifier(entity, candidate)
        if identifier is None:
            raise NoUniqueIdentifier(entity, candidate)
        return identifier
