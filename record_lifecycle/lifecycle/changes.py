"""
Change tracking and the no-op guard.
"""

from typing import Any, Dict, Iterable, Mapping

from ..i18n import Translator
from .enums import OPTIMISTIC_LOCK, Status
from .errors import NoRecordDeleted, NoRecordUpdated

# Attributes maintained by the lifecycle core, never part of a change set.
UNTRACKED_ATTRIBUTES = frozenset({"id", OPTIMISTIC_LOCK, "detail_info", "sync"})


class ChangeTracker:
    """Compute dirty attributes and reject writes that change nothing."""

    def __init__(
        self,
        translator: Translator,
        untracked: Iterable[str] = UNTRACKED_ATTRIBUTES,
    ):
        self.translator = translator
        self.untracked = frozenset(untracked)

    def diff(
        self, before: Mapping[str, Any], after: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Return ``{attribute: new_value}`` for every changed attribute."""
        return {
            key: value
            for key, value in after.items()
            if key not in self.untracked and (key not in before or before[key] != value)
        }

    def ensure_updated(self, changes: Mapping[str, Any]) -> None:
        if not changes:
            raise NoRecordUpdated(self.translator.t("noRecordUpdated"))

    def ensure_deleted(self, stored_status: Any) -> None:
        if stored_status is not None and Status(stored_status) == Status.DELETED:
            raise NoRecordDeleted(self.translator.t("noRecordDeleted"))
