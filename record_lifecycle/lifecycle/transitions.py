"""
Status transition engine.

The state machine is data: a table mapping each old status to the set of
statuses it may move to, plus a set of statuses that are locked against
further updates. Resources can supply their own table; the engine only
enforces the mechanism:

1. A Deleted record can only leave Deleted when the actor is a superadmin.
2. An old status with no table row cannot transition at all.
3. A disallowed-for-update status cannot transition (the superadmin
   un-delete path is the one carve-out).
4. The new status must be listed in the old status' row.
"""

from typing import Iterable, Mapping, Optional

from ..i18n import Translator
from .actor import ActorContext
from .enums import DISALLOWED_UPDATE_STATUSES, Status


class TransitionTable:
    """Allowed transitions ``old -> {new, ...}`` and the locked statuses."""

    def __init__(
        self,
        allowed: Mapping[Status, Iterable[Status]],
        disallowed: Iterable[Status] = DISALLOWED_UPDATE_STATUSES,
    ):
        self.allowed = {
            Status(old): frozenset(Status(n) for n in new)
            for old, new in allowed.items()
        }
        self.disallowed = frozenset(Status(s) for s in disallowed)

    def has_row(self, old: Status) -> bool:
        return old in self.allowed

    def targets(self, old: Status) -> frozenset:
        return self.allowed.get(old, frozenset())

    def is_disallowed(self, status: Status) -> bool:
        return status in self.disallowed

    def pairs(self):
        """Yield every allowed ``(old, new)`` pair."""
        for old, targets in self.allowed.items():
            for new in targets:
                yield old, new


DEFAULT_TRANSITIONS = TransitionTable(
    {
        Status.DRAFT: [Status.INACTIVE, Status.ACTIVE, Status.DELETED, Status.MAINTENANCE],
        Status.ACTIVE: [Status.COMPLETED, Status.APPROVED, Status.REJECTED],
        Status.INACTIVE: [Status.ACTIVE, Status.DRAFT, Status.DELETED],
        Status.MAINTENANCE: [Status.INACTIVE, Status.ACTIVE, Status.DRAFT, Status.DELETED],
        Status.APPROVED: [Status.COMPLETED, Status.APPROVED, Status.REJECTED],
        # Only reachable through the superadmin un-delete carve-out.
        Status.DELETED: [Status.DRAFT, Status.INACTIVE],
    }
)


class StatusTransitionEngine:
    """Decide whether a status change is allowed."""

    def __init__(
        self,
        table: TransitionTable = DEFAULT_TRANSITIONS,
        translator: Optional[Translator] = None,
    ):
        self.table = table
        self.translator = translator or Translator()

    def rejection(
        self, old: Status, new: Status, is_superadmin: bool
    ) -> Optional[str]:
        """Return the localized reason ``old -> new`` is rejected, or None."""
        t = self.translator.t
        undeleting = old == Status.DELETED and new != Status.DELETED

        if undeleting and not is_superadmin:
            return t("deletedStatusChanged", value=Status.DELETED.label)

        if not self.table.has_row(old):
            return t("invalidStatusTransition")

        if self.table.is_disallowed(old) and not (undeleting and is_superadmin):
            return t("disallowedStatusUpdate", value=old.label)

        if new not in self.table.targets(old):
            return t("cannotChangeStatus", value=old.label, newValue=new.label)

        return None

    def can_transition(self, old: Status, new: Status, is_superadmin: bool) -> bool:
        return self.rejection(old, new, is_superadmin) is None

    def check(
        self, old: Optional[Status], new: Status, actor: ActorContext
    ) -> Optional[str]:
        """Validate a requested status against the persisted one.

        No check applies on creation (``old is None``) or when the status is
        not actually changing.
        """
        if old is None or old == new:
            return None
        return self.rejection(Status(old), Status(new), actor.is_superadmin)
