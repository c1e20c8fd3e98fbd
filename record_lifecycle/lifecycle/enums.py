"""
Canonical lifecycle enums.

DO NOT change the integer values of ``Status``. They are persisted as-is and
every stored record would be misread.
"""

import re
from enum import Enum, IntEnum

_CODE = re.compile(r"-?[0-9]+")


class Status(IntEnum):
    """Record status shared by every resource."""

    INACTIVE = 0
    ACTIVE = 1
    DRAFT = 2
    COMPLETED = 3
    DELETED = 4
    MAINTENANCE = 5
    APPROVED = 6
    REJECTED = 7

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def coerce(cls, value: object) -> "Status":
        """Convert a raw request value into a Status.

        Raises ValueError for anything that is not an integral status code.
        """
        if isinstance(value, bool):
            raise ValueError(value)
        if isinstance(value, str):
            value = value.strip()
            if not _CODE.fullmatch(value):
                raise ValueError(value)
            value = int(value)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise ValueError(value)
        return cls(value)


class Scenario(str, Enum):
    """Named operation context selecting the settable field set."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    LIST = "list"


# Statuses that only a superadmin may request on update/delete.
RESTRICTED_STATUSES = frozenset({Status.DELETED, Status.COMPLETED})

# Statuses a record cannot leave through a regular update.
DISALLOWED_UPDATE_STATUSES = frozenset(
    {Status.COMPLETED, Status.DELETED, Status.REJECTED}
)

OPTIMISTIC_LOCK = "lock_version"
