"""
Explicit actor context.

The lifecycle core never looks up the current user from ambient state; the
boundary builds an ``ActorContext`` and passes it into every operation.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

DEFAULT_USERNAME = "system"
SUPERADMIN_ROLE = "superadmin"


@dataclass(frozen=True)
class ActorContext:
    """Who is performing the current request."""

    user_id: Optional[str] = None
    username: str = DEFAULT_USERNAME
    roles: FrozenSet[str] = field(default_factory=frozenset)
    superadmin_role: str = SUPERADMIN_ROLE

    @property
    def is_superadmin(self) -> bool:
        return self.superadmin_role in self.roles

    @classmethod
    def system(cls, superadmin_role: str = SUPERADMIN_ROLE) -> "ActorContext":
        """Actor used when the gateway forwarded no identity."""
        return cls(superadmin_role=superadmin_role)
