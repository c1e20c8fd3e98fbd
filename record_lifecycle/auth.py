"""
Actor identity.

Authentication happens upstream; the gateway forwards the verified
identity in request headers:

- ``X-Actor-Id``: numeric user id
- ``X-Actor-Username``: display name written to the change log
- ``X-Actor-Roles``: comma-separated role names
"""

from typing import Optional

import structlog
from fastapi import Header

from .config import get_settings
from .i18n import Translator
from .lifecycle.actor import ActorContext
from .lifecycle.errors import Unauthorized

logger = structlog.get_logger()


def _roles(raw: Optional[str]) -> frozenset:
    if not raw:
        return frozenset()
    return frozenset(role.strip() for role in raw.split(",") if role.strip())


def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_username: Optional[str] = Header(default=None),
    x_actor_roles: Optional[str] = Header(default=None),
) -> ActorContext:
    """FastAPI dependency resolving the acting user for this request."""
    settings = get_settings()

    if not x_actor_username and x_actor_id is None:
        if settings.require_actor:
            logger.info("Request without actor rejected")
            raise Unauthorized(Translator(settings.language).t("unauthorizedAccess"))
        return ActorContext.system(superadmin_role=settings.superadmin_role)

    return ActorContext(
        user_id=x_actor_id,
        username=x_actor_username or str(x_actor_id),
        roles=_roles(x_actor_roles),
        superadmin_role=settings.superadmin_role,
    )
