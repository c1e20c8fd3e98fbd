"""
Record lifecycle kernel.

Guards, the status state machine, the response envelope and the controller
that runs them in a fixed pipeline per operation.
"""

from .actor import ActorContext
from .controller import LifecycleController
from .enums import Scenario, Status
from .errors import (
    BadRequest,
    FieldError,
    Forbidden,
    LifecycleError,
    LockVersionOutdated,
    NoRecordDeleted,
    NoRecordUpdated,
    NotFound,
    ServerError,
    Unauthorized,
    ValidationFailed,
)
from .resource import ResourceDefinition
from .transitions import DEFAULT_TRANSITIONS, StatusTransitionEngine, TransitionTable

__all__ = [
    "ActorContext",
    "BadRequest",
    "DEFAULT_TRANSITIONS",
    "FieldError",
    "Forbidden",
    "LifecycleController",
    "LifecycleError",
    "LockVersionOutdated",
    "NoRecordDeleted",
    "NoRecordUpdated",
    "NotFound",
    "ResourceDefinition",
    "Scenario",
    "ServerError",
    "Status",
    "StatusTransitionEngine",
    "TransitionTable",
    "Unauthorized",
    "ValidationFailed",
]
