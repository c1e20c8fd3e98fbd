"""
Optimistic lock guard.
"""

from typing import Any, Callable, Mapping, Optional

import structlog

from ..i18n import Translator
from .enums import OPTIMISTIC_LOCK
from .errors import FieldError, LockVersionOutdated, ValidationFailed
from .fields import parse_int

logger = structlog.get_logger()

# (record_id, expected_version, values) -> affected row count
ConditionalWrite = Callable[[int, int, Mapping[str, Any]], int]


class OptimisticLockGuard:
    """Reject writes whose supplied lock version is no longer current.

    The comparison happens inside the storage layer's conditional write,
    never as a separate read, so concurrent writers with the same version
    get exactly one success.
    """

    def __init__(self, translator: Translator):
        self.translator = translator

    def supplied_version(self, params: Mapping[str, Any]) -> int:
        """Read the caller's ``lock_version`` from the request."""
        t = self.translator.t
        raw: Optional[Any] = params.get(OPTIMISTIC_LOCK)
        if raw is None or raw == "":
            message = t("required", label=OPTIMISTIC_LOCK)
            raise ValidationFailed(t("validationFailed"), [FieldError(OPTIMISTIC_LOCK, message)])

        version = parse_int(raw)
        if version is None:
            message = t("integer", label=OPTIMISTIC_LOCK)
            raise ValidationFailed(t("validationFailed"), [FieldError(OPTIMISTIC_LOCK, message)])
        return version

    def apply(
        self,
        write: ConditionalWrite,
        record_id: int,
        expected_version: int,
        values: Mapping[str, Any],
    ) -> int:
        """Run the conditional write; return the new lock version."""
        affected = write(record_id, expected_version, values)
        if affected == 0:
            logger.info(
                "Stale lock version rejected",
                record_id=record_id,
                expected_version=expected_version,
            )
            raise LockVersionOutdated(self.translator.t("lockVersionOutdated"))
        return expected_version + 1
