"""
Dependency guard.

Referential integrity enforced in application code: a protected field of a
record cannot change while rows of other resources still point at it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..i18n import Translator
from .enums import DISALLOWED_UPDATE_STATUSES, Status
from .errors import ErrorCollector, ValidationFailed

# (model, field, value) -> bool
ExistsQuery = Callable[[Any, str, Any], bool]


@dataclass(frozen=True)
class Dependency:
    """Rows of ``model`` reference the guarded record through ``fields``."""

    model: Any
    fields: Tuple[str, ...]


class DependencyGuard:
    """Block changes to protected fields of referenced records."""

    def __init__(
        self,
        protected_fields: Iterable[str],
        dependencies: Sequence[Dependency],
        translator: Translator,
        disallowed: Iterable[Status] = DISALLOWED_UPDATE_STATUSES,
    ):
        self.protected_fields = tuple(protected_fields)
        self.dependencies = tuple(dependencies)
        self.translator = translator
        self.disallowed = frozenset(disallowed)

    def changed_protected(
        self, changes: Mapping[str, Any], new_status: Optional[Status]
    ) -> List[str]:
        changed = [f for f in self.protected_fields if f in changes]
        if (
            "status" in self.protected_fields
            and "status" not in changed
            and new_status is not None
            and Status(new_status) in self.disallowed
        ):
            changed.append("status")
        return changed

    def check(
        self,
        record_id: Optional[int],
        changes: Mapping[str, Any],
        new_status: Optional[Status],
        exists: ExistsQuery,
        table_name: str,
        labels: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Raise ValidationFailed if a changed protected field is referenced.

        New records (``record_id is None``) are never checked. Probing stops
        at the first referencing row found.
        """
        if record_id is None or not self.dependencies:
            return

        changed = self.changed_protected(changes, new_status)
        if not changed:
            return

        labels = labels or {}
        for dependency in self.dependencies:
            for field in dependency.fields:
                if exists(dependency.model, field, record_id):
                    errors = ErrorCollector()
                    for name in changed:
                        errors.add(
                            name,
                            self.translator.t(
                                "updatePermission",
                                label=labels.get(name, name),
                                tableName=table_name,
                            ),
                        )
                    errors.raise_if_any(
                        ValidationFailed, self.translator.t("validationFailed")
                    )
