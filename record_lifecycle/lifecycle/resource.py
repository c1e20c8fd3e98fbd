"""
Resource definitions.

A ``ResourceDefinition`` is everything the lifecycle controller needs to
know about one resource type: its table, the settable fields per scenario,
the pydantic schemas that validate business fields, its transition table,
and the dependencies that protect it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy import JSON, Integer

from ..i18n import Translator
from .dependencies import Dependency
from .enums import OPTIMISTIC_LOCK, RESTRICTED_STATUSES, Scenario, Status
from .errors import FieldError, ValidationFailed
from .fields import find_null_fields, validate_required_fields
from .pagination import CHANGE_LOG_DATE_FIELDS, CHANGE_LOG_USER_FIELDS, PAGINATION_KEYS
from .transitions import DEFAULT_TRANSITIONS, TransitionTable

# pydantic error type -> (message key, extra placeholders)
_PYDANTIC_MESSAGE_KEYS = {
    "missing": "required",
    "int_type": "integer",
    "int_parsing": "integer",
    "int_from_float": "integer",
    "float_type": "number",
    "float_parsing": "number",
    "string_type": "string",
    "string_too_short": "required",
    "dict_type": "array",
    "list_type": "array",
}


@dataclass
class ResourceDefinition:
    """Declarative description of a lifecycle-managed resource."""

    name: str
    model: Type[Any]
    create_fields: Tuple[str, ...]
    update_fields: Tuple[str, ...]
    delete_fields: Tuple[str, ...] = ()
    view_fields: Tuple[str, ...] = ()
    create_schema: Optional[Type[BaseModel]] = None
    update_schema: Optional[Type[BaseModel]] = None
    like_fields: Tuple[str, ...] = ()
    equal_fields: Tuple[str, ...] = ()
    labels: Dict[str, str] = field(default_factory=dict)
    transitions: TransitionTable = DEFAULT_TRANSITIONS
    restricted_statuses: FrozenSet[Status] = RESTRICTED_STATUSES
    protected_fields: Tuple[str, ...] = ()
    dependencies: Sequence[Dependency] = ()
    # JSON object fields and the exact keys they must carry
    nested_fields: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def label(self, name: str) -> str:
        return self.labels.get(name, name.replace("_", " ").capitalize())

    def allowed_fields(self, scenario: Scenario) -> FrozenSet[str]:
        """Request keys accepted for ``scenario`` (``id`` is handled apart)."""
        if scenario == Scenario.CREATE:
            return frozenset(self.create_fields)
        if scenario == Scenario.UPDATE:
            return frozenset(self.update_fields) | {OPTIMISTIC_LOCK}
        if scenario == Scenario.DELETE:
            return frozenset(self.delete_fields) | {OPTIMISTIC_LOCK}
        if scenario == Scenario.VIEW:
            return frozenset(self.view_fields)
        return (
            frozenset(PAGINATION_KEYS)
            | frozenset(self.like_fields)
            | frozenset(self.equal_fields)
            | {"status"}
            | frozenset(CHANGE_LOG_DATE_FIELDS)
            | frozenset(CHANGE_LOG_USER_FIELDS)
        )

    def sortable_fields(self) -> FrozenSet[str]:
        return frozenset(
            c.name
            for c in self.model.__table__.columns
            if c.name != "sync" and not isinstance(c.type, JSON)
        )

    def integer_fields(self) -> FrozenSet[str]:
        return frozenset(
            c.name for c in self.model.__table__.columns if isinstance(c.type, Integer)
        )

    def schema_for(self, scenario: Scenario) -> Optional[Type[BaseModel]]:
        if scenario == Scenario.CREATE:
            return self.create_schema
        if scenario == Scenario.UPDATE:
            return self.update_schema
        return None

    def validate_business_fields(
        self,
        scenario: Scenario,
        values: Mapping[str, Any],
        translator: Translator,
    ) -> Tuple[Dict[str, Any], List[FieldError]]:
        """Validate business fields with the scenario schema.

        Nested object fields are checked for their exact key set and for
        null members first; the schema then validates the rest. Returns the
        normalized values that were supplied, and every field error found.
        """
        errors = self._nested_errors(values, translator)
        failed = {error.field for error in errors}

        schema = self.schema_for(scenario)
        if schema is None:
            return dict(values), errors

        try:
            validated = schema.model_validate(dict(values))
        except ValidationError as exc:
            for err in exc.errors():
                error = self._field_error(err, translator)
                if error.field not in failed:
                    errors.append(error)
            return dict(values), errors

        if errors:
            return dict(values), errors
        return validated.model_dump(exclude_unset=True), []

    def _nested_errors(
        self, values: Mapping[str, Any], translator: Translator
    ) -> List[FieldError]:
        errors: List[FieldError] = []
        for name, required in self.nested_fields.items():
            if values.get(name) is None:
                continue
            try:
                item = validate_required_fields(
                    self.label(name), values[name], list(required), translator, field=name
                )
            except ValidationFailed as exc:
                errors.extend(exc.errors)
                continue
            null_error = find_null_fields(self.label(name), item, translator, field=name)
            if null_error is not None:
                errors.append(null_error)
        return errors

    def _field_error(self, error: Mapping[str, Any], translator: Translator) -> FieldError:
        loc = error.get("loc") or ("__root__",)
        name = str(loc[0])
        error_type = error.get("type", "")
        if error_type.endswith("_type") and error.get("input", "") is None:
            # An explicit null for a non-nullable field reads as blank
            key = "required"
        else:
            key = _PYDANTIC_MESSAGE_KEYS.get(error_type)
        if key is not None:
            message = translator.t(key, label=self.label(name))
        else:
            message = f"{self.label(name)}: {error.get('msg', '')}"
        return FieldError(name, message)
