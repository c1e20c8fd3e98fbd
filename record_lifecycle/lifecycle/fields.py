"""
Request shape validation.

Checks that run on the raw request mapping before any record is loaded or
merged: the settable-field allow-list, the ``id`` routing key, and nested
object shape helpers used by resource validators.
"""

import re
from typing import Any, Collection, Dict, List, Mapping, Optional

from ..i18n import Translator
from .enums import Scenario
from .errors import BadRequest, ErrorCollector, FieldError, ValidationFailed

ID_KEY = "id"

_INTEGER = re.compile(r"-?[0-9]+")

# Signed 64-bit range of an INTEGER column
INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


def is_null_string(value: Any) -> bool:
    """True for None and for the literal string "null" in any case."""
    return value is None or (isinstance(value, str) and value.lower() == "null")


def null_safe(value: Optional[str]) -> Optional[str]:
    """Normalize empty strings and "null" to None."""
    if value == "" or is_null_string(value):
        return None
    return value


def parse_int(value: Any) -> Optional[int]:
    """Return ``value`` as an int if it is integral, else None.

    Accepts ints, integral floats and ASCII decimal strings; rejects bools
    and anything outside the signed 64-bit range.
    """
    number: Optional[int] = None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if value.is_integer():
            number = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if _INTEGER.fullmatch(text):
            try:
                number = int(text)
            except ValueError:
                return None

    if number is None or not INT_MIN <= number <= INT_MAX:
        return None
    return number


def check_allowed_fields(
    params: Mapping[str, Any],
    allowed: Collection[str],
    translator: Translator,
) -> None:
    """Reject request keys that are not settable in the current scenario.

    ``id`` is routing metadata and is never part of the allow-list check.
    Every offending key is reported, in request order.
    """
    errors = ErrorCollector()
    for key in params:
        if key == ID_KEY or key in allowed:
            continue
        errors.add(key, translator.t("invalidField", label=key))

    errors.raise_if_any(ValidationFailed, translator.t("validationFailed"))


def validate_params(
    params: Mapping[str, Any],
    scenario: Scenario,
    translator: Translator,
) -> int:
    """Validate the ``id`` key of an update/delete/view request.

    Returns the integer id. Raises BadRequest listing every id problem.
    """
    errors = ErrorCollector()
    record_id: Optional[int] = None

    if ID_KEY in params and params[ID_KEY] is not None:
        record_id = parse_int(params[ID_KEY])
        if record_id is None:
            errors.add(ID_KEY, translator.t("integer", label=ID_KEY))

        rest = [k for k in params if k != ID_KEY]
        if scenario == Scenario.UPDATE and not rest:
            errors.add(ID_KEY, translator.t("emptyParams"))
    else:
        errors.add(ID_KEY, translator.t("required", label=ID_KEY))

    errors.raise_if_any(BadRequest, translator.t("validationFailed"))
    return record_id


def validate_required_fields(
    label: str,
    value: Any,
    required: List[str],
    translator: Translator,
    field: Optional[str] = None,
) -> Dict[str, Any]:
    """Check that a nested object has exactly the ``required`` keys.

    Raises ValidationFailed on the first kind of violation found: not a
    mapping, extra keys, then missing keys.
    """
    field = field or label
    if not isinstance(value, Mapping):
        message = translator.t("array", label=label)
        raise ValidationFailed(message, [FieldError(field, message)])

    extra = [k for k in value if k not in required]
    if extra:
        raise ValidationFailed(
            translator.t("extraFieldFound", label=label),
            [
                FieldError(
                    field,
                    translator.t(
                        "extraField",
                        label=label,
                        field=", ".join(extra),
                        value=", ".join(required),
                    ),
                )
            ],
        )

    missing = [k for k in required if k not in value]
    if missing:
        raise ValidationFailed(
            translator.t("missingFieldFound", label=label),
            [FieldError(field, translator.t("missingField", field=", ".join(missing)))],
        )

    return dict(value)


def find_null_fields(
    label: str,
    item: Mapping[str, Any],
    translator: Translator,
    field: Optional[str] = None,
) -> Optional[FieldError]:
    """Return a FieldError naming the keys of ``item`` whose value is None."""
    null_keys = [k for k, v in item.items() if v is None]
    if not null_keys:
        return None
    return FieldError(
        field or label,
        translator.t("nullField", label=label, field=", ".join(null_keys)),
    )
