"""
Document store filter construction.

Each helper adds one condition for ``field`` to ``where`` when ``value`` is
not None. With ``or_group=True`` the condition is appended to an OR list
instead of being set on the AND mapping. ``compose`` merges both into the
final filter document.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Union

from ..lifecycle.enums import Status

Where = Union[Dict[str, Any], List[Dict[str, Any]]]


def _put(where: Where, field: str, condition: Any, or_group: bool) -> None:
    if or_group:
        where.append({field: condition})
    else:
        where[field] = condition


def string_like(field: str, value: Optional[str], where: Where, or_group: bool = False) -> None:
    """Case-insensitive match; spaces in ``value`` match any run of text."""
    if value is None:
        return
    pattern = ".*".join(re.escape(part) for part in value.split(" "))
    _put(where, field, {"$regex": pattern, "$options": "i"}, or_group)


def number_equal(field: str, value: Optional[Any], where: Where, or_group: bool = False) -> None:
    if value is None:
        return
    _put(where, field, int(value), or_group)


def status(field: str, value: Optional[Any], where: Where, or_group: bool = False) -> None:
    """Exclude deleted documents, optionally narrowed to one status."""
    condition: Dict[str, Any] = {"$ne": int(Status.DELETED)}
    if value is not None:
        condition["$eq"] = int(value)
    _put(where, field, condition, or_group)


def date_range(
    field: str,
    value: Optional[tuple],
    where: Where,
    or_group: bool = False,
) -> None:
    """``value`` is ``(start, end)`` as ``YYYY-MM-DD``; both days included.

    Stored timestamps are ISO-8601 UTC strings, so they compare as text.
    """
    if value is None:
        return
    start, end = value
    _put(where, field, {"$gte": start, "$lte": f"{end}T23:59:59Z"}, or_group)


def compose(
    where: Optional[Mapping[str, Any]] = None,
    or_where: Optional[List[Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """AND the ``where`` mapping with an OR group; empty input matches all."""
    clauses: List[Any] = []
    if where:
        clauses.append(dict(where))
    if or_where:
        clauses.append({"$or": list(or_where)})
    return {"$and": clauses} if clauses else {}
