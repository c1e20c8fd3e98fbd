"""
List request parsing: pagination, sort and filters.
"""

from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Mapping, Optional

from ..i18n import Translator
from .enums import Status
from .errors import BadRequest, ErrorCollector
from .fields import parse_int

PAGINATION_KEYS = ("page", "page_size", "sort_by", "sort_dir")
SORT_DIRECTIONS = ("asc", "desc")

CHANGE_LOG_DATE_FIELDS = ("created_at", "updated_at", "deleted_at")
CHANGE_LOG_USER_FIELDS = ("created_by", "updated_by", "deleted_by")


@dataclass
class ListQuery:
    """A validated list request."""

    page: int = 1
    page_size: int = 10
    sort_by: str = "id"
    sort_dir: str = "desc"
    status: Optional[Status] = None
    equal: Dict[str, Any] = field(default_factory=dict)
    like: Dict[str, str] = field(default_factory=dict)
    # field -> (start, end); a single date has start == end
    change_log_dates: Dict[str, tuple] = field(default_factory=dict)
    change_log_users: Dict[str, str] = field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _date_range(value: str) -> tuple:
    if "," in value:
        start, end = (part.strip() for part in value.split(",", 1))
        return start, end
    value = value.strip()
    return value, value


def build_list_query(
    params: Mapping[str, Any],
    translator: Translator,
    default_page_size: int,
    sortable: Collection[str],
    equal_fields: Collection[str] = (),
    like_fields: Collection[str] = (),
) -> ListQuery:
    """Validate pagination/sort keys and collect filters.

    Unknown keys are expected to have been rejected already by the shape
    check. All pagination problems are reported together.
    """
    t = translator.t
    errors = ErrorCollector()
    query = ListQuery(page_size=default_page_size)

    if params.get("page") is not None:
        page = parse_int(params["page"])
        if page is None:
            errors.add("page", t("integer", label="page"))
        elif page <= 0:
            errors.add("page", t("pageMustBeGreaterThanZero"))
        else:
            query.page = page

    if params.get("page_size") is not None:
        page_size = parse_int(params["page_size"])
        if page_size is None or page_size <= 0:
            errors.add("page_size", t("integerNoZero", label="page_size"))
        else:
            query.page_size = page_size

    if params.get("sort_dir") is not None:
        sort_dir = str(params["sort_dir"]).lower()
        if sort_dir not in SORT_DIRECTIONS:
            errors.add("sort_dir", t("invalidSortDir", value=", ".join(SORT_DIRECTIONS)))
        else:
            query.sort_dir = sort_dir

    if params.get("sort_by") is not None:
        sort_by = str(params["sort_by"])
        if sort_by not in sortable:
            errors.add("sort_by", t("invalidSortBy", value=sort_by))
        else:
            query.sort_by = sort_by

    if params.get("status") is not None:
        try:
            query.status = Status.coerce(params["status"])
        except ValueError:
            errors.add("status", t("invalidStatus", label="status"))

    for name in equal_fields:
        if params.get(name) is None:
            continue
        value = parse_int(params[name])
        if value is None:
            errors.add(name, t("integer", label=name))
        else:
            query.equal[name] = value

    for name in like_fields:
        value = params.get(name)
        if value is not None and str(value).strip():
            query.like[name] = str(value).strip()

    for name in CHANGE_LOG_DATE_FIELDS:
        value = params.get(name)
        if value:
            query.change_log_dates[name] = _date_range(str(value))

    for name in CHANGE_LOG_USER_FIELDS:
        value = params.get(name)
        if value:
            query.change_log_users[name] = str(value)

    errors.raise_if_any(BadRequest, t("validationFailed"))
    return query
