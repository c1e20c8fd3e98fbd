"""
Change log bookkeeping stored under ``detail_info["change_log"]``.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional
from zoneinfo import ZoneInfo

from .enums import Status

CHANGE_LOG_KEY = "change_log"

UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
LOCAL_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class ChangeLog:
    """Compute the change log for inserts, updates and deletes."""

    def __init__(
        self,
        utc_format: str = UTC_FORMAT,
        local_format: str = LOCAL_FORMAT,
        tz_name: str = "UTC",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.utc_format = utc_format
        self.local_format = local_format
        self.tz = ZoneInfo(tz_name)
        self.clock = clock

    def timestamp(self) -> str:
        return self.clock().astimezone(timezone.utc).strftime(self.utc_format)

    def on_insert(self, username: str) -> Dict[str, Any]:
        return {
            "created_at": self.timestamp(),
            "created_by": username,
            "updated_at": None,
            "updated_by": None,
            "deleted_at": None,
            "deleted_by": None,
        }

    def on_write(
        self,
        previous: Optional[Mapping[str, Any]],
        status: Optional[int],
        changed: bool,
        username: str,
    ) -> Dict[str, Any]:
        """Change log for an existing record after a write.

        A transition to Deleted stamps ``deleted_*``; any other write stamps
        ``updated_*`` only if something actually changed.
        """
        log = dict(previous or {})
        if status is not None and Status(status) == Status.DELETED:
            log["deleted_at"] = self.timestamp()
            log["deleted_by"] = username
        elif changed:
            log["updated_at"] = self.timestamp()
            log["updated_by"] = username
        return log

    def to_local(self, log: Mapping[str, Any]) -> Dict[str, Any]:
        """Render the ``*_at`` timestamps of ``log`` in the local format."""
        rendered = dict(log)
        for key, value in log.items():
            if key.endswith("_at") and value:
                try:
                    moment = datetime.strptime(value, self.utc_format)
                except (TypeError, ValueError):
                    continue
                moment = moment.replace(tzinfo=timezone.utc)
                rendered[key] = moment.astimezone(self.tz).strftime(self.local_format)
        return rendered


def detail_info_with(
    detail_info: Optional[Mapping[str, Any]], change_log: Mapping[str, Any]
) -> Dict[str, Any]:
    """Return ``detail_info`` with its change log replaced."""
    info = dict(detail_info or {})
    info[CHANGE_LOG_KEY] = dict(change_log)
    return info


def previous_change_log(detail_info: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return dict((detail_info or {}).get(CHANGE_LOG_KEY) or {})
