"""
Document store mirror.

The relational store is the source of truth. After each successful write the
lifecycle controller mirrors the record into a document store through a
``DocumentMirror``. Mirroring is fire-and-forget: ``SafeMirror`` logs any
failure, reports it through the ``on_sync_failed`` hook so the row can be
flagged for reconciliation, and never re-raises.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import structlog

logger = structlog.get_logger()

# (collection, record_id) -> None
SyncFailedHook = Callable[[str, Optional[int]], None]


class DocumentMirror(ABC):
    """Interface of a document store client."""

    @abstractmethod
    def upsert(self, collection: str, record: Mapping[str, Any]) -> None:
        """Insert or replace one document keyed by ``id``."""

    @abstractmethod
    def upsert_many(
        self,
        collection: str,
        records: Sequence[Mapping[str, Any]],
        key_fields: Sequence[str],
    ) -> None:
        """Bulk insert-or-update keyed by ``key_fields``."""

    @abstractmethod
    def search(
        self,
        collection: str,
        filters: Mapping[str, Any],
        page: int = 1,
        page_size: int = 10,
        sort_by: str = "id",
        sort_dir: str = "desc",
        projection: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Return ``{"documents": [...], "total_count": int}``."""


class NullMirror(DocumentMirror):
    """Mirror used when no document store is configured."""

    def upsert(self, collection: str, record: Mapping[str, Any]) -> None:
        return None

    def upsert_many(
        self,
        collection: str,
        records: Sequence[Mapping[str, Any]],
        key_fields: Sequence[str],
    ) -> None:
        return None

    def search(
        self,
        collection: str,
        filters: Mapping[str, Any],
        page: int = 1,
        page_size: int = 10,
        sort_by: str = "id",
        sort_dir: str = "desc",
        projection: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        return {"documents": [], "total_count": 0}


class SafeMirror:
    """Wrap a DocumentMirror so failures never reach the primary write."""

    def __init__(self, mirror: DocumentMirror, on_sync_failed: SyncFailedHook):
        self.mirror = mirror
        self.on_sync_failed = on_sync_failed

    def upsert(self, collection: str, record: Mapping[str, Any]) -> bool:
        try:
            self.mirror.upsert(collection, record)
            return True
        except Exception as e:
            logger.error(
                "Document mirror upsert failed",
                collection=collection,
                record_id=record.get("id"),
                error=str(e),
            )
            self.on_sync_failed(collection, record.get("id"))
            return False

    def upsert_many(
        self,
        collection: str,
        records: Sequence[Mapping[str, Any]],
        key_fields: Sequence[str],
    ) -> List[int]:
        """Returns the ids flagged as sync failed (empty on success)."""
        try:
            self.mirror.upsert_many(collection, records, key_fields)
            return []
        except Exception as e:
            logger.error(
                "Document mirror bulk upsert failed",
                collection=collection,
                count=len(records),
                error=str(e),
            )
            failed = [r.get("id") for r in records if r.get("id") is not None]
            for record_id in failed:
                self.on_sync_failed(collection, record_id)
            return failed

    def search(self, collection: str, filters: Mapping[str, Any], **options: Any) -> Dict[str, Any]:
        """Search the mirror; an unreachable mirror yields an empty page."""
        try:
            return self.mirror.search(collection, filters, **options)
        except Exception as e:
            logger.error("Document mirror search failed", collection=collection, error=str(e))
            return {"documents": [], "total_count": 0}
