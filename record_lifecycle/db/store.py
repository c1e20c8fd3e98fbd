"""
Relational persistence for lifecycle-managed records.

``RecordStore`` is the only place that talks SQL. The optimistic lock is
enforced here as a single conditional UPDATE so that two writers holding
the same ``lock_version`` cannot both succeed.
"""

from typing import Any, List, Mapping, Optional, Tuple, Type

import structlog
from sqlalchemy import and_, asc, desc, func, select, update
from sqlalchemy.orm import Session

from ..lifecycle.enums import OPTIMISTIC_LOCK, Status
from ..lifecycle.pagination import ListQuery
from .models import RecordMixin

logger = structlog.get_logger()


def _like_pattern(value: str) -> str:
    """``"foo bar"`` matches ``"%foo%bar%"``."""
    return "%" + "%".join(value.split()) + "%"


class RecordStore:
    """Persistence collaborator for the lifecycle controller."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, model: Type[RecordMixin], values: Mapping[str, Any]) -> RecordMixin:
        """Insert a new row and return it refreshed from the database."""
        record = model(**values)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def get(
        self,
        model: Type[RecordMixin],
        record_id: int,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Optional[RecordMixin]:
        """Get a record by id, optionally narrowed by equality filters."""
        conditions = dict(filters or {})
        conditions["id"] = record_id
        return self.find_one(model, conditions)

    def find_one(
        self, model: Type[RecordMixin], filters: Mapping[str, Any]
    ) -> Optional[RecordMixin]:
        """Get the first record matching every equality filter."""
        query = self.db.query(model)
        for name, value in filters.items():
            query = query.filter(getattr(model, name) == value)
        return query.first()

    def exists(self, model: Type[RecordMixin], field: str, value: Any) -> bool:
        """True when any row of ``model`` has ``field == value``."""
        stmt = select(getattr(model, field)).where(getattr(model, field) == value).limit(1)
        return self.db.execute(stmt).first() is not None

    def conditional_update(
        self,
        model: Type[RecordMixin],
        record_id: int,
        expected_version: int,
        values: Mapping[str, Any],
    ) -> int:
        """Apply ``values`` only if the stored lock version still matches.

        Returns the affected row count (0 or 1). The lock version is bumped
        in the same statement.
        """
        lock_column = getattr(model, OPTIMISTIC_LOCK)
        stmt = (
            update(model)
            .where(model.id == record_id, lock_column == expected_version)
            .values({**values, OPTIMISTIC_LOCK: lock_column + 1})
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount

    def reload(self, model: Type[RecordMixin], record_id: int) -> Optional[RecordMixin]:
        """Fetch the current row state, bypassing the identity map."""
        return self.db.get(model, record_id, populate_existing=True)

    def mark_sync_failed(self, model: Type[RecordMixin], record_id: Optional[int]) -> None:
        """Flag a row whose document mirror write failed."""
        if record_id is None:
            return
        self.db.execute(
            update(model)
            .where(model.id == record_id)
            .values(sync=1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        logger.warning(
            "Marked record as sync failed",
            table=model.__tablename__,
            record_id=record_id,
        )

    def unsynced(self, model: Type[RecordMixin]) -> List[RecordMixin]:
        """Rows flagged by ``mark_sync_failed``, oldest id first."""
        return self.db.query(model).filter(model.sync == 1).order_by(model.id).all()

    def clear_sync(self, model: Type[RecordMixin], record_ids: List[int]) -> None:
        """Drop the sync failure flag once the mirror holds the rows again."""
        if not record_ids:
            return
        self.db.execute(
            update(model)
            .where(model.id.in_(record_ids))
            .values(sync=None)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def _conditions(self, model: Type[RecordMixin], query: ListQuery) -> List[Any]:
        conditions: List[Any] = []

        if query.status is not None:
            conditions.append(model.status == int(query.status))
        else:
            conditions.append(model.status != int(Status.DELETED))

        for name, value in query.equal.items():
            conditions.append(getattr(model, name) == value)

        for name, value in query.like.items():
            conditions.append(getattr(model, name).ilike(_like_pattern(value)))

        for name, (start, end) in query.change_log_dates.items():
            logged = func.date(model.detail_info[("change_log", name)].as_string())
            if start == end:
                conditions.append(logged == start)
            else:
                conditions.append(and_(logged >= start, logged <= end))

        for name, value in query.change_log_users.items():
            logged = model.detail_info[("change_log", name)].as_string()
            conditions.append(logged.ilike(_like_pattern(value)))

        return conditions

    def search(
        self, model: Type[RecordMixin], query: ListQuery
    ) -> Tuple[List[RecordMixin], int]:
        """Return one page of records and the total match count."""
        conditions = self._conditions(model, query)

        total_count = self.db.execute(
            select(func.count()).select_from(model).where(*conditions)
        ).scalar_one()

        order = asc if query.sort_dir == "asc" else desc
        rows = (
            self.db.query(model)
            .filter(*conditions)
            .order_by(order(getattr(model, query.sort_by)))
            .offset(query.offset)
            .limit(query.page_size)
            .all()
        )
        return rows, total_count
