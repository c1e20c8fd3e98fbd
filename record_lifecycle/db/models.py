"""
SQLAlchemy models for lifecycle-managed resources.

Every resource table carries the same lifecycle columns through
``RecordMixin``: an integer id, the status code, the optimistic lock
counter, ``detail_info`` (holding the change log) and the document mirror
``sync`` flag.
"""

from typing import Any, Dict, Tuple

from sqlalchemy import JSON, Column, Index, Integer, String

from ..lifecycle.enums import Status
from .base import Base


class RecordMixin:
    """Lifecycle columns shared by every resource table."""

    # Never serialized to clients
    hidden_fields: Tuple[str, ...] = ("sync",)

    id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(Integer, nullable=False, default=int(Status.DRAFT), index=True)
    lock_version = Column(Integer, nullable=False, default=1)
    detail_info = Column(JSON, nullable=True)
    # 1: mirror sync failed, NULL: synced
    sync = Column(Integer, nullable=True)

    @classmethod
    def column_names(cls) -> Tuple[str, ...]:
        return tuple(c.name for c in cls.__table__.columns)

    def snapshot(self) -> Dict[str, Any]:
        """Raw column values, including hidden ones."""
        return {name: getattr(self, name) for name in self.column_names()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            name: value
            for name, value in self.snapshot().items()
            if name not in self.hidden_fields
        }


class ExampleModel(RecordMixin, Base):
    """A minimal named resource."""

    __tablename__ = "example"

    name = Column(String(255), nullable=True)


class ExampleItemModel(RecordMixin, Base):
    """Child rows that reference an Example by ``example_id``.

    The reference is checked in application code by the dependency guard,
    not by a foreign-key constraint.
    """

    __tablename__ = "example_item"

    example_id = Column(Integer, nullable=False)
    name = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    specification = Column(JSON, nullable=True)

    __table_args__ = (Index("ix_example_item_example_id", "example_id"),)
