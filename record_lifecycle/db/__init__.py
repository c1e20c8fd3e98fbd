"""
Database package for the record lifecycle service.
"""

from .base import Base, get_db, get_engine, init_database
from .models import ExampleItemModel, ExampleModel, RecordMixin
from .store import RecordStore

__all__ = [
    "Base",
    "ExampleItemModel",
    "ExampleModel",
    "RecordMixin",
    "RecordStore",
    "get_db",
    "get_engine",
    "init_database",
]
