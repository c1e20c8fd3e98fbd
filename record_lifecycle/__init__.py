"""
Record Lifecycle

A generic create/update/delete/list lifecycle for REST resources: status
state machine, optimistic locking, no-op and dependency guards, and one
response envelope.
"""

import importlib.metadata

__version__ = importlib.metadata.version("record-lifecycle")
