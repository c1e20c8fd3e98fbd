"""
Document store mirroring.
"""

from .base import DocumentMirror, NullMirror, SafeMirror
from .filters import compose

__all__ = ["DocumentMirror", "NullMirror", "SafeMirror", "compose"]
