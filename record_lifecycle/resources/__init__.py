"""
Resources served by the API.

Each entry gets its own router under ``/v1/{name}``.
"""

from typing import List

from ..lifecycle.resource import ResourceDefinition
from .example import example
from .example_item import example_item

RESOURCES: List[ResourceDefinition] = [example, example_item]

__all__ = ["RESOURCES", "example", "example_item"]
