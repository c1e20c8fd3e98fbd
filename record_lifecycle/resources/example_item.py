"""Example item resource: child rows of an example."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..db.models import ExampleItemModel
from ..lifecycle.fields import INT_MAX
from ..lifecycle.resource import ResourceDefinition
from .example import clean_name


class ExampleItemCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    example_id: int = Field(..., gt=0, le=INT_MAX)
    name: Optional[str] = Field(default=None, max_length=255)
    quantity: int = Field(default=0, ge=0, le=INT_MAX)
    # {"unit": ..., "size": ...}, shape checked by the resource definition
    specification: Optional[Dict[str, Any]] = None

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        return clean_name(v)


class ExampleItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    example_id: Optional[int] = Field(default=None, gt=0, le=INT_MAX)
    name: Optional[str] = Field(default=None, max_length=255)
    quantity: Optional[int] = Field(default=None, ge=0, le=INT_MAX)
    specification: Optional[Dict[str, Any]] = None

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        return clean_name(v)


example_item = ResourceDefinition(
    name="example-item",
    model=ExampleItemModel,
    create_fields=("example_id", "name", "quantity", "specification", "status"),
    update_fields=("example_id", "name", "quantity", "specification", "status"),
    view_fields=("example_id",),
    create_schema=ExampleItemCreate,
    update_schema=ExampleItemUpdate,
    like_fields=("name",),
    equal_fields=("example_id",),
    labels={"example_id": "Example", "quantity": "Quantity", "specification": "Specification"},
    nested_fields={"specification": ("unit", "size")},
)
