"""Example resource: a named record referenced by example items."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from ..db.models import ExampleItemModel, ExampleModel
from ..lifecycle.dependencies import Dependency
from ..lifecycle.fields import null_safe
from ..lifecycle.resource import ResourceDefinition


def clean_name(value):
    """Trim text input; blank and "null" become None."""
    if isinstance(value, str):
        return null_safe(value.strip())
    return value


class ExampleCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        return clean_name(v)


class ExampleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        return clean_name(v)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        # Name may be left out of an update, never cleared
        if v is None:
            raise PydanticCustomError("missing", "Field required")
        return v


example = ResourceDefinition(
    name="example",
    model=ExampleModel,
    # status is accepted on create and always replaced by Draft
    create_fields=("name", "status"),
    update_fields=("name", "status"),
    view_fields=("status",),
    create_schema=ExampleCreate,
    update_schema=ExampleUpdate,
    like_fields=("name",),
    labels={"name": "Name", "status": "Status"},
    # Items point at an example through example_id
    protected_fields=("name", "status"),
    dependencies=(Dependency(ExampleItemModel, ("example_id",)),),
)
