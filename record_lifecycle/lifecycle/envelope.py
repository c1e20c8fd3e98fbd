"""
Canonical response envelope.

Every operation of every resource answers with the same shape::

    {"code", "success", "message", "errors"?, "data"?, "pagination"?}
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..i18n import Translator
from .errors import LifecycleError


class ErrorItem(BaseModel):
    field: str
    message: str


class Pagination(BaseModel):
    """Pagination block of list responses."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., description="1-based page number")
    total_count: int = Field(..., alias="totalCount", description="Rows matching the filters")
    total: int = Field(..., description="Rows on this page")
    display: int = Field(..., description="Rows on this page")


class Envelope(BaseModel):
    code: int
    success: bool
    message: str
    errors: Optional[List[ErrorItem]] = None
    data: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None
    pagination: Optional[Pagination] = None
    trace_for_dev: Optional[Dict[str, Any]] = None

    def render(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class EnvelopeBuilder:
    """Pure mapping from an outcome to the wire envelope."""

    def __init__(self, translator: Translator):
        self.translator = translator

    def success(
        self, data: Union[Dict[str, Any], List[Dict[str, Any]]], message: Optional[str] = None
    ) -> Dict[str, Any]:
        return Envelope(
            code=200,
            success=True,
            message=message or self.translator.t("success"),
            data=data,
        ).render()

    def page(
        self, rows: List[Dict[str, Any]], page: int, total_count: int
    ) -> Dict[str, Any]:
        return Envelope(
            code=200,
            success=True,
            message=self.translator.t("success"),
            pagination=Pagination(
                page=page,
                total_count=total_count,
                total=len(rows),
                display=len(rows),
            ),
            data=rows,
        ).render()

    def failure(
        self,
        error: LifecycleError,
        trace: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return Envelope(
            code=error.status_code,
            success=False,
            message=error.message,
            errors=[ErrorItem(field=e.field, message=e.message) for e in error.errors],
            trace_for_dev=trace,
        ).render()
