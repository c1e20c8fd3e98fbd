"""Error handlers rendering every failure as the response envelope."""

import traceback

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import get_settings
from .i18n import Translator
from .lifecycle.envelope import EnvelopeBuilder
from .lifecycle.errors import BadRequest, FieldError, LifecycleError, ServerError

logger = structlog.get_logger()


def _envelope() -> EnvelopeBuilder:
    return EnvelopeBuilder(Translator(get_settings().language))


async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Handle errors raised by the lifecycle guards."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope().failure(exc),
    )


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle bodies FastAPI could not parse into a JSON object."""
    envelope = _envelope()
    errors = [
        FieldError(".".join(str(loc) for loc in error["loc"]), error["msg"])
        for error in exc.errors()
    ]
    error = BadRequest(envelope.translator.t("badRequest"), errors)
    return JSONResponse(status_code=error.status_code, content=envelope.failure(error))


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors."""
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))

    envelope = _envelope()
    error = ServerError(envelope.translator.t("unknownError"))
    trace = None
    if get_settings().debug:
        trace = {
            "type": type(exc).__name__,
            "detail": str(exc),
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return JSONResponse(
        status_code=error.status_code,
        content=envelope.failure(error, trace=trace),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the app."""
    app.add_exception_handler(LifecycleError, lifecycle_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)
