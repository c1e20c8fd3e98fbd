"""
Main entry point for the record lifecycle service.

Run ``python -m record_lifecycle.main`` to serve the API with uvicorn.
Host, port and worker count come from ``API_HOST``, ``API_PORT`` and
``API_WORKERS``. With ``DEBUG`` set the server runs a single worker with
auto-reload.
"""

from .api import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    from .config import get_settings

    settings = get_settings()
    uvicorn.run(
        "record_lifecycle.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
    )
