"""FastAPI application entrypoint."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import bible
from .config import get_settings
from .observability.logging import configure_logging
from .observability.otel import configure_telemetry


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Planning Bible",
        version="0.1.0",
        docs_url="/docs",
        redoc_url=None,
    )

    configure_logging(settings)
    configure_telemetry(settings)

    @app.exception_handler(Exception)
    async def _generic_exception_handler(request: Request, exc: Exception):  # pragma: no cover - fallback
        return JSONResponse(
            status_code=500,
            content={
                "error": "InternalServerError",
                "message": str(exc),
                "remediation": "Retry the request; if it keeps failing, report the artifact payload that triggers it",
            },
        )

    app.include_router(bible.router)

    @app.get("/healthz")
    async def healthcheck():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()


__all__ = ["app", "create_app"]
