"""FastAPI application for PromptWatt.

All routes live under ``/api``. Errors are returned as
``{"error": "..."}`` rather than FastAPI's default ``{"detail": ...}``,
malformed request bodies are a 400, not a 422, and any unhandled
exception is a 500 in the same shape.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from promptwatt import __version__
from promptwatt.web.routes import compare, providers, route

logger = logging.getLogger(__name__)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request format"})


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500, content={"error": f"Failed to process request: {exc}"})


def create_app() -> FastAPI:
    """Build the web app with every router mounted."""
    app = FastAPI(
        title="PromptWatt",
        description="Compare LLM latency, tokens and footprint; route prompts by complexity",
        version=__version__,
    )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(compare.router, prefix="/api", tags=["compare"])
    app.include_router(route.router, prefix="/api", tags=["route"])
    app.include_router(providers.router, prefix="/api", tags=["providers"])

    return app
