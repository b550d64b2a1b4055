"""Middleware configuration for the FastAPI application.

This module registers CORS and the request-context middleware that binds a
correlation id to every log event emitted while a request is handled.
"""

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from authlink.core.config.settings import settings

CORRELATION_HEADER = "X-Correlation-ID"


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(bind_request_context_middleware)


async def bind_request_context_middleware(request: Request, call_next):
    """Binds `correlation_id` and `path` into structlog's contextvars.

    An incoming `X-Correlation-ID` header is reused; otherwise a new id is
    generated. The id is echoed back on the response.
    """
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers[CORRELATION_HEADER] = correlation_id
    return response
