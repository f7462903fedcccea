"""CORS and request logging middleware."""

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from backend.core.config import settings

logger = logging.getLogger("saas_permissions.http")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log method, path, status and latency."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Request-Id"] = request_id
        logger.info(
            "%s %s -> %s in %sms [%s]",
            request.method, request.url.path, response.status_code, elapsed_ms, request_id,
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install CORS for the admin UI origins, then request logging."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)
