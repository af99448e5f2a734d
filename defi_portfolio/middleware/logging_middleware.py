"""
HTTP request logging middleware.

Binds a request id plus the wallet and chain a balances lookup asked for, so
every event logged while serving the request carries them, then logs one
``http_request`` line with status and duration.
"""

import time
import uuid
from typing import Any, Dict

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

# Health checks hit these constantly; keep them out of info-level logs
_QUIET_PATHS = {"/healthz"}


def short_address(address: str) -> str:
    """``0xd8da6bf2...6045`` style; anything too short to abbreviate is kept."""
    address = address.strip()
    if len(address) <= 14:
        return address
    return f"{address[:10]}...{address[-4:]}"


def request_context(request: Request) -> Dict[str, Any]:
    """Context fields bound for the lifetime of a request."""
    context: Dict[str, Any] = {
        "request_id": request.headers.get("x-request-id") or uuid.uuid4().hex[:8],
    }
    wallet = request.query_params.get("address")
    if wallet:
        context["wallet"] = short_address(wallet)
    chain = request.query_params.get("chain")
    if chain:
        context["requested_chain"] = chain.strip().lower()
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing, status and lookup context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = request_context(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = context["request_id"]
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            elif request.url.path in _QUIET_PATHS:
                log = logger.debug
            else:
                log = logger.info

            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=duration_ms,
            )
