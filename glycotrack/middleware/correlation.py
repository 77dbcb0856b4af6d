"""Correlation ID middleware.

Tags every request with an ID that appears in each log line written while
the request is handled and is echoed back in the response headers.
"""

import re
import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from glycotrack.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Caller-supplied IDs are reused only if they look like an opaque token
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_correlation_id(raw: bytes | None) -> str:
    """Reuse a well-formed incoming ID, otherwise mint a UUID4."""
    if raw:
        candidate = raw.decode("latin-1").strip()
        if _VALID_CORRELATION_ID.match(candidate):
            return candidate
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Pure ASGI middleware, so it never wraps the response body stream."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = dict(scope.get("headers", [])).get(b"x-correlation-id")
        correlation_id = resolve_correlation_id(incoming)
        token = correlation_id_ctx.set(correlation_id)

        method = scope.get("method", "")
        path = scope.get("path", "")
        started = time.perf_counter()
        status_code: int | None = None

        async def send_with_header(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                headers = list(message.get("headers", []))
                headers.append(
                    (CORRELATION_ID_HEADER.lower().encode(), correlation_id.encode())
                )
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        except Exception:
            logger.exception(
                "Unhandled error while serving request",
                method=method,
                path=path,
            )
            raise
        else:
            logger.info(
                "Request handled",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            correlation_id_ctx.reset(token)
