"""Error handling and request size middleware."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ayahrender.models.errors import AyahRenderError, ErrorResponse, InvalidTemplateError

logger = logging.getLogger(__name__)


async def ayah_render_error_handler(request: Request, exc: AyahRenderError) -> JSONResponse:
    """Handle AyahRenderError exceptions."""
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error("Render error [%s]: %s %s", exc.component, exc.message, exc.details)
    response = ErrorResponse.from_exception(exc)
    return JSONResponse(status_code=status_code, content=response.model_dump(exclude_none=True))


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """A body that does not parse as a render request fails like any other render."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.error("Malformed render request: %s", details)
    response = ErrorResponse(error="Render failed", details=details or "Malformed request")
    return JSONResponse(status_code=500, content=response.model_dump(exclude_none=True))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Any other failure is reported like an infrastructure error."""
    logger.exception("Render error: %s", exc)
    response = ErrorResponse(error="Render failed", details=str(exc) or type(exc).__name__)
    return JSONResponse(status_code=500, content=response.model_dump(exclude_none=True))


def _get_status_code(exc: AyahRenderError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, InvalidTemplateError):
        return 400
    return 500


class BodySizeLimitMiddleware:
    """Reject request bodies larger than max_bytes with 413.

    A declared Content-Length is checked up front. Bodies without one
    (chunked uploads) are buffered and counted as they arrive, and the
    buffered messages are replayed to the app once the body is complete.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = dict(scope["headers"]).get(b"content-length")
        if declared is not None:
            if declared.isdigit() and int(declared) > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            await self.app(scope, receive, send)
            return

        messages: list[Message] = []
        received = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning("Rejected request body over %d bytes", self.max_bytes)
        response = JSONResponse(status_code=413, content={"error": "Payload too large"})
        await response(scope, receive, send)
