"""Per-route request body size limits.

Pure ASGI middleware so that bodies without a Content-Length (chunked
uploads) are also capped: the body is buffered up to the limit and replayed
to the application, or the request is answered with 413.
"""

from typing import Iterable

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from chat_reports.exceptions import PayloadTooLargeError
from chat_reports.schemas.errors import error_response
from chat_reports.utils.logger import get_logger

log = get_logger(__name__)


class BodySizeLimitMiddleware:
    """
    Rejects requests whose body exceeds the limit for their path with HTTP 413.

    Example usage:
        app.add_middleware(
            BodySizeLimitMiddleware,
            route_limits=[("/reports", 1_048_576), ("/health", 1024)],
            default_limit=102_400,
        )
    """

    def __init__(self, app: ASGIApp, route_limits: Iterable[tuple[str, int]], default_limit: int):
        self.app = app
        # Longest prefix wins
        self.route_limits = sorted(route_limits, key=lambda item: len(item[0]), reverse=True)
        self.default_limit = default_limit

    def limit_for(self, path: str) -> int:
        for prefix, limit in self.route_limits:
            if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
                return limit
        return self.default_limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        limit = self.limit_for(path)

        content_length = None
        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    content_length = int(value)
                except ValueError:
                    content_length = None
                break

        if content_length is not None and content_length > limit:
            await self._reject(scope, receive, send, path, content_length, limit)
            return

        chunks: list[bytes] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > limit:
                await self._reject(scope, receive, send, path, received, limit)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(
        self, scope: Scope, receive: Receive, send: Send, path: str, size: int, limit: int
    ) -> None:
        log.warning("request payload too large", path=path, size=size, limit=limit)
        exc = PayloadTooLargeError()
        response = error_response(exc.status_code, exc.message)
        await response(scope, receive, send)
