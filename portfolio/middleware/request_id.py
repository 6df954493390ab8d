"""Request ID middleware (raw ASGI).

Forwards a client-supplied request id when it is safe to log, otherwise
generates one. The id is stored on ``request.state.request_id``, echoed
on the response, and attached to the current span.
"""

import re
import uuid
from typing import Callable

from portfolio.shared.telemetry.tracing import add_span_attributes

REQUEST_ID_MAX_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def _header_value(scope: dict, name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None


def resolve_request_id(raw: str | None) -> str:
    """Return ``raw`` stripped if it is a safe id, else a new hex id."""
    candidate = (raw or "").strip()
    if candidate and _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIDMiddleware:
    def __init__(self, app: Callable, header_name: str = "X-Request-ID") -> None:
        self.app = app
        self.header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = resolve_request_id(_header_value(scope, self._header_key))
        scope.setdefault("state", {})["request_id"] = request_id
        add_span_attributes(request_id=request_id)

        async def send_with_request_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (self._header_key, request_id.encode("latin-1")),
                ]
            await send(message)

        await self.app(scope, receive, send_with_request_id)
