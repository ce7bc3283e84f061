"""Request ID middleware: injects X-Request-ID into context for logging.

If the incoming request carries an X-Request-ID header it is reused, otherwise a
UUID4 is generated. The value is exposed via the package logger's RequestIdFilter
and echoed back on the response so a caller can correlate relocation logs.
"""

from __future__ import annotations

import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from treearchive.packages.archive.core.logger import set_request_id

HEADER_NAME = "x-request-id"


class RequestIdMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        headers = {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in scope.get("headers", [])}
        rid = headers.get(HEADER_NAME) or str(uuid.uuid4())
        set_request_id(rid)

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[HEADER_NAME] = rid
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            set_request_id(None)
