from typing import Optional

from starlette.datastructures import Headers
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from calibre_ingest.core.config import get_settings


class BodyTooLarge(Exception):
    pass


class BodySizeLimitMiddleware:
    """Reject bodies over the upload cap before any handler sees them.

    A declared Content-Length is checked up front; bodies without one
    (chunked) are counted as they are received.
    """

    def __init__(self, app: ASGIApp, max_bytes: Optional[int] = None):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        max_bytes = self.max_bytes or get_settings().max_file_size_bytes
        cl = Headers(scope=scope).get("content-length")
        if cl is not None:
            try:
                length = int(cl)
            except ValueError:
                return await Response(status_code=400)(scope, receive, send)
            if length > max_bytes:
                return await Response(status_code=413)(scope, receive, send)
            return await self.app(scope, receive, send)

        received = 0
        started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    raise BodyTooLarge()
            return message

        async def tracking_send(message: Message):
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLarge:
            if started:
                raise
            await Response(status_code=413)(scope, receive, send)
