"""ASGI handler — translates ASGI scope/messages to perch types.

Builds the ``Request`` and ``ResponseWriter`` for one HTTP request,
dispatches through the mux, and closes the response.
"""

import contextlib
import logging

from perch._internal.asgi import Receive, Scope, Send
from perch.http.request import Request
from perch.http.writer import ResponseWriter, write_error
from perch.routing.mux import ServeMux

logger = logging.getLogger("perch.server")


async def handle_request(scope: Scope, receive: Receive, send: Send, *, mux: ServeMux) -> None:
    """Process a single HTTP request through the mux.

    Transport failures (``OSError`` from ``send``, e.g. a client that
    hung up) while writing the 500 fallback or closing the response are
    dropped: there is nobody left to answer.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    writer = ResponseWriter(send)

    try:
        await mux.serve(writer, request)
    except Exception:
        logger.exception("500 %s %s", request.method, request.path)
        if not writer.committed:
            writer.reset()
            with contextlib.suppress(OSError):
                await write_error(writer, "500 internal server error", 500)
    finally:
        with contextlib.suppress(OSError):
            await writer.finish()
