"""Response writer — the sink every perch handler writes into.

Handlers drive a response imperatively::

    writer.write_header(404)
    writer.add_header("content-type", "text/plain")
    await writer.write(b"gone")

The status and headers are held until the first ``write()`` (or until
``finish()`` for an empty body), then committed as a single
``http.response.start`` message. After that point the header block is
on the wire and further header changes are ignored.
"""

import logging

from perch._internal.asgi import Send

logger = logging.getLogger("perch.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseWriter:
    """Buffered-header, streamed-body HTTP response over ASGI ``send``.

    Not thread-safe; one writer serves exactly one request.
    """

    __slots__ = ("_closed", "_committed", "_headers", "_send", "_status", "_status_set")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._status = 200
        self._status_set = False
        self._headers: list[tuple[str, str]] = []
        self._committed = False
        self._closed = False

    @property
    def status(self) -> int:
        return self._status

    @property
    def committed(self) -> bool:
        """True once the status line and headers have been sent."""
        return self._committed

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """Headers queued (or already sent) for this response."""
        return tuple(self._headers)

    def get_header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self._headers:
            if key == wanted:
                return value
        return None

    def write_header(self, status: int) -> None:
        """Set the response status. Only the first call counts."""
        if self._status_set:
            logger.warning(
                "superfluous write_header call (status %d, already %d)", status, self._status
            )
            return
        self._status = status
        self._status_set = True

    def add_header(self, name: str, value: str) -> None:
        """Append a header. Ignored once the header block is committed."""
        if self._committed:
            logger.debug("header %r added after response committed; ignored", name)
            return
        self._headers.append((name.lower(), value))

    def set_header(self, name: str, value: str) -> None:
        """Replace every value of *name* with *value*."""
        if self._committed:
            logger.debug("header %r set after response committed; ignored", name)
            return
        wanted = name.lower()
        self._headers = [(k, v) for k, v in self._headers if k != wanted]
        self._headers.append((wanted, value))

    def reset(self) -> None:
        """Drop the queued status and headers. No-op once committed."""
        if self._committed:
            return
        self._status = 200
        self._status_set = False
        self._headers.clear()

    async def write(self, data: str | bytes) -> int:
        """Write body bytes, committing headers first if needed.

        Returns the number of bytes accepted. Bodies on 1xx/204/304
        responses are dropped.
        """
        if self._closed:
            msg = "write() after the response was finished"
            raise RuntimeError(msg)
        if not self._status_set:
            self.write_header(200)
        if not self._committed:
            await self._commit()
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        if not _body_allowed(self._status):
            logger.debug("dropping %d byte body on %d response", len(chunk), self._status)
            return 0
        if chunk:
            await self._send({"type": "http.response.body", "body": chunk, "more_body": True})
        return len(chunk)

    async def finish(self) -> None:
        """Close the response. Safe to call more than once."""
        if self._closed:
            return
        if not self._committed:
            await self._commit()
        self._closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})

    async def _commit(self) -> None:
        self._committed = True
        raw_headers = [
            (name.encode("latin-1"), value.encode("latin-1")) for name, value in self._headers
        ]
        await self._send(
            {
                "type": "http.response.start",
                "status": self._status,
                "headers": raw_headers,
            }
        )


async def write_error(writer: ResponseWriter, message: str, status: int) -> None:
    """Reply with a plain-text error: *message* plus a trailing newline."""
    writer.set_header("content-type", "text/plain; charset=utf-8")
    writer.set_header("x-content-type-options", "nosniff")
    writer.write_header(status)
    await writer.write(message + "\n")
