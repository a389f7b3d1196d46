"""Static file serving.

A ``FileServer`` is an ordinary route handler rooted at a directory.
The whole request path is resolved under that root, so a file server
mounted at ``/assets/`` over ``public`` serves ``/assets/app.css`` from
``public/assets/app.css``.

Nothing is checked at construction: a missing root simply makes every
request a 404.
"""

import logging
import mimetypes
from pathlib import Path

import anyio

from perch.http.request import Request
from perch.http.writer import ResponseWriter, write_error
from perch.routing.mux import not_found, redirect

logger = logging.getLogger("perch.static")


class FileServer:
    """Route handler that serves files from a directory.

    Security: resolves symlinks and ``..`` segments and refuses any path
    that lands outside the root.

    Usage::

        mux.handle("/assets/", FileServer("public"))
    """

    __slots__ = ("_directory", "_index")

    def __init__(self, directory: str | Path, *, index: str = "index.html") -> None:
        self._directory = Path(directory).resolve()
        self._index = index

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, writer: ResponseWriter, request: Request) -> None:
        """Serve the file named by the request path, or a 404."""
        if request.method not in ("GET", "HEAD"):
            writer.set_header("allow", "GET, HEAD")
            await write_error(writer, "405 method not allowed", 405)
            return

        relative = request.path.lstrip("/")
        candidate = anyio.Path(self._directory)
        if relative:
            candidate = await (candidate / relative).resolve()
        if not candidate.is_relative_to(self._directory):
            logger.debug("refusing %s: outside %s", request.path, self._directory)
            await not_found(writer, request)
            return

        if await candidate.is_dir():
            index_path = candidate / self._index
            if not await index_path.is_file():
                await not_found(writer, request)
                return
            if not request.path.endswith("/"):
                await redirect(writer, request.path + "/")
                return
            candidate = index_path

        if not await candidate.is_file():
            await not_found(writer, request)
            return

        await self._serve_file(writer, request, candidate)

    async def _serve_file(
        self, writer: ResponseWriter, request: Request, file_path: anyio.Path
    ) -> None:
        content_type, _ = mimetypes.guess_type(file_path.name)
        if content_type is None:
            content_type = "application/octet-stream"

        body = await file_path.read_bytes()

        writer.set_header("content-type", content_type)
        writer.set_header("content-length", str(len(body)))
        writer.write_header(200)
        if request.method == "HEAD":
            await writer.write(b"")
            return
        await writer.write(body)
