"""Pre-built error responses.

Two handler shapes, both built once at startup and stateless after:

- ``ErrorHandler`` — ``await handler(message, content_type, writer, request)``
  writes *message* with the captured status and the given content type.
- ``TemplateErrorHandler`` — ``await handler(data, writer, request)``
  renders a template with *data* and writes it with the captured status.

These are never wired into dispatch. The mux answers unmatched paths
with its own default 404; application handlers call these explicitly
when they decide a request should fail::

    async def show(writer, request):
        item = lookup(request.path)
        if item is None:
            await app.errors.error404("no such item", "text/plain", writer, request)
            return
        ...
"""

import contextlib
import logging
from dataclasses import dataclass, field, fields
from http import HTTPStatus
from typing import Any

from perch.errors import TemplateError
from perch.http.request import Request
from perch.http.writer import ResponseWriter
from perch.templating.integration import Templates

logger = logging.getLogger("perch.server")

DEFAULT_ERROR_STATUSES: tuple[HTTPStatus, ...] = (
    HTTPStatus.BAD_REQUEST,
    HTTPStatus.UNAUTHORIZED,
    HTTPStatus.FORBIDDEN,
    HTTPStatus.NOT_FOUND,
    HTTPStatus.METHOD_NOT_ALLOWED,
    HTTPStatus.TOO_MANY_REQUESTS,
    HTTPStatus.INTERNAL_SERVER_ERROR,
    HTTPStatus.NOT_IMPLEMENTED,
    HTTPStatus.BAD_GATEWAY,
    HTTPStatus.SERVICE_UNAVAILABLE,
)


def status_text(status: int) -> str:
    """Reason phrase for *status*, e.g. ``"Not Found"`` for 404."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


@dataclass(frozen=True, slots=True)
class ErrorHandler:
    """Writes a caller-supplied message with a fixed status."""

    status: int

    async def __call__(
        self,
        message: str | bytes,
        content_type: str,
        writer: ResponseWriter,
        request: Request,
    ) -> None:
        writer.write_header(self.status)
        writer.add_header("content-type", content_type)
        # Best-effort delivery: a vanished client is not actionable here.
        with contextlib.suppress(OSError):
            await writer.write(message)


@dataclass(frozen=True, slots=True)
class TemplateErrorHandler:
    """Renders a fixed template with a fixed status.

    Only built by ``generate_template_error_handler``, which checks the
    template first. A render failure at request time is logged and
    nothing is written; no content type is set on this path.
    """

    status: int
    template: str
    templates: Templates = field(repr=False, compare=False)

    async def __call__(self, data: Any, writer: ResponseWriter, request: Request) -> None:
        try:
            body = self.templates.serve_template(self.template, data)
        except TemplateError as exc:
            logger.error("error serving template %d %s: %s", self.status, self.template, exc)
            return
        writer.write_header(self.status)
        await writer.write(body)


def generate_error_handler(status: int) -> ErrorHandler:
    """Return a handler that writes the given status, content type, and message."""
    return ErrorHandler(status=int(status))


def generate_template_error_handler(
    status: int, template: str, templates: Templates
) -> TemplateErrorHandler:
    """Return a handler serving *template* with *status*.

    Raises ``TemplateError`` if the template is missing or invalid; no
    handler is built in that case.
    """
    templates.check_template(template)
    return TemplateErrorHandler(status=int(status), template=template, templates=templates)


@dataclass(slots=True)
class DefaultErrors:
    """Named handler slots for the common error statuses.

    Every slot is ``None`` until ``init_default_errors()`` runs. Call it
    once during startup, before any handler reads a slot.
    """

    error400: ErrorHandler | None = None
    error401: ErrorHandler | None = None
    error403: ErrorHandler | None = None
    error404: ErrorHandler | None = None
    error405: ErrorHandler | None = None
    error429: ErrorHandler | None = None
    error500: ErrorHandler | None = None
    error501: ErrorHandler | None = None
    error502: ErrorHandler | None = None
    error503: ErrorHandler | None = None

    def init_default_errors(self) -> None:
        """Bind every slot to a fresh ``ErrorHandler`` for its status."""
        for status in DEFAULT_ERROR_STATUSES:
            setattr(self, f"error{status.value}", generate_error_handler(status))

    @property
    def initialized(self) -> bool:
        return all(getattr(self, f.name) is not None for f in fields(self))

    def get(self, status: int) -> ErrorHandler | None:
        """Return the slot for *status*, or ``None`` if there is no such slot."""
        return getattr(self, f"error{int(status)}", None)
