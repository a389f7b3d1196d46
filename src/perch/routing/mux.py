"""Request multiplexer with exact and subtree patterns.

Patterns are plain paths. A pattern ending in ``/`` names a subtree and
matches every path under it; any other pattern matches only itself.
The longest matching pattern wins, so ``/assets/img/`` beats
``/assets/`` for ``/assets/img/logo.png``, and ``/`` catches whatever
nothing else claims.

Routes are registered during setup. The mux is frozen on the first
request and is read-only from then on.
"""

import logging
from html import escape

from perch._internal.invoke import invoke
from perch._internal.types import Handler
from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.writer import ResponseWriter, write_error
from perch.routing.route import Route

logger = logging.getLogger("perch.server")


async def not_found(writer: ResponseWriter, request: Request) -> None:
    """Default answer when no pattern matches."""
    logger.debug("404 %s %s: no route", request.method, request.path)
    await write_error(writer, "404 page not found", 404)


async def redirect(writer: ResponseWriter, url: str, status: int = 301) -> None:
    """Send a redirect with a short HTML body for GET requests."""
    writer.set_header("location", url)
    writer.set_header("content-type", "text/html; charset=utf-8")
    writer.write_header(status)
    await writer.write(f'<a href="{escape(url)}">Moved Permanently</a>.\n')


class ServeMux:
    """Routing table mapping path patterns to handlers.

    Usage::

        mux = ServeMux()
        mux.handle("/", index)
        mux.handle("/assets/", FileServer("public"))
        await mux.serve(writer, request)
    """

    __slots__ = ("_exact", "_frozen", "_not_found", "_subtrees")

    def __init__(self, not_found_handler: Handler | None = None) -> None:
        self._exact: dict[str, Route] = {}
        # Longest pattern first
        self._subtrees: list[Route] = []
        self._frozen = False
        self._not_found: Handler = not_found_handler or not_found

    def handle(self, pattern: str, handler: Handler) -> None:
        """Register *handler* for *pattern*.

        Raises ``ConfigurationError`` for an empty or relative pattern, a
        missing handler, or a pattern that is already registered.
        """
        if self._frozen:
            msg = f"Cannot register {pattern!r}: the mux is already serving requests."
            raise RuntimeError(msg)
        if not pattern or not pattern.startswith("/"):
            msg = f"Invalid pattern {pattern!r}: patterns must start with '/'."
            raise ConfigurationError(msg)
        if handler is None:
            msg = f"Handler for {pattern!r} is None."
            raise ConfigurationError(msg)
        if pattern in self._exact or any(r.pattern == pattern for r in self._subtrees):
            msg = f"Multiple registrations for {pattern!r}."
            raise ConfigurationError(msg)

        route = Route(pattern=pattern, handler=handler)
        if route.is_subtree:
            self._subtrees.append(route)
            self._subtrees.sort(key=lambda r: len(r.pattern), reverse=True)
        else:
            self._exact[pattern] = route

    def freeze(self) -> None:
        """Stop accepting registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> list[Route]:
        """All registered routes, sorted by pattern."""
        return sorted([*self._exact.values(), *self._subtrees], key=lambda r: r.pattern)

    def match(self, path: str) -> Route | None:
        """Return the route that owns *path*, or ``None``."""
        route = self._exact.get(path)
        if route is not None:
            return route
        for candidate in self._subtrees:
            if path.startswith(candidate.pattern):
                return candidate
        return None

    def should_redirect(self, path: str) -> bool:
        """True if *path* is a bare subtree root (``/assets`` for ``/assets/``)."""
        if path in self._exact or path.endswith("/"):
            return False
        subtree = path + "/"
        return any(r.pattern == subtree for r in self._subtrees)

    async def serve(self, writer: ResponseWriter, request: Request) -> None:
        """Dispatch *request* to the matching handler."""
        if self.should_redirect(request.path):
            target = request.path + "/"
            if request.query_string:
                target += "?" + request.query_string.decode("latin-1")
            await redirect(writer, target)
            return

        route = self.match(request.path)
        handler = route.handler if route is not None else self._not_found
        await invoke(handler, writer, request)
