"""Perch application class.

Holds the routing table, the default error handlers, and the template
service in one object instead of module globals. Mutable during setup;
frozen when ``run()`` or ``__call__()`` is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from kida import Environment

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.types import Handler, Hook
from perch.config import AppConfig
from perch.errorpages import DefaultErrors, TemplateErrorHandler, generate_template_error_handler
from perch.routing.mux import ServeMux
from perch.routing.static import FileServer
from perch.server.handler import handle_request
from perch.templating.integration import KidaTemplates, Templates, create_environment

logger = logging.getLogger("perch.server")


class App:
    """The perch application.

    Usage::

        app = App()
        app.init_default_errors()

        @app.route("/")
        async def index(writer, request):
            await writer.write("hello")

        app.static_route("/assets/", "public")
        app.run()

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one worker freezes the mux, after which
        routes and error slots are read-only.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_mux",
        "_shutdown_hooks",
        "_startup_hooks",
        "_templates",
        "config",
        "errors",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        templates: Templates | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.errors: DefaultErrors = DefaultErrors()
        self._mux = ServeMux()
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()
        if templates is None and kida_env is not None:
            templates = KidaTemplates(kida_env)
        self._templates: Templates | None = templates

    # -- Route registration --

    def add_route(self, pattern: str, handler: Handler) -> None:
        """Register *handler* for requests matching *pattern*.

        Handlers are called as ``handler(writer, request)`` and may be
        sync or async. A trailing ``/`` makes the pattern a subtree.
        """
        self._check_not_frozen()
        self._mux.handle(pattern, handler)

    def route(self, pattern: str) -> Callable[[Handler], Handler]:
        """Decorator form of ``add_route``."""

        def decorator(func: Handler) -> Handler:
            self.add_route(pattern, func)
            return func

        return decorator

    def static_route(self, route_prefix: str, directory: str | Path) -> None:
        """Serve files under *directory* for paths below *route_prefix*.

        The directory is not checked here; missing files are 404s at
        request time.
        """
        self.add_route(route_prefix, FileServer(directory, index=self.config.index_file))

    @property
    def mux(self) -> ServeMux:
        return self._mux

    # -- Error handlers --

    def init_default_errors(self) -> DefaultErrors:
        """Bind the default error slots on ``app.errors``."""
        self.errors.init_default_errors()
        return self.errors

    @property
    def templates(self) -> Templates:
        """The template service, built from config on first use."""
        if self._templates is None:
            self._templates = KidaTemplates(create_environment(self.config))
        return self._templates

    def template_error_handler(self, status: int, template: str) -> TemplateErrorHandler:
        """Build a template-backed error handler using the app's templates.

        Raises ``TemplateError`` if the template is missing or invalid.
        """
        return generate_template_error_handler(status, template, self.templates)

    # -- Lifecycle hooks --

    def on_startup(self, func: Hook) -> Hook:
        """Register an async or sync startup hook via decorator."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Freeze the app and run startup hooks in registration order."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it with pounce.

        Reload is enabled when ``config.debug`` is set.
        """
        logging.basicConfig(level=self.config.log_level.upper())
        self._ensure_frozen()

        from perch.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(scope, receive, send, mux=self._mux)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._mux.freeze()
            self._frozen = True
            logger.debug("routes frozen: %s", ", ".join(r.pattern for r in self._mux.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
