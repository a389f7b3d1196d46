"""Perch — route registration, static files, and ready-made error pages.

A thin layer over an ASGI request multiplexer::

    from perch import App

    app = App()
    app.init_default_errors()

    @app.route("/")
    async def index(writer, request):
        await writer.write("Hello, World!")

    @app.route("/admin")
    async def admin(writer, request):
        await app.errors.error403("forbidden", "text/plain", writer, request)

    app.static_route("/assets/", "public")
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "DefaultErrors",
    "ErrorHandler",
    "PerchError",
    "Request",
    "ResponseWriter",
    "TemplateError",
    "TemplateErrorHandler",
    "generate_error_handler",
    "generate_template_error_handler",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "ResponseWriter":
        from perch.http.writer import ResponseWriter

        return ResponseWriter

    if name in (
        "DefaultErrors",
        "ErrorHandler",
        "TemplateErrorHandler",
        "generate_error_handler",
        "generate_template_error_handler",
    ):
        from perch import errorpages as _errorpages

        return getattr(_errorpages, name)

    if name in ("ConfigurationError", "PerchError", "TemplateError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
