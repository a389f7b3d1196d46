"""Kida environment setup and the template service.

Template-backed error pages need two things from a template engine:
a way to confirm a template exists before a handler is built, and a way
to render it to bytes at request time. ``Templates`` names that shape;
``KidaTemplates`` provides it over a kida ``Environment``.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from kida import Environment, FileSystemLoader
from kida import TemplateError as KidaTemplateError
from kida.environment.exceptions import (
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
)

from perch.config import AppConfig
from perch.errors import TemplateError

# kida.TemplateError covers SecurityError from sandboxed environments too.
_KIDA_ERRORS = (
    KidaTemplateError,
    TemplateNotFoundError,
    TemplateSyntaxError,
    TemplateRuntimeError,
    UndefinedError,
)


class Templates(Protocol):
    """Template service consumed by template error handlers."""

    def check_template(self, name: str) -> None:
        """Raise ``TemplateError`` if *name* is missing or invalid."""
        ...

    def serve_template(self, name: str, data: Any) -> bytes:
        """Render *name* with *data*. Raise ``TemplateError`` on failure."""
        ...


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment from app configuration.

    Called lazily the first time the app needs its template service.
    """
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )


def _context(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    return {"data": data}


class KidaTemplates:
    """``Templates`` implementation backed by a kida Environment.

    Mapping data is spread into the template context; any other value
    is exposed to the template as ``data``.
    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment) -> None:
        self._env = env

    @property
    def env(self) -> Environment:
        return self._env

    def check_template(self, name: str) -> None:
        try:
            self._env.get_template(name)
        except _KIDA_ERRORS as exc:
            raise TemplateError(name, str(exc)) from exc

    def serve_template(self, name: str, data: Any) -> bytes:
        try:
            template = self._env.get_template(name)
            html = template.render(_context(data))
        except _KIDA_ERRORS as exc:
            raise TemplateError(name, str(exc)) from exc
        return html.encode("utf-8")
