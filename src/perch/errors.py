"""Perch exception hierarchy.

Raised at setup time (route registration, template checks) and by the
template service. Nothing here is raised back through a request once a
handler has started writing.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a route registration is invalid.

    Covers malformed patterns and duplicate registrations.
    """


class TemplateError(PerchError):
    """A template could not be loaded or rendered.

    Raised by the template service during ``check_template`` (missing or
    invalid template) and ``serve_template`` (render failure).
    """

    def __init__(self, template: str, detail: str) -> None:
        super().__init__(f"{template}: {detail}")
        self.template = template
        self.detail = detail
