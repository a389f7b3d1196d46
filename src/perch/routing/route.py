"""Route entry — a pattern bound to a handler."""

from dataclasses import dataclass

from perch._internal.types import Handler


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route. Lives for the lifetime of the app."""

    pattern: str
    handler: Handler

    @property
    def is_subtree(self) -> bool:
        """True for prefix patterns such as ``/assets/``."""
        return self.pattern.endswith("/")
