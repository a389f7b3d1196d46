"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler, called as handler(writer, request), sync or async
Handler: TypeAlias = Callable[..., Any]

# Lifespan hook: zero-argument, sync or async
Hook: TypeAlias = Callable[[], Any]
