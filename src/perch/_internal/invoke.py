"""Invoke helpers — call sync or async handlers uniformly.

Route handlers can be ``def`` or ``async def``. The mux, the app's
lifespan hooks, and the test client all go through :func:`invoke` so
the sync/async check lives in one place.

Usage::

    from perch._internal.invoke import invoke

    await invoke(handler, writer, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
