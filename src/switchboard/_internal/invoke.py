"""Invoke helpers — call sync or async handlers uniformly.

Switchboard handlers can be ``def`` or ``async def``. Any code that
calls a user-provided handler must handle both cases. This module
provides a single helper so the sync/async check lives in exactly one
place.

Usage::

    from switchboard._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine.

    Works with both sync and async callables::

        # sync — returns immediately, no await needed
        def read(ctx, item_id: int):
            ctx.respond(store[item_id])

        # async — returns coroutine, awaited automatically
        async def read(ctx, item_id: int):
            ctx.respond(await store.fetch(item_id))
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
