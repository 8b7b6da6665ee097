"""Call sync or async handlers uniformly.

Scripts, standalone pages, and error handlers can be ``def`` or
``async def``; the sync/async check lives here and nowhere else.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def build_kwargs(handler: Any, available: dict[str, Any], request_type: type) -> dict[str, Any]:
    """Pick the arguments *handler* asks for from *available*.

    Parameters are matched by name; a parameter annotated with
    *request_type* receives the request whatever its name.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}
    for name, param in sig.parameters.items():
        if param.annotation is request_type:
            kwargs[name] = available["request"]
        elif name in available:
            kwargs[name] = available[name]
    return kwargs
