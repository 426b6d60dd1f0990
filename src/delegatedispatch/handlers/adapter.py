"""
Naming helpers for delegate responders.

Responders can be plain functions, lambdas, bound methods, partials or
callable objects. Logs, spans and error messages need one readable name for
all of them.
"""

import functools
import inspect
from typing import Any


def get_handler_name(handler: Any) -> str:
    """
    Get a descriptive name for a handler for logging and debugging.

    Args:
        handler: Any callable (function, bound method, partial, callable object)

    Returns:
        String name for the handler

    Example:
        >>> class Greeter:
        ...     def on_join(self, event): ...
        >>> get_handler_name(Greeter().on_join)
        'Greeter.on_join'
    """
    if isinstance(handler, functools.partial):
        return f"partial({get_handler_name(handler.func)})"
    if inspect.ismethod(handler):
        owner = handler.__self__
        owner_name = owner.__name__ if inspect.isclass(owner) else type(owner).__name__
        return f"{owner_name}.{handler.__func__.__name__}"
    if inspect.isfunction(handler) or inspect.isbuiltin(handler):
        return str(getattr(handler, "__qualname__", handler.__name__))
    if hasattr(handler, "__class__") and callable(handler):
        return str(handler.__class__.__name__)
    return repr(handler)


__all__ = ["get_handler_name"]
