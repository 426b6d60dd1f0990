"""
Handler descriptors and signature validation.

A descriptor is the validated, immutable shape of one registered responder:
which event type it answers, which of its parameters are dependencies or the
cancellation token, and which return shape it declares. Everything is
decided here, once, from the callable's signature and type hints, so the
compiler never has to inspect values at call time.

Supported signatures::

    def responder(event: E) -> None
    def responder(event: E, dep: SomeService, ...) -> Success
    async def responder(event: E, dep: SomeService, ct: CancellationToken) -> Result[T]
    def responder(event: E) -> Awaitable[Result[T]]

Example:
    >>> def greet(event: MemberJoined, greeter: Greeter) -> None:
    ...     greeter.greet(event.user_id)
    >>> descriptor = describe_handler(MemberJoined, greet)
    >>> [slot.name for slot in descriptor.dependency_slots]
    ['greeter']
"""

import asyncio
import collections.abc
import functools
import inspect
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from delegatedispatch.cancellation import CancellationToken
from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.exceptions import HandlerValidationError
from delegatedispatch.handlers.adapter import get_handler_name
from delegatedispatch.results import Result, Success

_AWAITABLE_ORIGINS: frozenset[Any] = frozenset(
    {
        collections.abc.Awaitable,
        collections.abc.Coroutine,
        asyncio.Future,
        asyncio.Task,
    }
)

_REJECTED_KINDS = {
    inspect.Parameter.VAR_POSITIONAL: "variadic *args parameters are not supported",
    inspect.Parameter.VAR_KEYWORD: "variadic **kwargs parameters are not supported",
}


class SlotKind(Enum):
    """Role of a responder parameter after the event parameter."""

    DEPENDENCY = "dependency"
    CANCELLATION = "cancellation"


class ReturnShape(Enum):
    """
    Return shapes a responder may declare.

    Values:
        NONE: Returns nothing (``-> None``)
        SUCCESS: Returns the plain ``SUCCESS`` signal (``-> Success``)
        RESULT: Returns a ``Result`` (``-> Result`` or ``-> Result[T]``)
    """

    NONE = "none"
    SUCCESS = "success"
    RESULT = "result"


@dataclass(frozen=True)
class ParameterSlot:
    """
    One responder parameter after the event parameter.

    Attributes:
        name: Parameter name
        kind: Whether it is resolved as a dependency or bound to the token
        annotation: Declared type; the key handed to the dependency resolver
    """

    name: str
    kind: SlotKind
    annotation: Any


@dataclass(frozen=True)
class HandlerDescriptor:
    """
    Validated metadata for one registered responder.

    Attributes:
        event_type: The event class this responder handles
        handler: The raw callable
        handler_name: Descriptive name for logs and errors
        slots: Parameters after the event, in declaration order
        return_shape: Declared return shape (unwrapped if asynchronous)
        is_async: Whether the call returns an awaitable to be resolved
    """

    event_type: type[GatewayEvent]
    handler: collections.abc.Callable[..., Any]
    handler_name: str
    slots: tuple[ParameterSlot, ...]
    return_shape: ReturnShape
    is_async: bool

    @property
    def dependency_slots(self) -> tuple[ParameterSlot, ...]:
        """Slots resolved from the dependency resolver."""
        return tuple(slot for slot in self.slots if slot.kind is SlotKind.DEPENDENCY)

    @property
    def has_cancellation_slot(self) -> bool:
        """Whether the last parameter receives the cancellation token."""
        return bool(self.slots) and self.slots[-1].kind is SlotKind.CANCELLATION


def describe_handler(
    event_type: type[GatewayEvent],
    handler: collections.abc.Callable[..., Any],
) -> HandlerDescriptor:
    """
    Validate ``handler`` against ``event_type`` and build its descriptor.

    Args:
        event_type: The GatewayEvent subclass the handler responds to
        handler: The callable to validate

    Returns:
        The immutable HandlerDescriptor

    Raises:
        HandlerValidationError: If the callable's shape is unsupported
    """
    if not (isinstance(event_type, type) and issubclass(event_type, GatewayEvent)):
        raise HandlerValidationError(f"event type must be a GatewayEvent subclass, got {event_type!r}")

    if not callable(handler):
        raise HandlerValidationError(f"responder must be callable, got {type(handler).__name__}")

    handler_name = get_handler_name(handler)

    def fail(reason: str) -> HandlerValidationError:
        return HandlerValidationError(reason, handler_name=handler_name, event_type=event_type)

    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError) as e:
        raise fail(f"signature cannot be inspected ({e})") from e

    try:
        hints = typing.get_type_hints(_hint_target(handler))
    except Exception as e:
        raise fail(f"type annotations cannot be resolved ({e})") from e

    parameters = _positional_parameters(signature, fail)
    if not parameters:
        raise fail("the responder must take at least the event as a parameter")

    event_param = parameters[0]
    if hints.get(event_param.name) is not event_type:
        raise fail(
            f"first parameter '{event_param.name}' must be annotated as {event_type.__name__}"
        )

    slots = _build_slots(parameters[1:], hints, fail)
    return_shape, is_async = _classify_return(handler, hints, fail)

    return HandlerDescriptor(
        event_type=event_type,
        handler=handler,
        handler_name=handler_name,
        slots=slots,
        return_shape=return_shape,
        is_async=is_async,
    )


def _hint_target(handler: Any) -> Any:
    """Return the object whose annotations describe ``handler``."""
    if isinstance(handler, functools.partial):
        return _hint_target(handler.func)
    if inspect.isfunction(handler) or inspect.ismethod(handler):
        return handler
    return type(handler).__call__


def _positional_parameters(
    signature: inspect.Signature,
    fail: collections.abc.Callable[[str], HandlerValidationError],
) -> list[inspect.Parameter]:
    parameters = []
    for param in signature.parameters.values():
        if param.kind in _REJECTED_KINDS:
            raise fail(_REJECTED_KINDS[param.kind])
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            if param.default is inspect.Parameter.empty:
                raise fail(f"keyword-only parameter '{param.name}' has no default")
            continue
        parameters.append(param)
    return parameters


def _is_cancellation_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, CancellationToken)


def _build_slots(
    parameters: list[inspect.Parameter],
    hints: dict[str, Any],
    fail: collections.abc.Callable[[str], HandlerValidationError],
) -> tuple[ParameterSlot, ...]:
    slots = []
    last_index = len(parameters) - 1

    for index, param in enumerate(parameters):
        if param.name not in hints:
            raise fail(f"parameter '{param.name}' has no type annotation")
        annotation = hints[param.name]

        if _is_cancellation_type(annotation):
            if index != last_index:
                raise fail(
                    f"cancellation token parameter '{param.name}' must be the last parameter"
                )
            slots.append(ParameterSlot(param.name, SlotKind.CANCELLATION, annotation))
        else:
            slots.append(ParameterSlot(param.name, SlotKind.DEPENDENCY, annotation))

    return tuple(slots)


def _shape_of(annotation: Any) -> ReturnShape | None:
    if annotation is None or annotation is type(None):
        return ReturnShape.NONE
    if annotation is Success:
        return ReturnShape.SUCCESS
    if annotation is Result or typing.get_origin(annotation) is Result:
        return ReturnShape.RESULT
    return None


def _unwrap_awaitable(annotation: Any) -> tuple[bool, Any]:
    """Return (True, inner) when ``annotation`` is a parameterised awaitable."""
    origin = typing.get_origin(annotation)
    if origin not in _AWAITABLE_ORIGINS:
        return False, None
    args = typing.get_args(annotation)
    if not args:
        return False, None
    return True, args[-1]


def _is_coroutine_callable(handler: Any) -> bool:
    if inspect.iscoroutinefunction(handler):
        return True
    call = getattr(type(handler), "__call__", None)
    return not inspect.isfunction(handler) and inspect.iscoroutinefunction(call)


def _classify_return(
    handler: Any,
    hints: dict[str, Any],
    fail: collections.abc.Callable[[str], HandlerValidationError],
) -> tuple[ReturnShape, bool]:
    unsupported = fail(
        "unsupported return shape; expected None, Success, Result[T], "
        "or an awaitable of one of these"
    )

    if "return" not in hints:
        raise unsupported
    annotation = hints["return"]

    if _is_coroutine_callable(handler):
        shape = _shape_of(annotation)
        if shape is None:
            raise unsupported
        return shape, True

    shape = _shape_of(annotation)
    if shape is not None:
        return shape, False

    is_awaitable, inner = _unwrap_awaitable(annotation)
    if is_awaitable:
        shape = _shape_of(inner)
        if shape is not None:
            return shape, True

    raise unsupported


__all__ = [
    "HandlerDescriptor",
    "ParameterSlot",
    "ReturnShape",
    "SlotKind",
    "describe_handler",
]
