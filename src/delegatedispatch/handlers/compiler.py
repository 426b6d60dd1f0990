"""
Adapter compiler: turns handler descriptors into uniform invokers.

Every responder, whatever its parameters and return shape, is compiled into
an ``Invoker``: an awaitable ``(event, resolver, cancellation_token) ->
Result``. All decisions (how to assemble arguments, whether to await, how to
coerce the return value) are taken once here from the descriptor, so an
invocation never inspects the handler or its return type.

The invoker is also the fault boundary: an exception raised by the responder
becomes a failed ``Result`` carrying a ``HandlerFault``, so one faulty
responder can never abort its siblings.

Example:
    >>> descriptor = registry.register(MemberJoined, welcome)
    >>> invoker = compile_invoker(descriptor, provider)
    >>> result = await invoker(event, provider, CancellationToken.none())
    >>> result.is_success
    True
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from delegatedispatch.cancellation import CancellationToken
from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.exceptions import CompileError
from delegatedispatch.handlers.descriptor import HandlerDescriptor, ReturnShape
from delegatedispatch.protocols import DependencyResolver
from delegatedispatch.results import HandlerFault, Result

logger = logging.getLogger(__name__)

ArgumentBuilder = Callable[[GatewayEvent, DependencyResolver, CancellationToken], tuple[Any, ...]]
Coercer = Callable[[Any, str], Result[Any]]
InvokeFunc = Callable[[GatewayEvent, DependencyResolver, CancellationToken], Awaitable[Result[Any]]]

_SUCCESS: Result[Any] = Result.from_success()


class Invoker:
    """
    Compiled adapter bound to exactly one handler descriptor.

    Invokers are immutable and hold no per-call state, so one instance can
    serve any number of concurrent dispatches.

    Attributes:
        descriptor: The descriptor this invoker was compiled from
    """

    __slots__ = ("_descriptor", "_invoke")

    def __init__(self, descriptor: HandlerDescriptor, invoke: InvokeFunc) -> None:
        self._descriptor = descriptor
        self._invoke = invoke

    @property
    def descriptor(self) -> HandlerDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        """The responder's descriptive name."""
        return self._descriptor.handler_name

    @property
    def event_type(self) -> type[GatewayEvent]:
        return self._descriptor.event_type

    def __call__(
        self,
        event: GatewayEvent,
        resolver: DependencyResolver,
        cancellation_token: CancellationToken,
    ) -> Awaitable[Result[Any]]:
        return self._invoke(event, resolver, cancellation_token)

    def __repr__(self) -> str:
        return f"Invoker({self.name} -> {self.event_type.__name__})"


def compile_invoker(descriptor: HandlerDescriptor, resolver: DependencyResolver) -> Invoker:
    """
    Compile ``descriptor`` into an Invoker.

    Args:
        descriptor: A validated handler descriptor
        resolver: The resolver the invoker will be dispatched with; every
            dependency parameter must be resolvable by it

    Returns:
        The compiled Invoker

    Raises:
        CompileError: If ``resolver`` cannot supply a dependency parameter
    """
    for slot in descriptor.dependency_slots:
        if not resolver.can_resolve(slot.annotation):
            raise CompileError(descriptor.handler_name, slot.name, slot.annotation)

    build_arguments = _compile_argument_builder(descriptor)
    coerce = _COERCERS[descriptor.return_shape]
    handler = descriptor.handler
    handler_name = descriptor.handler_name
    event_type = descriptor.event_type

    if descriptor.is_async:

        async def call(arguments: tuple[Any, ...]) -> Result[Any]:
            return coerce(await handler(*arguments), handler_name)

    else:

        async def call(arguments: tuple[Any, ...]) -> Result[Any]:
            return coerce(handler(*arguments), handler_name)

    async def invoke(
        event: GatewayEvent,
        resolver: DependencyResolver,
        cancellation_token: CancellationToken,
    ) -> Result[Any]:
        if not isinstance(event, event_type):
            logger.debug(
                "Skipping %s: %s is not a %s",
                handler_name,
                type(event).__name__,
                event_type.__name__,
            )
            return _SUCCESS

        try:
            arguments = build_arguments(event, resolver, cancellation_token)
        except Exception as e:
            return _fault(handler_name, event, e, "resolving dependencies for")

        try:
            return await call(arguments)
        except Exception as e:
            return _fault(handler_name, event, e, "running")

    logger.debug(
        "Compiled invoker for %s (%s, async=%s)",
        handler_name,
        descriptor.return_shape.value,
        descriptor.is_async,
        extra={"handler": handler_name, "event_type": event_type.__name__},
    )
    return Invoker(descriptor, invoke)


def _compile_argument_builder(descriptor: HandlerDescriptor) -> ArgumentBuilder:
    dependency_types = tuple(slot.annotation for slot in descriptor.dependency_slots)

    if descriptor.has_cancellation_slot:
        if not dependency_types:
            return lambda event, resolver, ct: (event, ct)

        def build_with_token(
            event: GatewayEvent, resolver: DependencyResolver, ct: CancellationToken
        ) -> tuple[Any, ...]:
            return (event, *[resolver.resolve(t) for t in dependency_types], ct)

        return build_with_token

    if not dependency_types:
        return lambda event, resolver, ct: (event,)

    def build(
        event: GatewayEvent, resolver: DependencyResolver, ct: CancellationToken
    ) -> tuple[Any, ...]:
        return (event, *[resolver.resolve(t) for t in dependency_types])

    return build


def _to_success(value: Any, handler_name: str) -> Result[Any]:
    return _SUCCESS


def _pass_through(value: Any, handler_name: str) -> Result[Any]:
    if isinstance(value, Result):
        return value
    raise TypeError(
        f"Responder {handler_name} is declared to return a Result "
        f"but returned {type(value).__name__}"
    )


_COERCERS: dict[ReturnShape, Coercer] = {
    ReturnShape.NONE: _to_success,
    ReturnShape.SUCCESS: _to_success,
    ReturnShape.RESULT: _pass_through,
}


def _fault(handler_name: str, event: GatewayEvent, error: Exception, stage: str) -> Result[Any]:
    logger.error(
        f"Responder {handler_name} raised while {stage} {type(event).__name__}: {error}",
        exc_info=True,
        extra={
            "handler": handler_name,
            "event_type": type(event).__name__,
            "event_id": str(event.event_id),
            "error": str(error),
        },
    )
    return Result.from_error(HandlerFault.from_exception(error))


__all__ = ["Invoker", "compile_invoker"]
