"""Library exceptions for the delegatedispatch package."""

from typing import Any


class DelegateDispatchError(Exception):
    """Base exception for delegatedispatch library."""

    pass


class HandlerValidationError(DelegateDispatchError, ValueError):
    """
    Raised when a delegate responder cannot be registered.

    This is a configuration error: the callable's shape is unsupported, or
    the registry has already been sealed. It is raised synchronously from
    the registration call and never at dispatch time.

    Attributes:
        reason: Short description of what is wrong
        handler_name: Name of the offending callable (if known)
        event_type: The event type the callable was registered for (if known)

    Example:
        >>> def bad(event: OrderCreated) -> int:
        ...     return 1
        >>> registry.register(OrderCreated, bad)
        Traceback (most recent call last):
        ...
        HandlerValidationError: Cannot register responder 'bad' for OrderCreated: ...
    """

    def __init__(
        self,
        reason: str,
        *,
        handler_name: str | None = None,
        event_type: type | None = None,
    ) -> None:
        self.reason = reason
        self.handler_name = handler_name
        self.event_type = event_type

        if handler_name is None:
            message = reason
        else:
            event_name = event_type.__name__ if event_type is not None else "?"
            message = f"Cannot register responder '{handler_name}' for {event_name}: {reason}"

        super().__init__(message)


class CompileError(DelegateDispatchError):
    """
    Raised when a validated descriptor cannot be compiled into an invoker.

    The typical cause is a dependency parameter whose type the configured
    resolver has no provider for. Such a responder could never run, so the
    error is surfaced while building the dispatch table.

    Attributes:
        handler_name: Name of the responder being compiled
        parameter_name: Name of the unresolvable parameter
        dependency_type: The annotation the resolver could not supply
    """

    def __init__(self, handler_name: str, parameter_name: str, dependency_type: Any) -> None:
        self.handler_name = handler_name
        self.parameter_name = parameter_name
        self.dependency_type = dependency_type
        type_name = getattr(dependency_type, "__name__", repr(dependency_type))
        super().__init__(
            f"Cannot compile responder '{handler_name}': no provider for "
            f"parameter '{parameter_name}' of type {type_name}"
        )


class BuildError(DelegateDispatchError):
    """
    Raised when the dispatch table cannot be built.

    The whole build is aborted; no partial table is ever returned. The
    underlying CompileError is chained as ``__cause__`` and kept in ``errors``.
    """

    def __init__(self, message: str, errors: list[CompileError] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)


class DependencyNotFoundError(DelegateDispatchError, LookupError):
    """Raised when a dependency resolver has no provider for a type."""

    def __init__(self, dependency_type: Any) -> None:
        self.dependency_type = dependency_type
        type_name = getattr(dependency_type, "__name__", repr(dependency_type))
        super().__init__(f"No service registered for type {type_name}")


class OperationCancelledError(DelegateDispatchError):
    """Raised by CancellationToken.raise_if_cancellation_requested()."""

    def __init__(self) -> None:
        super().__init__("The operation was cancelled")


__all__ = [
    "DelegateDispatchError",
    "HandlerValidationError",
    "CompileError",
    "BuildError",
    "DependencyNotFoundError",
    "OperationCancelledError",
]
