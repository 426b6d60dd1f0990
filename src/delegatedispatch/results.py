"""
Result types shared by every delegate responder.

A responder may return nothing, the plain ``SUCCESS`` signal, or a
``Result``; whatever it returns is coerced into a ``Result`` before it leaves
its invoker. The dispatcher then folds all results for one event into a
``DispatchResult``.

Example:
    >>> def check_name(event: MemberJoined) -> Result[None]:
    ...     if not event.username:
    ...         return Result.from_error(ResultError("missing username"))
    ...     return Result.from_success()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ResultError:
    """
    A deliberate, expected failure payload.

    Subclass it to carry extra detail; the dispatcher only relies on
    ``message``.

    Attributes:
        message: Human readable description of the failure
    """

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HandlerFault(ResultError):
    """
    Failure payload produced when a responder raises instead of returning.

    The exception is caught at the invoker boundary and carried here so a
    single faulty responder never aborts the remaining ones.

    Attributes:
        exception: The exception raised by the responder
    """

    exception: BaseException | None = field(default=None, compare=False)

    @classmethod
    def from_exception(cls, exception: BaseException) -> HandlerFault:
        """Build a fault payload describing ``exception``."""
        return cls(message=f"{type(exception).__name__}: {exception}", exception=exception)


@dataclass(frozen=True)
class AggregateError(ResultError):
    """Failure payload wrapping several failures, in order."""

    errors: tuple[ResultError, ...] = ()


class Success:
    """Plain success signal with no payload. Return the ``SUCCESS`` instance."""

    _instance: Success | None = None

    def __new__(cls) -> Success:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SUCCESS"


SUCCESS = Success()


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Uniform outcome of a responder invocation.

    A successful result may carry an arbitrary ``value``; the dispatcher
    never looks at it. A failed result carries a ``ResultError``.

    Use the ``from_success`` and ``from_error`` constructors rather than
    building instances directly.
    """

    is_success: bool
    value: T | None = None
    error: ResultError | None = None

    def __post_init__(self) -> None:
        if self.is_success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.is_success and self.error is None:
            raise ValueError("A failed result must carry an error")

    @classmethod
    def from_success(cls, value: T | None = None) -> Result[T]:
        """Create a successful result, optionally carrying a value."""
        return cls(is_success=True, value=value)

    @classmethod
    def from_error(cls, error: ResultError | str) -> Result[T]:
        """Create a failed result. A plain string is wrapped in ResultError."""
        if isinstance(error, str):
            error = ResultError(error)
        return cls(is_success=False, error=error)


@dataclass(frozen=True)
class DispatchResult:
    """
    Combined outcome of every responder run for one event.

    Attributes:
        errors: Failure payloads, in responder registration order
        handler_count: Number of invokers that ran for the event
    """

    errors: tuple[ResultError, ...] = ()
    handler_count: int = 0

    @property
    def is_success(self) -> bool:
        """True when no responder failed."""
        return not self.errors

    def to_result(self) -> Result[Any]:
        """
        Fold this aggregate into a single Result.

        Returns success when there are no errors, the lone error when exactly
        one responder failed, and an AggregateError otherwise.
        """
        if not self.errors:
            return Result.from_success()
        if len(self.errors) == 1:
            return Result.from_error(self.errors[0])
        return Result.from_error(
            AggregateError(
                message=f"{len(self.errors)} responders failed",
                errors=self.errors,
            )
        )


__all__ = [
    "AggregateError",
    "DispatchResult",
    "HandlerFault",
    "Result",
    "ResultError",
    "SUCCESS",
    "Success",
]
