"""
Delegate dispatcher: runs every responder registered for an event.

The dispatcher is the runtime entry point a transport calls for each
incoming event. It looks the event's exact type up in the dispatch table,
runs the matched invokers in registration order and folds their results
into one ``DispatchResult``.

Handler failures never escape ``dispatch``: failure results and faults
raised by responders are collected, logged and returned. Callers must
inspect the returned result to learn whether anything failed.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Literal

from delegatedispatch.cancellation import CancellationToken
from delegatedispatch.dispatch.table import DispatchTable
from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.handlers.compiler import Invoker
from delegatedispatch.observability import SpanKindEnum, Tracer, create_tracer
from delegatedispatch.observability.attributes import (
    ATTR_ERROR_TYPE,
    ATTR_EVENT_ID,
    ATTR_EVENT_TYPE,
    ATTR_EXECUTION_MODE,
    ATTR_FAILURE_COUNT,
    ATTR_HANDLER_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
)
from delegatedispatch.protocols import DependencyResolver
from delegatedispatch.results import DispatchResult, HandlerFault, Result, ResultError

logger = logging.getLogger(__name__)

ExecutionMode = Literal["sequential", "concurrent"]


@dataclass
class DispatcherConfig:
    """Configuration for DelegateDispatcher.

    Attributes:
        execution_mode: "sequential" runs responders one after another in
            registration order (default). "concurrent" runs them as
            concurrent tasks; failures are still reported in registration
            order.
        enable_tracing: Enable OpenTelemetry tracing if available (default: True)
        log_failures: Log a warning for each failed result (default: True)
    """

    execution_mode: ExecutionMode = "sequential"
    enable_tracing: bool = True
    log_failures: bool = True

    def __post_init__(self) -> None:
        if self.execution_mode not in ("sequential", "concurrent"):
            raise ValueError(
                f"execution_mode must be 'sequential' or 'concurrent', got {self.execution_mode!r}"
            )


class DelegateDispatcher:
    """
    Dispatches events to compiled delegate responders.

    Features:
    - Exact-type matching against an immutable dispatch table
    - Sequential execution in registration order (or opt-in concurrency)
    - Error isolation (one responder's failure doesn't stop the others)
    - Dependencies resolved fresh for every invocation
    - Optional OpenTelemetry tracing

    Example:
        >>> dispatcher = DelegateDispatcher(table, provider)
        >>> result = await dispatcher.dispatch(MemberJoined(guild_id=1, user_id=2))
        >>> result.is_success
        True

    Limitations:
        Cancellation is advisory. The token is handed to responders that
        declare it, but the dispatcher keeps running the remaining
        responders after it is cancelled.

    Thread Safety:
        The statistics counters are the only state shared between
        dispatches and are updated under a lock.
    """

    def __init__(
        self,
        table: DispatchTable,
        resolver: DependencyResolver | None = None,
        *,
        config: DispatcherConfig | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            table: The sealed dispatch table
            resolver: Resolver queried for responder dependencies on each call.
                Defaults to the resolver the table was built with; any other
                resolver must be able to supply every dependency in the table.
            config: Dispatcher configuration (defaults to DispatcherConfig())
            tracer: Optional custom Tracer instance. If not provided, one is
                created based on config.enable_tracing.

        Raises:
            BuildError: If ``resolver`` cannot supply a responder dependency
        """
        if resolver is None:
            resolver = table.resolver
        else:
            table.check_resolver(resolver)

        self._table = table
        self._resolver = resolver
        self._config = config or DispatcherConfig()
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._stats = {
            "events_dispatched": 0,
            "events_unhandled": 0,
            "handlers_invoked": 0,
            "handler_failures": 0,
            "handler_faults": 0,
        }
        self._stats_lock = threading.Lock()

    @property
    def table(self) -> DispatchTable:
        return self._table

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    async def dispatch(
        self,
        event: GatewayEvent,
        cancellation_token: CancellationToken | None = None,
    ) -> DispatchResult:
        """
        Dispatch one event to every responder registered for its type.

        Args:
            event: The incoming event
            cancellation_token: Token handed to responders that declare one.
                Defaults to a token that is never cancelled.

        Returns:
            DispatchResult with every failure, in registration order
        """
        token = cancellation_token if cancellation_token is not None else CancellationToken.none()
        event_type = type(event)
        invokers = self._table.get_invokers(event_type)
        self._count("events_dispatched")

        if not invokers:
            self._count("events_unhandled")
            logger.debug(
                f"No responders registered for event type: {event_type.__name__}",
                extra={"event_type": event_type.__name__},
            )
            return DispatchResult()

        logger.debug(
            f"Dispatching {event_type.__name__} to {len(invokers)} responder(s)",
            extra={
                "event_type": event_type.__name__,
                "event_id": str(event.event_id),
                "handler_count": len(invokers),
            },
        )

        with self._tracer.span_with_kind(
            "delegatedispatch.dispatch",
            SpanKindEnum.CONSUMER,
            {
                ATTR_EVENT_TYPE: event_type.__name__,
                ATTR_EVENT_ID: str(event.event_id),
                ATTR_HANDLER_COUNT: len(invokers),
                ATTR_EXECUTION_MODE: self._config.execution_mode,
            },
        ) as span:
            if self._config.execution_mode == "concurrent":
                results = await self._run_concurrently(invokers, event, token)
            else:
                results = await self._run_sequentially(invokers, event, token)

            errors = tuple(result.error for result in results if result.error is not None)
            if span:
                span.set_attribute(ATTR_FAILURE_COUNT, len(errors))

        return DispatchResult(errors=errors, handler_count=len(invokers))

    async def respond(
        self,
        event: GatewayEvent,
        cancellation_token: CancellationToken | None = None,
    ) -> Result[Any]:
        """
        Dispatch ``event`` and fold the outcome into a single Result.

        This is the responder-style surface for transports that expect one
        result per event. See ``DispatchResult.to_result``.
        """
        outcome = await self.dispatch(event, cancellation_token)
        return outcome.to_result()

    async def _run_sequentially(
        self,
        invokers: tuple[Invoker, ...],
        event: GatewayEvent,
        token: CancellationToken,
    ) -> list[Result[Any]]:
        results = []
        for invoker in invokers:
            results.append(await self._invoke(invoker, event, token))
        return results

    async def _run_concurrently(
        self,
        invokers: tuple[Invoker, ...],
        event: GatewayEvent,
        token: CancellationToken,
    ) -> list[Result[Any]]:
        # gather keeps positional order, so results line up with registration order
        return list(
            await asyncio.gather(*(self._invoke(invoker, event, token) for invoker in invokers))
        )

    async def _invoke(
        self,
        invoker: Invoker,
        event: GatewayEvent,
        token: CancellationToken,
    ) -> Result[Any]:
        """Run one invoker inside its own span and record statistics."""
        with self._tracer.span(
            "delegatedispatch.handle",
            {
                ATTR_EVENT_TYPE: type(event).__name__,
                ATTR_EVENT_ID: str(event.event_id),
                ATTR_HANDLER_NAME: invoker.name,
            },
        ) as span:
            result = await invoker(event, self._resolver, token)
            self._count("handlers_invoked")

            if span:
                span.set_attribute(ATTR_HANDLER_SUCCESS, result.is_success)

            if result.error is None:
                logger.debug(
                    f"Responder {invoker.name} processed {type(event).__name__}",
                    extra={
                        "handler": invoker.name,
                        "event_type": type(event).__name__,
                        "event_id": str(event.event_id),
                    },
                )
                return result

            self._record_failure(invoker, event, result.error)
            if span:
                span.set_attribute(ATTR_ERROR_TYPE, type(result.error).__name__)
            return result

    def _record_failure(self, invoker: Invoker, event: GatewayEvent, error: ResultError) -> None:
        if isinstance(error, HandlerFault):
            # the invoker already logged the traceback
            self._count("handler_faults")
            return

        self._count("handler_failures")
        if self._config.log_failures:
            logger.warning(
                f"Responder {invoker.name} failed processing {type(event).__name__}: {error}",
                extra={
                    "handler": invoker.name,
                    "event_type": type(event).__name__,
                    "event_id": str(event.event_id),
                    "error": str(error),
                },
            )

    def _count(self, stat: str) -> None:
        with self._stats_lock:
            self._stats[stat] += 1

    def get_stats(self) -> dict[str, int]:
        """
        Get statistics about dispatcher operation.

        Returns:
            Dictionary with counts:
            - events_dispatched: Total events received by dispatch()
            - events_unhandled: Events with no registered responder
            - handlers_invoked: Total invoker runs
            - handler_failures: Responders that returned a failed result
            - handler_faults: Responders that raised
        """
        with self._stats_lock:
            return dict(self._stats)


__all__ = ["DelegateDispatcher", "DispatcherConfig", "ExecutionMode"]
