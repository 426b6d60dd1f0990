"""
Pluggable span creation for the dispatcher.

The dispatcher never imports OpenTelemetry itself. It is handed a ``Tracer``
and opens two kinds of span through it: one CONSUMER span per dispatched
event and one INTERNAL span per responder run. OpenTelemetry is optional;
without it (or with tracing switched off) ``create_tracer`` returns a tracer
whose spans are empty contexts.

Example:
    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>> with tracer.span_with_kind("gateway.receive", SpanKindEnum.CONSUMER) as span:
    ...     if span:
    ...         span.set_attribute("gateway.shard", 0)
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextlib import AbstractContextManager
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from opentelemetry.trace import Span

try:
    import opentelemetry.trace  # noqa: F401

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False

SpanAttributes = dict[str, Any]


class SpanKindEnum(Enum):
    """Role of a span; the names match OpenTelemetry's ``SpanKind`` members."""

    INTERNAL = "internal"
    CONSUMER = "consumer"


@runtime_checkable
class Tracer(Protocol):
    """Anything that can open spans for the dispatcher."""

    @property
    def enabled(self) -> bool:
        """Whether spans opened by this tracer are recorded anywhere."""
        ...

    def span(
        self, name: str, attributes: SpanAttributes | None = None
    ) -> AbstractContextManager[Span | None]:
        """Open an INTERNAL span. The context yields the span, or None."""
        ...

    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[Span | None]:
        """Open a span of the given kind. The context yields the span, or None."""
        ...


class NullTracer:
    """Tracer used when tracing is off. Every span is an empty context."""

    @property
    def enabled(self) -> bool:
        return False

    def span(
        self, name: str, attributes: SpanAttributes | None = None
    ) -> AbstractContextManager[None]:
        return contextlib.nullcontext()

    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[None]:
        return contextlib.nullcontext()


class OpenTelemetryTracer:
    """
    Opens spans on an OpenTelemetry tracer named ``tracer_name``.

    Spans become current for the duration of the ``with`` block, so responder
    spans nest under the dispatch span that encloses them.

    Raises:
        ImportError: If OpenTelemetry is not installed
    """

    def __init__(self, tracer_name: str) -> None:
        from opentelemetry import trace

        self._tracer = trace.get_tracer(tracer_name)

    @property
    def enabled(self) -> bool:
        return True

    def span(
        self, name: str, attributes: SpanAttributes | None = None
    ) -> AbstractContextManager[Span]:
        return self.span_with_kind(name, SpanKindEnum.INTERNAL, attributes)

    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[Span]:
        from opentelemetry.trace import SpanKind

        return self._tracer.start_as_current_span(
            name,
            kind=SpanKind[kind.name],
            attributes=attributes or {},
        )


class MockTracer:
    """
    Records every span opened through it, for assertions in tests.

    Attributes:
        spans: ``(name, attributes)`` pairs in the order spans were opened
        kinds: Span name -> kind, for spans opened with ``span_with_kind``
    """

    def __init__(self) -> None:
        self.spans: list[tuple[str, SpanAttributes | None]] = []
        self.kinds: dict[str, SpanKindEnum] = {}

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        return [name for name, _ in self.spans]

    def clear(self) -> None:
        self.spans.clear()
        self.kinds.clear()

    @contextlib.contextmanager
    def span(self, name: str, attributes: SpanAttributes | None = None) -> Iterator[None]:
        self.spans.append((name, attributes))
        yield None

    @contextlib.contextmanager
    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: SpanAttributes | None = None,
    ) -> Iterator[None]:
        self.kinds[name] = kind
        with self.span(name, attributes):
            yield None


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """OpenTelemetryTracer when enabled and installed, NullTracer otherwise."""
    if enable_tracing and OTEL_AVAILABLE:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "OTEL_AVAILABLE",
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "SpanAttributes",
    "SpanKindEnum",
    "Tracer",
    "create_tracer",
]
