"""
Shared pytest fixtures for observability integration tests.

Spans produced through the real OpenTelemetry SDK are captured with an
in-memory span exporter so tests can inspect names, kinds, attributes and
parent/child relationships.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

# Module-level storage for the global test provider
_test_provider = None


@pytest.fixture(scope="session")
def setup_test_tracing() -> Generator[Any, None, None]:
    """
    Set up a global TracerProvider once per test session.

    OpenTelemetry only allows the global provider to be set once, so an
    existing SDK provider is reused.
    """
    global _test_provider

    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider

    current_provider = trace.get_tracer_provider()

    if current_provider.__class__.__name__ == "ProxyTracerProvider":
        _test_provider = TracerProvider()
        trace.set_tracer_provider(_test_provider)
    else:
        _test_provider = current_provider

    yield _test_provider


@pytest.fixture
def trace_exporter(setup_test_tracing: Any) -> Generator[Any, None, None]:
    """
    In-memory span exporter attached to the session provider.

    Processors cannot be detached from a provider, so the exporter is
    cleared after each test instead.
    """
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import SimpleSpanProcessor
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

    exporter = InMemorySpanExporter()

    if isinstance(_test_provider, TracerProvider):
        _test_provider.add_span_processor(SimpleSpanProcessor(exporter))

    yield exporter

    exporter.clear()


@pytest.fixture
def find_spans(trace_exporter: Any) -> Callable[[str], list[Any]]:
    """
    Return a helper listing finished spans whose name contains a substring.

    Example:
        >>> def test_handle_spans(find_spans):
        ...     assert len(find_spans("delegatedispatch.handle")) == 2
    """

    def _find_spans(name_contains: str) -> list[Any]:
        return [s for s in trace_exporter.get_finished_spans() if name_contains in s.name]

    return _find_spans
