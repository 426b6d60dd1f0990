"""
Observability utilities for delegatedispatch.

This module provides the composition-based Tracer used by the dispatcher and
the standard span attribute names.

Note:
    OpenTelemetry is an optional dependency (``pip install
    delegate-dispatch[telemetry]``). Everything here works without it; the
    tracer then degrades to a no-op.
"""

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
from delegatedispatch.observability.tracer import (
    OTEL_AVAILABLE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanAttributes,
    SpanKindEnum,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer (composition-based API)
    "OTEL_AVAILABLE",
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "SpanAttributes",
    "SpanKindEnum",
    "create_tracer",
    # Attributes
    "ATTR_EVENT_ID",
    "ATTR_EVENT_TYPE",
    "ATTR_HANDLER_NAME",
    "ATTR_HANDLER_COUNT",
    "ATTR_HANDLER_SUCCESS",
    "ATTR_FAILURE_COUNT",
    "ATTR_EXECUTION_MODE",
    "ATTR_ERROR_TYPE",
]
