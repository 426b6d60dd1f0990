"""
Shared pytest fixtures for the delegatedispatch tests.

This module provides:
- Event fixtures (event_factory, message_event, member_event)
- Service fixtures (greeter, audit_log, resolver)
- Registry and tracer fixtures (registry, mock_tracer)
- OpenTelemetry availability check for tracing tests
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.handlers.registry import ResponderRegistry
from delegatedispatch.observability import MockTracer
from tests.fixtures import (
    AuditLog,
    DictResolver,
    Greeter,
    MemberJoined,
    MessageCreated,
    create_event,
)

# ============================================================================
# OpenTelemetry Availability Check
# ============================================================================

OTEL_SDK_AVAILABLE = False
try:
    from opentelemetry.sdk.trace import TracerProvider  # noqa: F401

    OTEL_SDK_AVAILABLE = True
except ImportError:
    pass


skip_if_no_otel_sdk = pytest.mark.skipif(
    not OTEL_SDK_AVAILABLE, reason="opentelemetry-sdk not installed"
)


# ============================================================================
# Event Fixtures
# ============================================================================


@pytest.fixture
def event_factory() -> Callable[..., GatewayEvent]:
    """
    Factory fixture for creating test events with sensible defaults.

    Example:
        def test_something(event_factory):
            event = event_factory(MemberJoined, user_id=7)
    """
    return create_event


@pytest.fixture
def message_event() -> MessageCreated:
    """A MessageCreated event with default fields."""
    return MessageCreated(content="hi there")


@pytest.fixture
def member_event() -> MemberJoined:
    """A MemberJoined event with default fields."""
    return MemberJoined(user_id=42, username="grace")


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def greeter() -> Greeter:
    return Greeter()


@pytest.fixture
def audit_log() -> AuditLog:
    return AuditLog()


@pytest.fixture
def resolver(greeter: Greeter, audit_log: AuditLog) -> DictResolver:
    """
    Resolver providing the greeter and audit_log fixtures.

    The same instances are returned by the fixtures, so tests can assert on
    what responders did with them.
    """
    return DictResolver({Greeter: greeter, AuditLog: audit_log})


# ============================================================================
# Registry and Tracer Fixtures
# ============================================================================


@pytest.fixture
def registry() -> ResponderRegistry:
    """A fresh, unsealed responder registry."""
    return ResponderRegistry()


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Tracer recording span names, attributes and kinds."""
    return MockTracer()
