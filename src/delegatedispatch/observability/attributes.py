"""
Standard span attributes for delegatedispatch.

These constants keep span attribute names consistent between the dispatcher
and any custom tracer implementation.

Example:
    >>> from delegatedispatch.observability.attributes import (
    ...     ATTR_EVENT_TYPE,
    ...     ATTR_HANDLER_NAME,
    ... )
    >>>
    >>> with tracer.span(
    ...     "delegatedispatch.handle",
    ...     {ATTR_EVENT_TYPE: "MemberJoined", ATTR_HANDLER_NAME: "welcome"},
    ... ):
    ...     pass
"""

# =============================================================================
# Event Attributes
# =============================================================================

ATTR_EVENT_ID = "delegatedispatch.event.id"
"""Unique identifier for the event (UUID string)."""

ATTR_EVENT_TYPE = "delegatedispatch.event.type"
"""Class name of the dispatched event (e.g., 'MessageCreated')."""

# =============================================================================
# Handler Attributes
# =============================================================================

ATTR_HANDLER_NAME = "delegatedispatch.handler.name"
"""Name of the responder being invoked (string)."""

ATTR_HANDLER_COUNT = "delegatedispatch.handler.count"
"""Number of responders matched for an event (integer)."""

ATTR_HANDLER_SUCCESS = "delegatedispatch.handler.success"
"""Whether the responder returned a successful result (boolean)."""

# =============================================================================
# Dispatch Attributes
# =============================================================================

ATTR_FAILURE_COUNT = "delegatedispatch.dispatch.failure_count"
"""Number of failed responders for one dispatched event (integer)."""

ATTR_EXECUTION_MODE = "delegatedispatch.dispatch.execution_mode"
"""Either 'sequential' or 'concurrent' (string)."""

ATTR_ERROR_TYPE = "error.type"
"""Type of the failure payload returned by a responder (string)."""

__all__ = [
    "ATTR_EVENT_ID",
    "ATTR_EVENT_TYPE",
    "ATTR_HANDLER_NAME",
    "ATTR_HANDLER_COUNT",
    "ATTR_HANDLER_SUCCESS",
    "ATTR_FAILURE_COUNT",
    "ATTR_EXECUTION_MODE",
    "ATTR_ERROR_TYPE",
]
