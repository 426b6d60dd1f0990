"""
Handler infrastructure for delegate responders.

This module provides:
- ResponderRegistry: Validates and accumulates responders per event type
- HandlerDescriptor: Validated shape of one registered responder
- describe_handler: Signature validation used by the registry
- compile_invoker / Invoker: Uniform adapters built from descriptors
- get_handler_name: Descriptive names for logs and spans

Example:
    >>> from delegatedispatch.handlers import ResponderRegistry, compile_invoker
    >>>
    >>> registry = ResponderRegistry()
    >>> descriptor = registry.register(MemberJoined, welcome)
    >>> invoker = compile_invoker(descriptor, provider)
"""

from delegatedispatch.handlers.adapter import get_handler_name
from delegatedispatch.handlers.compiler import Invoker, compile_invoker
from delegatedispatch.handlers.descriptor import (
    HandlerDescriptor,
    ParameterSlot,
    ReturnShape,
    SlotKind,
    describe_handler,
)
from delegatedispatch.handlers.registry import ResponderRegistry

__all__ = [
    "HandlerDescriptor",
    "Invoker",
    "ParameterSlot",
    "ResponderRegistry",
    "ReturnShape",
    "SlotKind",
    "compile_invoker",
    "describe_handler",
    "get_handler_name",
]
