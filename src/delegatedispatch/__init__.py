"""
delegatedispatch - Dynamic handler adaptation and dispatch for gateway events.

This library provides:
- Plain callables as event responders, validated by signature at registration
- Dependency parameters resolved from a pluggable resolver on every call
- Uniform Result handling for None, Success, Result and awaitable returns
- A sealed dispatch table built once at startup
- A dispatcher that isolates responder faults and reports every failure
- A small service collection/provider for wiring it all together
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("delegate-dispatch")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from delegatedispatch.cancellation import CancellationToken
from delegatedispatch.di import (
    ServiceCollection,
    ServiceLifetime,
    ServiceProvider,
)
from delegatedispatch.dispatch import (
    DelegateDispatcher,
    DispatcherConfig,
    DispatchTable,
    ExecutionMode,
)
from delegatedispatch.events import GatewayEvent
from delegatedispatch.exceptions import (
    BuildError,
    CompileError,
    DelegateDispatchError,
    DependencyNotFoundError,
    HandlerValidationError,
    OperationCancelledError,
)
from delegatedispatch.handlers import (
    HandlerDescriptor,
    Invoker,
    ParameterSlot,
    ResponderRegistry,
    ReturnShape,
    SlotKind,
    compile_invoker,
    describe_handler,
)
from delegatedispatch.protocols import DependencyResolver
from delegatedispatch.results import (
    SUCCESS,
    AggregateError,
    DispatchResult,
    HandlerFault,
    Result,
    ResultError,
    Success,
)

__all__ = [
    "__version__",
    # Events
    "GatewayEvent",
    # Results
    "Result",
    "ResultError",
    "HandlerFault",
    "AggregateError",
    "DispatchResult",
    "Success",
    "SUCCESS",
    # Cancellation
    "CancellationToken",
    # Handlers
    "ResponderRegistry",
    "HandlerDescriptor",
    "ParameterSlot",
    "SlotKind",
    "ReturnShape",
    "describe_handler",
    "compile_invoker",
    "Invoker",
    # Dispatch
    "DispatchTable",
    "DelegateDispatcher",
    "DispatcherConfig",
    "ExecutionMode",
    # Dependency resolution
    "DependencyResolver",
    "ServiceCollection",
    "ServiceProvider",
    "ServiceLifetime",
    # Exceptions
    "DelegateDispatchError",
    "HandlerValidationError",
    "CompileError",
    "BuildError",
    "DependencyNotFoundError",
    "OperationCancelledError",
]
