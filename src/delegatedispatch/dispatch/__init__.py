"""
Dispatch table and dispatcher.

Example:
    >>> from delegatedispatch.dispatch import DelegateDispatcher, DispatchTable
    >>>
    >>> table = DispatchTable.build(registry, provider)
    >>> dispatcher = DelegateDispatcher(table, provider)
    >>> await dispatcher.dispatch(event)
"""

from delegatedispatch.dispatch.dispatcher import (
    DelegateDispatcher,
    DispatcherConfig,
    ExecutionMode,
)
from delegatedispatch.dispatch.table import DispatchTable

__all__ = [
    "DelegateDispatcher",
    "DispatchTable",
    "DispatcherConfig",
    "ExecutionMode",
]
