"""
Dispatch table: the sealed mapping from event type to compiled invokers.

The table is built exactly once, during startup, from a responder registry.
Building seals the registry, compiles every descriptor and groups the
resulting invokers by event type in registration order. A single compile
failure aborts the whole build; a partially built table is never returned.
"""

import logging
from collections.abc import Iterator
from types import MappingProxyType

from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.exceptions import BuildError, CompileError
from delegatedispatch.handlers.compiler import Invoker, compile_invoker
from delegatedispatch.handlers.registry import ResponderRegistry
from delegatedispatch.protocols import DependencyResolver

logger = logging.getLogger(__name__)


class DispatchTable:
    """
    Immutable mapping of event types to ordered invoker sequences.

    Only event types with at least one responder have an entry. The table is
    read-only after construction and safe for unsynchronized concurrent
    reads. It remembers the resolver it was compiled against so a
    dispatcher can default to it.

    Example:
        >>> table = DispatchTable.build(registry, provider)
        >>> table.get_invokers(MemberJoined)
        (Invoker(welcome -> MemberJoined),)
    """

    __slots__ = ("_entries", "_resolver")

    def __init__(
        self,
        entries: dict[type[GatewayEvent], tuple[Invoker, ...]],
        resolver: DependencyResolver,
    ) -> None:
        self._entries = MappingProxyType(
            {event_type: tuple(invokers) for event_type, invokers in entries.items() if invokers}
        )
        self._resolver = resolver

    @classmethod
    def build(
        cls,
        registry: ResponderRegistry,
        resolver: DependencyResolver,
    ) -> "DispatchTable":
        """
        Seal ``registry`` and compile all of its responders.

        Args:
            registry: The registry holding the responder descriptors
            resolver: Resolver the table will dispatch with; dependency
                parameters are checked against it

        Returns:
            The built DispatchTable

        Raises:
            BuildError: If any responder fails to compile
        """
        registry.seal()

        entries: dict[type[GatewayEvent], list[Invoker]] = {}
        for descriptor in registry.descriptors():
            try:
                invoker = compile_invoker(descriptor, resolver)
            except CompileError as e:
                logger.error(
                    f"Dispatch table build aborted: {e}",
                    extra={
                        "handler": e.handler_name,
                        "parameter": e.parameter_name,
                        "event_type": descriptor.event_type.__name__,
                    },
                )
                raise BuildError(f"Cannot build dispatch table: {e}", [e]) from e
            entries.setdefault(descriptor.event_type, []).append(invoker)

        table = cls(
            {event_type: tuple(invokers) for event_type, invokers in entries.items()},
            resolver,
        )
        logger.info(
            f"Built dispatch table with {table.invoker_count} invoker(s) "
            f"for {len(table)} event type(s)",
            extra={"event_type_count": len(table), "invoker_count": table.invoker_count},
        )
        return table

    @property
    def resolver(self) -> DependencyResolver:
        """The resolver every dependency was checked against at build time."""
        return self._resolver

    def check_resolver(self, resolver: DependencyResolver) -> None:
        """
        Verify that ``resolver`` can supply every dependency in the table.

        Used when a dispatcher is given a resolver other than the one the
        table was built with.

        Raises:
            BuildError: If any dependency parameter cannot be resolved
        """
        if resolver is self._resolver:
            return

        errors = [
            CompileError(invoker.name, slot.name, slot.annotation)
            for invokers in self._entries.values()
            for invoker in invokers
            for slot in invoker.descriptor.dependency_slots
            if not resolver.can_resolve(slot.annotation)
        ]
        if errors:
            raise BuildError(
                f"Resolver cannot supply {len(errors)} responder dependency(ies): {errors[0]}",
                errors,
            )

    def get_invokers(self, event_type: type[GatewayEvent]) -> tuple[Invoker, ...]:
        """Return invokers for ``event_type`` (empty tuple when none)."""
        return self._entries.get(event_type, ())

    @property
    def event_types(self) -> list[type[GatewayEvent]]:
        """Event types with at least one invoker."""
        return list(self._entries.keys())

    @property
    def invoker_count(self) -> int:
        """Total number of invokers across all event types."""
        return sum(len(invokers) for invokers in self._entries.values())

    def __contains__(self, event_type: object) -> bool:
        return event_type in self._entries

    def __iter__(self) -> Iterator[type[GatewayEvent]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DispatchTable(event_types={len(self)}, invokers={self.invoker_count})"


__all__ = ["DispatchTable"]
