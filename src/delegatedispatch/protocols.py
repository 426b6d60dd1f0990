"""
Canonical protocol definitions for the delegatedispatch library.

Protocols:
- DependencyResolver: Supplies values for a responder's dependency parameters

The dispatch engine never assumes a concrete container. Anything with
``resolve`` and ``can_resolve`` can back a dispatcher, including the bundled
``ServiceProvider``.

Example:
    >>> class DictResolver:
    ...     def __init__(self, services: dict[type, object]) -> None:
    ...         self._services = services
    ...
    ...     def resolve(self, dependency_type: Any) -> Any:
    ...         try:
    ...             return self._services[dependency_type]
    ...         except KeyError:
    ...             raise DependencyNotFoundError(dependency_type) from None
    ...
    ...     def can_resolve(self, dependency_type: Any) -> bool:
    ...         return dependency_type in self._services
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DependencyResolver(Protocol):
    """
    Protocol for dependency resolvers.

    ``resolve`` is queried once per dependency parameter per invocation, so
    implementations must be safe for concurrent read-only use. The dispatch
    engine never caches resolved values; any scoping is the resolver's
    business.
    """

    def resolve(self, dependency_type: Any) -> Any:
        """
        Return an instance for ``dependency_type``.

        Args:
            dependency_type: The annotation of the dependency parameter

        Raises:
            DependencyNotFoundError: If no provider exists for the type
        """
        ...

    def can_resolve(self, dependency_type: Any) -> bool:
        """
        Check whether ``dependency_type`` has a provider.

        Used while building the dispatch table so that unresolvable
        responders are rejected before any event is dispatched.
        """
        ...


__all__ = ["DependencyResolver"]
