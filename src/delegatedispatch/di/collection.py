"""
Service collection: the setup-time registration surface.

Services and delegate responders are registered on a ``ServiceCollection``;
``build_service_provider`` then finalizes everything at once. Finalizing
seals the responder registry and builds the dispatch table against the new
provider, so a responder whose dependencies cannot be resolved stops the
application from starting instead of failing on its first event.

Example:
    >>> services = ServiceCollection()
    >>> services.add_singleton(Greeter, Greeter())
    >>> services.add_delegate_responders()
    >>> services.add_delegate_responder(MemberJoined, welcome)
    >>>
    >>> provider = services.build_service_provider()
    >>> dispatcher = provider.get_required_service(DelegateDispatcher)
    >>> await dispatcher.dispatch(MemberJoined(guild_id=1, user_id=2))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from delegatedispatch.dispatch.dispatcher import DelegateDispatcher, DispatcherConfig
from delegatedispatch.dispatch.table import DispatchTable
from delegatedispatch.di.provider import (
    ServiceFactory,
    ServiceLifetime,
    ServiceProvider,
    ServiceRegistration,
)
from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.exceptions import DelegateDispatchError
from delegatedispatch.handlers.registry import ResponderRegistry
from delegatedispatch.observability import Tracer

logger = logging.getLogger(__name__)


class ServiceCollection:
    """
    Collects service and responder registrations before the provider exists.

    All ``add_*`` methods return the collection so calls can be chained.
    Once ``build_service_provider`` has run, further service registrations
    raise ``DelegateDispatchError`` and further responder registrations
    raise ``HandlerValidationError("registry sealed")``.
    """

    def __init__(self) -> None:
        self._registrations: dict[Any, ServiceRegistration] = {}
        self._responders = ResponderRegistry()
        self._dispatcher_enabled = False
        self._dispatcher_config: DispatcherConfig | None = None
        self._tracer: Tracer | None = None
        self._built = False

    @property
    def responders(self) -> ResponderRegistry:
        """The registry receiving delegate responders."""
        return self._responders

    @property
    def is_built(self) -> bool:
        return self._built

    def add_singleton(
        self,
        service_type: Any,
        instance: Any = None,
        *,
        factory: ServiceFactory | None = None,
    ) -> ServiceCollection:
        """
        Register a singleton service.

        Args:
            service_type: Key the service is resolved by
            instance: A ready-made instance
            factory: Called once, lazily, with the provider

        Raises:
            ValueError: If neither or both of instance and factory are given
        """
        if (instance is None) == (factory is None):
            raise ValueError("Pass exactly one of instance or factory")
        return self._add(
            ServiceRegistration(service_type, ServiceLifetime.SINGLETON, instance, factory)
        )

    def add_transient(self, service_type: Any, factory: ServiceFactory) -> ServiceCollection:
        """Register a service created anew, with ``factory``, on every resolution."""
        return self._add(ServiceRegistration(service_type, ServiceLifetime.TRANSIENT, factory=factory))

    def add_delegate_responder(
        self,
        event_type: type[GatewayEvent],
        responder: Callable[..., Any],
    ) -> ServiceCollection:
        """
        Add a delegate-based responder for ``event_type``.

        The responder's shape is validated immediately; whether its
        dependencies can be resolved is checked when the provider is built.

        Raises:
            HandlerValidationError: If the responder is invalid or the
                collection has already been built
        """
        self._responders.register(event_type, responder)
        return self

    def add_delegate_responders(
        self,
        config: DispatcherConfig | None = None,
        *,
        tracer: Tracer | None = None,
    ) -> ServiceCollection:
        """
        Register the DelegateDispatcher service that invokes delegate responders.

        Args:
            config: Dispatcher configuration
            tracer: Optional custom tracer for the dispatcher
        """
        self._ensure_not_built()
        self._dispatcher_enabled = True
        self._dispatcher_config = config
        self._tracer = tracer
        return self

    def build_service_provider(self) -> ServiceProvider:
        """
        Finalize the collection and create the provider.

        Returns:
            ServiceProvider resolving every registered service, plus the
            DispatchTable and (if enabled) the DelegateDispatcher

        Raises:
            BuildError: If a responder depends on an unregistered service
            DelegateDispatchError: If the collection was already built
        """
        self._ensure_not_built()
        self._built = True

        provider = ServiceProvider(self._registrations)

        # Responders may depend on these; they resolve only after `table` is built.
        def get_table(services: ServiceProvider) -> DispatchTable:
            return table

        provider._add(
            ServiceRegistration(DispatchTable, ServiceLifetime.SINGLETON, factory=get_table)
        )

        if self._dispatcher_enabled:
            config = self._dispatcher_config
            tracer = self._tracer

            def create_dispatcher(services: ServiceProvider) -> DelegateDispatcher:
                return DelegateDispatcher(table, services, config=config, tracer=tracer)

            provider._add(
                ServiceRegistration(
                    DelegateDispatcher, ServiceLifetime.SINGLETON, factory=create_dispatcher
                )
            )

        table = DispatchTable.build(self._responders, provider)

        logger.info(
            f"Built service provider with {len(self._registrations)} service(s) "
            f"and {len(self._responders)} delegate responder(s)",
            extra={
                "service_count": len(self._registrations),
                "responder_count": len(self._responders),
            },
        )
        return provider

    def _add(self, registration: ServiceRegistration) -> ServiceCollection:
        self._ensure_not_built()
        if registration.service_type in self._registrations:
            logger.debug(
                "Replacing registration for %s",
                getattr(registration.service_type, "__name__", registration.service_type),
            )
        self._registrations[registration.service_type] = registration
        return self

    def _ensure_not_built(self) -> None:
        if self._built:
            raise DelegateDispatchError("The service collection has already been built")


__all__ = ["ServiceCollection"]
