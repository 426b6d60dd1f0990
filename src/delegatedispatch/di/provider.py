"""
In-process service provider.

A small dependency container that satisfies the
``DependencyResolver`` protocol. Services are keyed by type and registered
either as singletons (one instance for the provider's lifetime) or
transients (a new instance on every resolution). Factories receive the
provider so they can resolve their own dependencies.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar, cast

from delegatedispatch.exceptions import DependencyNotFoundError
from delegatedispatch.protocols import DependencyResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

ServiceFactory = Callable[["ServiceProvider"], Any]


class ServiceLifetime(Enum):
    """How long a resolved service instance lives."""

    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class ServiceRegistration:
    """
    How to produce one service.

    Exactly one of ``instance`` or ``factory`` is set. Transient services
    always use a factory.
    """

    service_type: Any
    lifetime: ServiceLifetime
    instance: Any = None
    factory: ServiceFactory | None = None

    def __post_init__(self) -> None:
        if self.factory is None and self.instance is None:
            raise ValueError("A registration needs an instance or a factory")
        if self.lifetime is ServiceLifetime.TRANSIENT and self.factory is None:
            raise ValueError("Transient services must be registered with a factory")


class ServiceProvider:
    """
    Resolves services registered in a ServiceCollection.

    The provider resolves itself for ``ServiceProvider`` and
    ``DependencyResolver``.

    Thread Safety:
        Resolution is safe from any thread; lazily created singletons are
        created at most once.
    """

    def __init__(self, registrations: dict[Any, ServiceRegistration] | None = None) -> None:
        self._registrations: dict[Any, ServiceRegistration] = dict(registrations or {})
        self._singletons: dict[Any, Any] = {}
        self._lock = threading.RLock()

        for registration in self._registrations.values():
            if registration.lifetime is ServiceLifetime.SINGLETON and registration.factory is None:
                self._singletons[registration.service_type] = registration.instance

    def _add(self, registration: ServiceRegistration) -> None:
        """Add a registration while the owning collection finalizes the provider."""
        with self._lock:
            self._registrations[registration.service_type] = registration
            if registration.lifetime is ServiceLifetime.SINGLETON and registration.factory is None:
                self._singletons[registration.service_type] = registration.instance

    def can_resolve(self, dependency_type: Any) -> bool:
        """Whether a provider exists for ``dependency_type``."""
        return dependency_type in (ServiceProvider, DependencyResolver) or (
            dependency_type in self._registrations
        )

    def resolve(self, dependency_type: Any) -> Any:
        """
        Resolve an instance of ``dependency_type``.

        Raises:
            DependencyNotFoundError: If the type is not registered
        """
        if dependency_type in (ServiceProvider, DependencyResolver):
            return self

        registration = self._registrations.get(dependency_type)
        if registration is None:
            raise DependencyNotFoundError(dependency_type)

        if registration.lifetime is ServiceLifetime.TRANSIENT:
            assert registration.factory is not None
            return registration.factory(self)

        if dependency_type in self._singletons:
            return self._singletons[dependency_type]

        with self._lock:
            if dependency_type not in self._singletons:
                assert registration.factory is not None
                self._singletons[dependency_type] = registration.factory(self)
                logger.debug(
                    "Created singleton %s",
                    getattr(dependency_type, "__name__", dependency_type),
                )
            return self._singletons[dependency_type]

    def get_service(self, service_type: type[T]) -> T | None:
        """Resolve ``service_type`` or return None if it is not registered."""
        if not self.can_resolve(service_type):
            return None
        return cast(T, self.resolve(service_type))

    def get_required_service(self, service_type: type[T]) -> T:
        """
        Resolve ``service_type``.

        Raises:
            DependencyNotFoundError: If the type is not registered
        """
        return cast(T, self.resolve(service_type))

    def __repr__(self) -> str:
        return f"ServiceProvider(services={len(self._registrations)})"


__all__ = [
    "ServiceFactory",
    "ServiceLifetime",
    "ServiceProvider",
    "ServiceRegistration",
]
