"""
Service registration and resolution.

- ServiceCollection: setup-time registration surface for services and
  delegate responders
- ServiceProvider: DependencyResolver implementation produced by the collection
"""

from delegatedispatch.di.collection import ServiceCollection
from delegatedispatch.di.provider import (
    ServiceFactory,
    ServiceLifetime,
    ServiceProvider,
    ServiceRegistration,
)

__all__ = [
    "ServiceCollection",
    "ServiceFactory",
    "ServiceLifetime",
    "ServiceProvider",
    "ServiceRegistration",
]
