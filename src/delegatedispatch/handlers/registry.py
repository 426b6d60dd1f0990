"""
Responder registry.

The registry accumulates validated handler descriptors per event type while
the application is being configured. Validation happens eagerly in
``register`` so that configuration mistakes surface at startup. Once sealed
(which ``DispatchTable.build`` does) the registry rejects further
registrations.

Example:
    >>> registry = ResponderRegistry()
    >>>
    >>> @registry.responder(MemberJoined)
    ... async def welcome(event: MemberJoined, greeter: Greeter) -> None:
    ...     await greeter.welcome(event.user_id)
    >>>
    >>> registry.event_types()
    [<class 'MemberJoined'>]
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from delegatedispatch.events.base import GatewayEvent
from delegatedispatch.exceptions import HandlerValidationError
from delegatedispatch.handlers.descriptor import HandlerDescriptor, describe_handler

logger = logging.getLogger(__name__)

# Preserves the exact type of the decorated function
F = TypeVar("F", bound=Callable[..., Any])


class ResponderRegistry:
    """
    Ordered, validating store of responder descriptors.

    Responsibilities:
    - Validate responder signatures at registration time
    - Keep descriptors per event type in registration order
    - Refuse registrations once sealed

    Thread Safety:
        Registration and sealing are guarded by a lock; registrations from
        several threads are ordered by lock acquisition.
    """

    def __init__(self) -> None:
        self._descriptors: dict[type[GatewayEvent], list[HandlerDescriptor]] = {}
        self._ordered: list[HandlerDescriptor] = []
        self._sealed = False
        self._lock = threading.RLock()

    def register(
        self,
        event_type: type[GatewayEvent],
        handler: Callable[..., Any],
    ) -> HandlerDescriptor:
        """
        Validate ``handler`` and append it to the responders of ``event_type``.

        Args:
            event_type: The GatewayEvent subclass to respond to
            handler: The responder callable

        Returns:
            The descriptor built for the handler

        Raises:
            HandlerValidationError: If the handler shape is invalid or the
                registry is sealed
        """
        with self._lock:
            if self._sealed:
                raise HandlerValidationError("registry sealed")

            descriptor = describe_handler(event_type, handler)
            self._descriptors.setdefault(event_type, []).append(descriptor)
            self._ordered.append(descriptor)

        logger.debug(
            "Registered responder %s for %s",
            descriptor.handler_name,
            event_type.__name__,
            extra={
                "handler": descriptor.handler_name,
                "event_type": event_type.__name__,
                "is_async": descriptor.is_async,
                "return_shape": descriptor.return_shape.value,
                "dependency_count": len(descriptor.dependency_slots),
            },
        )
        return descriptor

    def responder(self, event_type: type[GatewayEvent]) -> Callable[[F], F]:
        """
        Decorator form of ``register``.

        The decorated function is returned unchanged.

        Args:
            event_type: The GatewayEvent subclass to respond to
        """

        def decorator(func: F) -> F:
            self.register(event_type, func)
            return func

        return decorator

    def seal(self) -> None:
        """Refuse any further registration. Sealing twice is a no-op."""
        with self._lock:
            if self._sealed:
                return
            self._sealed = True

        logger.info(
            f"Responder registry sealed with {len(self._ordered)} responder(s)",
            extra={"responder_count": len(self._ordered)},
        )

    @property
    def is_sealed(self) -> bool:
        """Whether ``seal`` has been called."""
        return self._sealed

    def get_descriptors(self, event_type: type[GatewayEvent]) -> list[HandlerDescriptor]:
        """Return descriptors for ``event_type`` in registration order."""
        with self._lock:
            return list(self._descriptors.get(event_type, []))

    def descriptors(self) -> list[HandlerDescriptor]:
        """Return every descriptor in global registration order."""
        with self._lock:
            return list(self._ordered)

    def event_types(self) -> list[type[GatewayEvent]]:
        """Return event types with at least one responder, in first-seen order."""
        with self._lock:
            return list(self._descriptors.keys())

    def __len__(self) -> int:
        return len(self._ordered)


__all__ = ["ResponderRegistry"]
