"""Unit tests for the responder registry."""

import threading

import pytest

from delegatedispatch.exceptions import HandlerValidationError
from delegatedispatch.handlers.registry import ResponderRegistry
from tests.fixtures import Greeter, MemberJoined, MemberLeft, MessageCreated


def first(event: MessageCreated) -> None:
    pass


def second(event: MessageCreated) -> None:
    pass


def third(event: MessageCreated) -> None:
    pass


def on_join(event: MemberJoined, greeter: Greeter) -> None:
    greeter.greet(event.user_id)


def on_leave(event: MemberLeft) -> None:
    pass


class TestRegister:
    """Tests for ResponderRegistry.register."""

    def test_returns_descriptor(self, registry: ResponderRegistry):
        descriptor = registry.register(MemberJoined, on_join)

        assert descriptor.event_type is MemberJoined
        assert descriptor.handler is on_join
        assert len(registry) == 1

    def test_preserves_registration_order_per_event_type(self, registry: ResponderRegistry):
        registry.register(MessageCreated, first)
        registry.register(MemberJoined, on_join)
        registry.register(MessageCreated, second)
        registry.register(MessageCreated, third)

        handlers = [d.handler for d in registry.get_descriptors(MessageCreated)]
        assert handlers == [first, second, third]

    def test_descriptors_in_global_order(self, registry: ResponderRegistry):
        registry.register(MessageCreated, first)
        registry.register(MemberJoined, on_join)
        registry.register(MemberLeft, on_leave)

        assert [d.handler for d in registry.descriptors()] == [first, on_join, on_leave]

    def test_event_types_in_first_seen_order(self, registry: ResponderRegistry):
        registry.register(MemberLeft, on_leave)
        registry.register(MessageCreated, first)
        registry.register(MemberLeft, on_leave)

        assert registry.event_types() == [MemberLeft, MessageCreated]

    def test_same_callable_can_be_registered_twice(self, registry: ResponderRegistry):
        registry.register(MessageCreated, first)
        registry.register(MessageCreated, first)

        assert len(registry.get_descriptors(MessageCreated)) == 2

    def test_invalid_responder_is_not_added(self, registry: ResponderRegistry):
        def bad(event: MessageCreated) -> int:
            return 0

        with pytest.raises(HandlerValidationError):
            registry.register(MessageCreated, bad)

        assert len(registry) == 0
        assert registry.event_types() == []

    def test_get_descriptors_unknown_type_is_empty(self, registry: ResponderRegistry):
        assert registry.get_descriptors(MessageCreated) == []

    def test_get_descriptors_returns_copy(self, registry: ResponderRegistry):
        registry.register(MessageCreated, first)
        registry.get_descriptors(MessageCreated).clear()

        assert len(registry.get_descriptors(MessageCreated)) == 1


class TestResponderDecorator:
    """Tests for the @registry.responder decorator."""

    def test_registers_and_returns_function_unchanged(self, registry: ResponderRegistry):
        @registry.responder(MemberJoined)
        def greet(event: MemberJoined, greeter: Greeter) -> None:
            """Docstring kept."""
            greeter.greet(event.user_id)

        assert greet.__name__ == "greet"
        assert greet.__doc__ == "Docstring kept."
        assert registry.get_descriptors(MemberJoined)[0].handler is greet

    def test_invalid_decorated_function_raises(self, registry: ResponderRegistry):
        with pytest.raises(HandlerValidationError):

            @registry.responder(MemberJoined)
            def greet(event: MessageCreated) -> None:
                pass


class TestSealing:
    """Tests for sealing."""

    def test_register_after_seal_raises(self, registry: ResponderRegistry):
        registry.register(MessageCreated, first)
        registry.seal()

        with pytest.raises(HandlerValidationError, match="registry sealed"):
            registry.register(MessageCreated, second)

        assert len(registry) == 1

    def test_seal_is_idempotent(self, registry: ResponderRegistry):
        registry.seal()
        registry.seal()

        assert registry.is_sealed is True

    def test_new_registry_is_not_sealed(self, registry: ResponderRegistry):
        assert registry.is_sealed is False


class TestThreadSafety:
    """Concurrent registration keeps every descriptor."""

    def test_concurrent_registrations(self, registry: ResponderRegistry):
        def register_many() -> None:
            for _ in range(50):
                registry.register(MessageCreated, first)

        threads = [threading.Thread(target=register_many) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 200
        assert len(registry.get_descriptors(MessageCreated)) == 200
