"""Unit tests for ServiceCollection and ServiceProvider."""

import threading

import pytest

from delegatedispatch.cancellation import CancellationToken
from delegatedispatch.di import ServiceCollection, ServiceLifetime, ServiceProvider
from delegatedispatch.di.provider import ServiceRegistration
from delegatedispatch.dispatch import DelegateDispatcher, DispatcherConfig, DispatchTable
from delegatedispatch.exceptions import (
    BuildError,
    DelegateDispatchError,
    DependencyNotFoundError,
    HandlerValidationError,
)
from delegatedispatch.observability import MockTracer
from delegatedispatch.protocols import DependencyResolver
from delegatedispatch.results import SUCCESS, Result, Success
from tests.fixtures import AuditLog, Clock, Greeter, MemberJoined, MemberLeft, MessageCreated


def welcome(event: MemberJoined, greeter: Greeter) -> None:
    greeter.greet(event.user_id)


async def audit_join(event: MemberJoined, log: AuditLog, ct: CancellationToken) -> Success:
    log.record(f"joined:{event.user_id}")
    return SUCCESS


def needs_clock(event: MemberLeft, clock: Clock) -> None:
    pass


class TestServiceProvider:
    """Tests for ServiceProvider resolution."""

    def test_singleton_instance(self):
        greeter = Greeter()
        provider = ServiceProvider(
            {Greeter: ServiceRegistration(Greeter, ServiceLifetime.SINGLETON, instance=greeter)}
        )

        assert provider.resolve(Greeter) is greeter
        assert provider.can_resolve(Greeter)

    def test_lazy_singleton_factory_runs_once(self):
        calls = []

        def factory(services: ServiceProvider) -> Greeter:
            calls.append(services)
            return Greeter()

        provider = ServiceProvider(
            {Greeter: ServiceRegistration(Greeter, ServiceLifetime.SINGLETON, factory=factory)}
        )

        assert calls == []
        first = provider.resolve(Greeter)
        second = provider.resolve(Greeter)

        assert first is second
        assert calls == [provider]

    def test_lazy_singleton_is_created_once_across_threads(self):
        calls = []

        def factory(services: ServiceProvider) -> Greeter:
            calls.append(1)
            return Greeter()

        provider = ServiceProvider(
            {Greeter: ServiceRegistration(Greeter, ServiceLifetime.SINGLETON, factory=factory)}
        )
        resolved = []

        threads = [
            threading.Thread(target=lambda: resolved.append(provider.resolve(Greeter)))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert all(instance is resolved[0] for instance in resolved)

    def test_transient_creates_new_instances(self):
        provider = ServiceProvider(
            {
                AuditLog: ServiceRegistration(
                    AuditLog, ServiceLifetime.TRANSIENT, factory=lambda _: AuditLog()
                )
            }
        )

        assert provider.resolve(AuditLog) is not provider.resolve(AuditLog)

    def test_missing_service(self):
        provider = ServiceProvider()

        assert provider.can_resolve(Clock) is False
        assert provider.get_service(Clock) is None
        with pytest.raises(DependencyNotFoundError, match="Clock"):
            provider.get_required_service(Clock)

    def test_resolves_itself(self):
        provider = ServiceProvider()

        assert provider.resolve(ServiceProvider) is provider
        assert provider.resolve(DependencyResolver) is provider
        assert isinstance(provider, DependencyResolver)

    def test_registration_requires_instance_or_factory(self):
        with pytest.raises(ValueError):
            ServiceRegistration(Greeter, ServiceLifetime.SINGLETON)

    def test_transient_requires_factory(self):
        with pytest.raises(ValueError, match="factory"):
            ServiceRegistration(Greeter, ServiceLifetime.TRANSIENT, instance=Greeter())


class TestServiceCollection:
    """Tests for ServiceCollection registration and finalization."""

    def test_add_methods_chain(self):
        services = ServiceCollection()

        returned = (
            services.add_singleton(Greeter, Greeter())
            .add_transient(AuditLog, lambda _: AuditLog())
            .add_delegate_responders()
            .add_delegate_responder(MemberJoined, welcome)
        )

        assert returned is services

    def test_add_singleton_requires_exactly_one_source(self):
        services = ServiceCollection()

        with pytest.raises(ValueError):
            services.add_singleton(Greeter)
        with pytest.raises(ValueError):
            services.add_singleton(Greeter, Greeter(), factory=lambda _: Greeter())

    def test_invalid_responder_fails_at_registration(self):
        services = ServiceCollection()

        def bad(event: MessageCreated) -> int:
            return 0

        with pytest.raises(HandlerValidationError):
            services.add_delegate_responder(MessageCreated, bad)

    def test_build_registers_table_and_dispatcher(self):
        services = ServiceCollection()
        services.add_singleton(Greeter, Greeter())
        services.add_delegate_responders()
        services.add_delegate_responder(MemberJoined, welcome)

        provider = services.build_service_provider()

        table = provider.get_required_service(DispatchTable)
        dispatcher = provider.get_required_service(DelegateDispatcher)
        assert MemberJoined in table
        assert dispatcher.table is table
        assert provider.get_required_service(DelegateDispatcher) is dispatcher

    def test_dispatcher_not_registered_unless_requested(self):
        services = ServiceCollection()

        provider = services.build_service_provider()

        assert provider.get_service(DelegateDispatcher) is None
        assert provider.get_service(DispatchTable) is not None

    def test_dispatcher_uses_given_config_and_tracer(self):
        tracer = MockTracer()
        config = DispatcherConfig(execution_mode="concurrent")
        services = ServiceCollection().add_delegate_responders(config, tracer=tracer)

        dispatcher = services.build_service_provider().get_required_service(DelegateDispatcher)

        assert dispatcher.config is config
        assert dispatcher._tracer is tracer

    def test_unresolvable_dependency_fails_build(self):
        services = ServiceCollection()
        services.add_delegate_responders()
        services.add_delegate_responder(MemberLeft, needs_clock)

        with pytest.raises(BuildError, match="clock"):
            services.build_service_provider()

    def test_registration_after_build(self):
        services = ServiceCollection()
        services.build_service_provider()

        assert services.is_built
        assert services.responders.is_sealed
        with pytest.raises(HandlerValidationError, match="registry sealed"):
            services.add_delegate_responder(MemberJoined, welcome)
        with pytest.raises(DelegateDispatchError):
            services.add_singleton(Greeter, Greeter())
        with pytest.raises(DelegateDispatchError):
            services.add_delegate_responders()
        with pytest.raises(DelegateDispatchError):
            services.build_service_provider()

    def test_later_registration_replaces_earlier(self):
        first, second = Greeter(), Greeter()
        services = ServiceCollection()
        services.add_singleton(Greeter, first)
        services.add_singleton(Greeter, second)

        provider = services.build_service_provider()

        assert provider.resolve(Greeter) is second


class TestEndToEnd:
    """Collection -> provider -> dispatcher."""

    @pytest.mark.asyncio
    async def test_dispatch_through_provider(self, member_event):
        greeter = Greeter()
        services = ServiceCollection()
        services.add_singleton(Greeter, greeter)
        services.add_transient(AuditLog, lambda _: AuditLog())
        services.add_delegate_responders(DispatcherConfig(enable_tracing=False))
        services.add_delegate_responder(MemberJoined, welcome)
        services.add_delegate_responder(MemberJoined, audit_join)

        provider = services.build_service_provider()
        dispatcher = provider.get_required_service(DelegateDispatcher)

        outcome = await dispatcher.dispatch(member_event)

        assert outcome.is_success
        assert outcome.handler_count == 2
        assert greeter.greeted == [member_event.user_id]

    @pytest.mark.asyncio
    async def test_responder_can_depend_on_provider(self, member_event):
        seen = []

        def uses_provider(event: MemberJoined, services: ServiceProvider) -> Result[int]:
            seen.append(services)
            return Result.from_success(event.user_id)

        services = ServiceCollection().add_delegate_responders()
        services.add_delegate_responder(MemberJoined, uses_provider)
        provider = services.build_service_provider()

        result = await provider.get_required_service(DelegateDispatcher).respond(member_event)

        assert result.is_success
        assert seen == [provider]

    @pytest.mark.asyncio
    async def test_responder_can_depend_on_table_and_dispatcher(self, member_event):
        seen = []

        def inspects_wiring(
            event: MemberJoined, table: DispatchTable, dispatcher: DelegateDispatcher
        ) -> None:
            seen.append((table, dispatcher))

        services = ServiceCollection().add_delegate_responders(
            DispatcherConfig(enable_tracing=False)
        )
        services.add_delegate_responder(MemberJoined, inspects_wiring)
        provider = services.build_service_provider()
        dispatcher = provider.get_required_service(DelegateDispatcher)

        outcome = await dispatcher.dispatch(member_event)

        assert outcome.is_success
        assert seen == [(provider.get_required_service(DispatchTable), dispatcher)]
        assert dispatcher.table is seen[0][0]
