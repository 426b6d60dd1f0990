"""
Basic Usage Example

This example demonstrates the fundamental concepts of delegate dispatch:
- Defining gateway events
- Writing responders as plain functions with typed dependencies
- Registering services and responders on a ServiceCollection
- Dispatching events and reading the aggregate outcome

Run with: python examples/basic_usage.py
"""

import asyncio
import logging

from delegatedispatch import (
    SUCCESS,
    CancellationToken,
    DelegateDispatcher,
    GatewayEvent,
    Result,
    ResultError,
    ServiceCollection,
    Success,
)

# =============================================================================
# Step 1: Define Gateway Events
# =============================================================================
# Events are immutable records delivered by the transport. Their class is
# the dispatch key.


class MessageCreated(GatewayEvent):
    """A message was posted in a channel."""

    channel_id: int
    author: str
    content: str


class MemberJoined(GatewayEvent):
    """A user joined the guild."""

    user_id: int
    username: str


# =============================================================================
# Step 2: Define Services
# =============================================================================


class ChannelClient:
    """Stands in for an HTTP client that posts messages."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []

    async def send(self, channel_id: int, text: str) -> None:
        self.sent.append((channel_id, text))
        print(f"   -> #{channel_id}: {text}")


class WordFilter:
    """Rejects messages containing banned words."""

    def __init__(self, banned: set[str]) -> None:
        self._banned = banned

    def violations(self, text: str) -> list[str]:
        return [word for word in text.lower().split() if word in self._banned]


# =============================================================================
# Step 3: Write Responders
# =============================================================================
# Responders are plain callables. The first parameter is the event; any
# further typed parameters are resolved from the service provider on every
# call; a trailing CancellationToken receives the dispatch token.


async def echo_ping(event: MessageCreated, client: ChannelClient) -> None:
    if event.content == "!ping":
        await client.send(event.channel_id, "pong")


def moderate(event: MessageCreated, word_filter: WordFilter) -> Result[None]:
    found = word_filter.violations(event.content)
    if found:
        return Result.from_error(ResultError(f"banned words from {event.author}: {found}"))
    return Result.from_success()


async def welcome(
    event: MemberJoined,
    client: ChannelClient,
    ct: CancellationToken,
) -> Success:
    if not ct.is_cancellation_requested:
        await client.send(1, f"Welcome, {event.username}!")
    return SUCCESS


def count_words(event: MessageCreated) -> None:
    print(f"   {event.author} wrote {len(event.content.split())} word(s)")


# =============================================================================
# Step 4: Wire Everything Together
# =============================================================================


async def main() -> None:
    """Run the basic usage example."""
    logging.basicConfig(level=logging.WARNING)

    print("=" * 60)
    print("Delegate Dispatch - Basic Usage Example")
    print("=" * 60)

    client = ChannelClient()

    services = ServiceCollection()
    services.add_singleton(ChannelClient, client)
    services.add_singleton(WordFilter, factory=lambda _: WordFilter({"spam"}))
    services.add_delegate_responders()
    services.add_delegate_responder(MessageCreated, echo_ping)
    services.add_delegate_responder(MessageCreated, moderate)
    services.add_delegate_responder(MessageCreated, count_words)
    services.add_delegate_responder(MemberJoined, welcome)

    provider = services.build_service_provider()
    dispatcher = provider.get_required_service(DelegateDispatcher)

    print("\n1. A ping message")
    outcome = await dispatcher.dispatch(MessageCreated(channel_id=7, author="ada", content="!ping"))
    print(f"   success={outcome.is_success}, responders={outcome.handler_count}")

    print("\n2. A message the filter rejects")
    outcome = await dispatcher.dispatch(
        MessageCreated(channel_id=7, author="mallory", content="buy spam now")
    )
    print(f"   success={outcome.is_success}")
    for error in outcome.errors:
        print(f"   failure: {error}")

    print("\n3. A member joins")
    outcome = await dispatcher.dispatch(MemberJoined(user_id=3, username="grace"))
    print(f"   success={outcome.is_success}")

    print("\n4. Dispatcher statistics")
    for name, value in dispatcher.get_stats().items():
        print(f"   {name}: {value}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
