"""
Shared test fixtures for the delegatedispatch library.

Usage:
    from tests.fixtures import (
        MessageCreated,
        MemberJoined,
        Greeter,
        DictResolver,
        create_event,
    )
"""

from tests.fixtures.events import (
    MemberJoined,
    MemberLeft,
    MessageCreated,
    MessageDeleted,
    PinnedMessageCreated,
    TypingStarted,
    create_event,
)
from tests.fixtures.services import (
    AuditLog,
    Clock,
    DictResolver,
    FailingResolver,
    Greeter,
)

__all__ = [
    # Events
    "MemberJoined",
    "MemberLeft",
    "MessageCreated",
    "MessageDeleted",
    "PinnedMessageCreated",
    "TypingStarted",
    "create_event",
    # Services
    "AuditLog",
    "Clock",
    "DictResolver",
    "FailingResolver",
    "Greeter",
]
