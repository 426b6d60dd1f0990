"""
Base class for gateway events.

Events are immutable records delivered by a transport (for example a
gateway socket client). The dispatch engine only needs their runtime type,
which is the dispatch key, and their ``event_id`` for logs and spans.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GatewayEvent(BaseModel):
    """
    Base class for all events that can be dispatched to delegate responders.

    The event_type field is automatically set to the class name if not
    explicitly provided.

    Attributes:
        event_id: Unique identifier for this event instance
        event_type: Type name of the event (auto-derived from class name if not set)
        received_at: When the transport received the event (UTC timestamp)

    Example:
        >>> class MessageCreated(GatewayEvent):
        ...     channel_id: int
        ...     content: str
        ...
        >>> event = MessageCreated(channel_id=1, content="hi")
        >>> assert event.event_type == "MessageCreated"
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier",
    )
    event_type: str = Field(
        default="",
        description="Type of event (auto-derived from class name if not set)",
    )
    received_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the event was received (UTC)",
    )

    @model_validator(mode="before")
    @classmethod
    def _ensure_event_type(cls, data: Any) -> Any:
        """Populate event_type with the class name when it is not provided."""
        if isinstance(data, dict) and not data.get("event_type"):
            field_info = cls.model_fields.get("event_type")
            field_default = field_info.default if field_info else ""
            data = dict(data)
            data["event_type"] = field_default or cls.__name__
        return data

    def __str__(self) -> str:
        return f"{self.event_type}(event_id={self.event_id})"
