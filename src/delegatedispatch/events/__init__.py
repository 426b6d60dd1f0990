"""
Event primitives for delegatedispatch.

Example:
    >>> from delegatedispatch.events import GatewayEvent
    >>>
    >>> class MemberJoined(GatewayEvent):
    ...     guild_id: int
    ...     user_id: int
"""

from delegatedispatch.events.base import GatewayEvent

__all__ = ["GatewayEvent"]
