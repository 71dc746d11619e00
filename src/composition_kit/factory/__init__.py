"""Message factory: turns raw input into capability-typed messages."""

from composition_kit.factory.message_factory import (
    MessageFactory,
    create_default_factory,
    list_default_kinds,
    message_kind,
)

__all__ = [
    "MessageFactory",
    "create_default_factory",
    "list_default_kinds",
    "message_kind",
]
