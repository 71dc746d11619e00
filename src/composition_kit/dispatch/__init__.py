"""Broadcast dispatch: one capability fanning out to many recipients."""

from composition_kit.dispatch.broadcast import (
    DispatchDeadLetter,
    ParallelBroadcast,
    SequentialBroadcast,
)
from composition_kit.dispatch.dispatcher import create_dispatcher

__all__ = [
    "DispatchDeadLetter",
    "ParallelBroadcast",
    "SequentialBroadcast",
    "create_dispatcher",
]
