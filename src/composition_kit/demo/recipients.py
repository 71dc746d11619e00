"""Concrete recipients used by the demo composition root."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from composition_kit.core.errors import recipient_name
from composition_kit.core.interfaces import IMessage, IRecipient

logger = logging.getLogger(__name__)


class Siren:
    """Alarm that sounds for every message it is notified of."""

    def __init__(self, name: str, delay_seconds: float = 0.0) -> None:
        self.name = name
        self._delay = delay_seconds
        self.sounded: list[Any] = []

    async def notify(self, value: Any) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        self.sounded.append(value)
        logger.info("Siren %s sounding: %s", self.name, _describe(value))


class BrokenSiren:
    """Siren whose wiring is cut. Always raises when notified."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.attempts = 0

    async def notify(self, value: Any) -> None:
        self.attempts += 1
        raise ConnectionError(f"siren {self.name} is unreachable")


class Journal:
    """Records every message description in arrival order."""

    name = "journal"

    def __init__(self) -> None:
        self.entries: list[str] = []

    async def notify(self, value: Any) -> None:
        self.entries.append(_describe(value))


class LiftPanel:
    """Floor display notified whenever the lift is called."""

    def __init__(self, name: str = "panel") -> None:
        self.name = name
        self.floors: list[int] = []

    async def notify(self, value: Any) -> None:
        floor = getattr(value, "floor", None)
        if floor is not None:
            self.floors.append(floor)


class KindFilter:
    """Forwards only messages whose ``kind`` is in *kinds* to *recipient*."""

    def __init__(self, kinds: Iterable[str], recipient: IRecipient) -> None:
        self.kinds = frozenset(kinds)
        self._recipient = recipient
        self.name = recipient_name(recipient)

    async def notify(self, value: Any) -> None:
        if getattr(value, "kind", None) not in self.kinds:
            return
        await self._recipient.notify(value)


def _describe(value: Any) -> str:
    if isinstance(value, IMessage):
        return value.describe()
    return repr(value)
