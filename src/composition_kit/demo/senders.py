"""Demo senders.

Each sender depends on capabilities only and receives them through its
constructor (or, for genuinely optional observers, through a registration
store or slot).  None of them constructs its collaborators.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from composition_kit.assembly.assembler import CompositionAssembler
from composition_kit.assembly.sender import ComposedSender
from composition_kit.core.interfaces import IMessage, IMessageFactory, IRecipient
from composition_kit.factory.messages import LiftCalled, TemperatureReading
from composition_kit.registration.store import RecipientSlot, RegistrationStore

logger = logging.getLogger(__name__)


class TemperatureSensor(ComposedSender):
    """Notifies its registered alarms when a reading reaches the threshold."""

    def __init__(
        self,
        assembler: CompositionAssembler,
        alarms: RegistrationStore,
        *,
        sensor_id: str = "sensor-1",
        threshold_celsius: float = 30.0,
    ) -> None:
        super().__init__(assembler)
        self._alarms = alarms
        self.sensor_id = sensor_id
        self.threshold_celsius = threshold_celsius

    def register_alarm(self, alarm: IRecipient) -> None:
        self._ensure_composed("register_alarm")
        self._alarms.register(alarm)

    @property
    def alarms(self) -> tuple[IRecipient, ...]:
        self._ensure_composed("alarms")
        return self._alarms.current_recipients()

    async def report(self, celsius: float) -> bool:
        """Handle a reading. Returns ``True`` if the alarms were notified."""
        self._ensure_composed("report")
        if celsius < self.threshold_celsius:
            return False
        reading = TemperatureReading(sensor_id=self.sensor_id, celsius=celsius)
        await self._alarms.notify(reading)
        return True


class Lift(ComposedSender):
    """Lift with one swappable observer for floor calls."""

    def __init__(
        self,
        assembler: CompositionAssembler,
        observer: RecipientSlot,
        *,
        lift_id: str = "main",
    ) -> None:
        super().__init__(assembler)
        self._observer = observer
        self.lift_id = lift_id
        self.floor = 0

    def set_observer(self, observer: IRecipient) -> IRecipient | None:
        self._ensure_composed("set_observer")
        return self._observer.set(observer)

    async def call(self, floor: int) -> None:
        self._ensure_composed("call")
        self.floor = floor
        await self._observer.notify(LiftCalled(floor=floor, lift_id=self.lift_id))


class MessageInbox(ComposedSender):
    """Turns raw input into messages and hands them to one recipient.

    The recipient is usually a broadcast group built at the composition
    root; the inbox never learns that.
    """

    def __init__(
        self,
        assembler: CompositionAssembler,
        factory: IMessageFactory,
        recipient: IRecipient,
    ) -> None:
        super().__init__(assembler)
        self._factory = factory
        self._recipient = recipient
        self.received = 0

    async def receive(self, raw: Mapping[str, Any]) -> IMessage:
        self._ensure_composed("receive")
        message = self._factory.create_from(raw)
        self.received += 1
        await self._recipient.notify(message)
        return message
