"""Message schemas produced by the default factory catalogue.

All messages inherit from BaseMessage and are Pydantic models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import ClassVar

from pydantic import BaseModel, Field

from .message_factory import message_kind


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseMessage(BaseModel):
    """Base for all messages. Provides identity and time."""

    KIND: ClassVar[str] = ""

    message_id: str = Field(default_factory=_uuid)
    timestamp: datetime = Field(default_factory=_now)

    model_config = {"frozen": True}

    @property
    def kind(self) -> str:
        return self.KIND

    def describe(self) -> str:
        return self.KIND


@message_kind("temperature")
class TemperatureReading(BaseMessage):
    KIND: ClassVar[str] = "temperature"

    sensor_id: str
    celsius: float

    def describe(self) -> str:
        return f"{self.sensor_id} reads {self.celsius:.1f}C"


@message_kind("door_opened")
class DoorOpened(BaseMessage):
    KIND: ClassVar[str] = "door_opened"

    door_id: str
    forced: bool = False

    def describe(self) -> str:
        how = "forced open" if self.forced else "opened"
        return f"door {self.door_id} {how}"


@message_kind("lift_called")
class LiftCalled(BaseMessage):
    KIND: ClassVar[str] = "lift_called"

    floor: int = Field(ge=0)
    lift_id: str = "main"

    def describe(self) -> str:
        return f"lift {self.lift_id} called to floor {self.floor}"
