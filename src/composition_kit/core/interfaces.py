"""Protocol interfaces for the composition toolkit.

All sender/recipient boundaries are defined here as Protocol classes.
Senders depend on these capabilities only, so concrete recipients can be
swapped at the composition root without changing callers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Recipient
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecipient(Protocol):
    """Receives a value sent by a sender."""

    async def notify(self, value: Any) -> None: ...


class NoOpRecipient:
    """Recipient that does nothing.

    Substituted wherever a sender has nobody registered, so senders never
    hold an absent recipient reference.
    """

    name = "noop"

    async def notify(self, value: Any) -> None:
        return None

    def __repr__(self) -> str:
        return "NoOpRecipient()"


NOOP_RECIPIENT = NoOpRecipient()


# ---------------------------------------------------------------------------
# Messages and factories
# ---------------------------------------------------------------------------

@runtime_checkable
class IMessage(Protocol):
    """A message produced from raw input data."""

    @property
    def kind(self) -> str: ...

    def describe(self) -> str: ...


@runtime_checkable
class IMessageFactory(Protocol):
    """Creates capability-typed messages from raw input.

    Callers never learn which concrete type was produced.
    """

    def create_from(self, raw: Mapping[str, Any]) -> IMessage: ...

    def known_kinds(self) -> list[str]: ...


# ---------------------------------------------------------------------------
# Reporting sink
# ---------------------------------------------------------------------------

@runtime_checkable
class IReportSink(Protocol):
    """Consumes recipient failure notifications."""

    def report_failure(self, recipient_name: str, error: BaseException) -> None: ...
