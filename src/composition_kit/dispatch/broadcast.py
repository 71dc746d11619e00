"""Broadcast groups: present many recipients as one ``IRecipient``.

Two fan-out strategies share the same capability, so the strategy is
chosen only where the group is built:

- ``SequentialBroadcast`` awaits recipients one after another in
  registration order.  By default the first failure halts the broadcast
  and is raised as ``RecipientFailure``.  With ``continue_on_error=True``
  every recipient runs and all failures are raised afterwards as one
  ``CompositeDispatchFailure``.
- ``ParallelBroadcast`` runs every recipient as its own asyncio task,
  waits for all of them and aggregates every failure into one
  ``CompositeDispatchFailure``.  An optional timeout applies per
  recipient.

Both keep per-recipient error counters and a dead-letter list, and call
an optional ``on_recipient_error`` callback for external reporting.
A ``DispatchError`` raised by a recipient comes from a nested group (or
slot) that has already recorded and reported it, so the outer group only
passes its failures along.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from composition_kit.core.errors import (
    CompositeDispatchFailure,
    DispatchError,
    DuplicateRecipientError,
    RecipientFailure,
    recipient_name,
)
from composition_kit.core.interfaces import IRecipient

logger = logging.getLogger(__name__)

# (recipient_name, value, exc)
ErrorCallback = Callable[[str, Any, BaseException], None]


@dataclass
class DispatchDeadLetter:
    """Record of a recipient failure during a broadcast."""

    recipient: str
    value_type: str
    error: str
    timestamp: float = field(default_factory=time.monotonic)


class _BroadcastGroup:
    """Shared storage and observability for the broadcast strategies."""

    def __init__(
        self,
        recipients: Sequence[IRecipient],
        *,
        allow_duplicates: bool = False,
        on_recipient_error: ErrorCallback | None = None,
        name: str | None = None,
    ) -> None:
        members = tuple(recipients)
        if not allow_duplicates:
            seen: set[int] = set()
            for member in members:
                if id(member) in seen:
                    raise DuplicateRecipientError(
                        f"Recipient {recipient_name(member)} appears more than "
                        "once; pass allow_duplicates=True to permit it"
                    )
                seen.add(id(member))
        self._recipients = members
        self._on_recipient_error = on_recipient_error
        self.name = name or type(self).__name__

        # Observability
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: list[DispatchDeadLetter] = []
        self._messages_processed: int = 0

    @property
    def recipients(self) -> tuple[IRecipient, ...]:
        return self._recipients

    def __len__(self) -> int:
        return len(self._recipients)

    async def notify(self, value: Any) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def _record_failure(
        self, recipient: IRecipient, value: Any, exc: Exception,
    ) -> list[RecipientFailure]:
        """Record *exc* and return the failures it stands for.

        Failures passed up from a nested group were already recorded
        there and are only forwarded.
        """
        if isinstance(exc, CompositeDispatchFailure):
            return list(exc.failures)
        if isinstance(exc, RecipientFailure):
            return [exc]

        name = recipient_name(recipient)
        self._error_counts[name] += 1
        self._dead_letters.append(
            DispatchDeadLetter(
                recipient=name,
                value_type=type(value).__name__,
                error=f"{type(exc).__name__}: {exc}",
            )
        )
        logger.error(
            "Recipient error in %s recipient=%s value=%s: %s",
            self.name,
            name,
            type(value).__name__,
            exc,
        )

        if self._on_recipient_error is not None:
            try:
                self._on_recipient_error(name, value, exc)
            except Exception:
                logger.warning(
                    "on_recipient_error callback failed", exc_info=True,
                )

        return [RecipientFailure(recipient, exc)]

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_error_counts(self) -> dict[str, int]:
        """Return per-recipient error counts."""
        return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[DispatchDeadLetter]:
        """Snapshot of the dead-letter list."""
        return list(self._dead_letters)

    @property
    def messages_processed(self) -> int:
        """Total recipient invocations that completed successfully."""
        return self._messages_processed

    def clear_dead_letters(self) -> list[DispatchDeadLetter]:
        """Drain the dead-letter list and return all entries."""
        drained = self._dead_letters[:]
        self._dead_letters.clear()
        return drained

    def __repr__(self) -> str:
        names = [recipient_name(r) for r in self._recipients]
        return f"{type(self).__name__}({names})"


class SequentialBroadcast(_BroadcastGroup):
    """Invoke recipients one at a time, in order.

    Parameters
    ----------
    recipients:
        Ordered recipients; the order is the invocation order.
    continue_on_error:
        ``False`` (default): the first failure is raised as
        ``RecipientFailure`` and the remaining recipients are skipped.
        ``True``: every recipient is invoked and the collected failures
        are raised at the end as ``CompositeDispatchFailure``.
    allow_duplicates:
        Permit the same instance more than once.
    on_recipient_error:
        Optional callback ``(recipient_name, value, exc)``.
    """

    def __init__(
        self,
        recipients: Sequence[IRecipient],
        *,
        continue_on_error: bool = False,
        allow_duplicates: bool = False,
        on_recipient_error: ErrorCallback | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(
            recipients,
            allow_duplicates=allow_duplicates,
            on_recipient_error=on_recipient_error,
            name=name,
        )
        self._continue_on_error = continue_on_error

    @property
    def continue_on_error(self) -> bool:
        return self._continue_on_error

    async def notify(self, value: Any) -> None:
        failures: list[RecipientFailure] = []
        for recipient in self._recipients:
            try:
                await recipient.notify(value)
                self._messages_processed += 1
            except Exception as exc:
                found = self._record_failure(recipient, value, exc)
                if not self._continue_on_error:
                    if isinstance(exc, DispatchError):
                        raise
                    raise found[0] from exc
                failures.extend(found)

        if failures:
            raise CompositeDispatchFailure(failures)


class ParallelBroadcast(_BroadcastGroup):
    """Invoke all recipients concurrently and wait for every one of them.

    Parameters
    ----------
    recipients:
        Recipients to run; no ordering guarantee between them.
    timeout:
        Optional per-recipient timeout in seconds.  A recipient that
        exceeds it is cancelled and reported as a failure without
        affecting the others.
    allow_duplicates:
        Permit the same instance more than once.
    on_recipient_error:
        Optional callback ``(recipient_name, value, exc)``.
    """

    def __init__(
        self,
        recipients: Sequence[IRecipient],
        *,
        timeout: float | None = None,
        allow_duplicates: bool = False,
        on_recipient_error: ErrorCallback | None = None,
        name: str | None = None,
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        super().__init__(
            recipients,
            allow_duplicates=allow_duplicates,
            on_recipient_error=on_recipient_error,
            name=name,
        )
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        return self._timeout

    async def _invoke(self, recipient: IRecipient, value: Any) -> None:
        if self._timeout is None:
            await recipient.notify(value)
        else:
            await asyncio.wait_for(recipient.notify(value), self._timeout)

    async def notify(self, value: Any) -> None:
        tasks = [
            asyncio.ensure_future(self._invoke(recipient, value))
            for recipient in self._recipients
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        failures: list[RecipientFailure] = []
        interrupted: BaseException | None = None
        for recipient, result in zip(self._recipients, results):
            if result is None:
                self._messages_processed += 1
            elif isinstance(result, Exception):
                failures.extend(self._record_failure(recipient, value, result))
            elif isinstance(result, BaseException) and interrupted is None:
                interrupted = result

        # Cancellation wins, but only after every failure has been recorded.
        if interrupted is not None:
            raise interrupted
        if failures:
            raise CompositeDispatchFailure(failures)
