"""Broadcast group factory.

Creates the fan-out implementation for a dispatch mode, so switching
between sequential and concurrent dispatch only touches the place where
the group is built.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from composition_kit.core.config import DispatchConfig
from composition_kit.core.enums import DispatchMode
from composition_kit.core.interfaces import IRecipient

from .broadcast import ErrorCallback, ParallelBroadcast, SequentialBroadcast


def create_dispatcher(
    mode: DispatchMode,
    recipients: Sequence[IRecipient],
    *,
    continue_on_error: bool = False,
    timeout: float | None = None,
    allow_duplicates: bool = False,
    on_recipient_error: ErrorCallback | None = None,
    name: str | None = None,
) -> SequentialBroadcast | ParallelBroadcast:
    """Create a broadcast group for the given mode.

    - SEQUENTIAL: SequentialBroadcast (ordered, honours continue_on_error)
    - PARALLEL: ParallelBroadcast (concurrent, honours timeout)

    Args:
        mode: Fan-out strategy.
        recipients: Ordered recipients behind the group.
        continue_on_error: Sequential mode only.
        timeout: Per-recipient timeout in seconds, parallel mode only.
        allow_duplicates: Permit the same recipient instance twice.
        on_recipient_error: Optional callback ``(recipient_name, value, exc)``
            invoked when a recipient raises.
    """
    if mode == DispatchMode.PARALLEL:
        return ParallelBroadcast(
            recipients,
            timeout=timeout,
            allow_duplicates=allow_duplicates,
            on_recipient_error=on_recipient_error,
            name=name,
        )
    return SequentialBroadcast(
        recipients,
        continue_on_error=continue_on_error,
        allow_duplicates=allow_duplicates,
        on_recipient_error=on_recipient_error,
        name=name,
    )


def dispatcher_from_config(
    config: DispatchConfig,
    *,
    on_recipient_error: ErrorCallback | None = None,
) -> Callable[[Sequence[IRecipient]], IRecipient]:
    """Return a group factory bound to *config*, for ``RegistrationStore``."""

    def build(recipients: Sequence[IRecipient]) -> IRecipient:
        return create_dispatcher(
            config.mode,
            recipients,
            continue_on_error=config.continue_on_error,
            timeout=config.recipient_timeout_seconds,
            allow_duplicates=config.allow_duplicates,
            on_recipient_error=on_recipient_error,
        )

    return build
