"""Registration store for the recipients of one sender.

Copy-on-write: every mutation builds a new tuple under a lock and swaps it
in, while readers grab the current tuple reference.  A dispatch that took
its snapshot before a concurrent ``register()`` keeps iterating the old
tuple, so it never sees a partially updated sequence.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

from composition_kit.core.enums import RegistrationPolicy
from composition_kit.core.errors import recipient_name
from composition_kit.core.interfaces import NOOP_RECIPIENT, IRecipient

logger = logging.getLogger(__name__)

# Builds one capability out of several recipients (see dispatch.dispatcher).
GroupFactory = Callable[[Sequence[IRecipient]], IRecipient]


class RegistrationStore:
    """Ordered recipients registered with a single sender.

    Parameters
    ----------
    policy:
        ``RegistrationPolicy.MANY`` appends every registration;
        ``RegistrationPolicy.SINGLE`` replaces the previous recipient.
    group_factory:
        Builds the group ``as_recipient()`` and ``notify`` dispatch through.
        Defaults to a halting ``SequentialBroadcast``.
    """

    def __init__(
        self,
        policy: RegistrationPolicy = RegistrationPolicy.MANY,
        group_factory: GroupFactory | None = None,
    ) -> None:
        self._policy = policy
        self._group_factory = group_factory
        self._lock = threading.Lock()
        self._recipients: tuple[IRecipient, ...] = ()
        # (snapshot, group) built for that exact snapshot
        self._group: tuple[tuple[IRecipient, ...], IRecipient] | None = None

    @property
    def policy(self) -> RegistrationPolicy:
        return self._policy

    def register(self, recipient: IRecipient) -> None:
        """Add *recipient*; replaces the previous one under the SINGLE policy.

        Registering the same instance twice is allowed and results in two
        dispatch calls.
        """
        if recipient is None:
            raise TypeError("Cannot register None as a recipient")
        with self._lock:
            if self._policy == RegistrationPolicy.SINGLE:
                self._recipients = (recipient,)
            else:
                self._recipients = self._recipients + (recipient,)
            count = len(self._recipients)
        logger.debug(
            "Registered recipient=%s policy=%s count=%d",
            recipient_name(recipient),
            self._policy.value,
            count,
        )

    def unregister(self, recipient: IRecipient) -> bool:
        """Remove the first registration of *recipient*.

        Returns ``True`` if a registration was removed.
        """
        with self._lock:
            current = list(self._recipients)
            for idx, existing in enumerate(current):
                if existing is recipient:
                    del current[idx]
                    self._recipients = tuple(current)
                    return True
        return False

    def clear(self) -> None:
        """Drop every registration."""
        with self._lock:
            self._recipients = ()

    def current_recipients(self) -> tuple[IRecipient, ...]:
        """Snapshot of the registered recipients in registration order.

        Returns a one-element tuple holding the no-op recipient when
        nothing is registered.
        """
        snapshot = self._recipients
        if not snapshot:
            return (NOOP_RECIPIENT,)
        return snapshot

    def as_recipient(self) -> IRecipient:
        """Collapse the current snapshot into a single capability.

        The group is cached per snapshot, so repeated dispatches share one
        set of error counters and dead letters until the registrations
        change.
        """
        snapshot = self._recipients
        if not snapshot:
            return NOOP_RECIPIENT
        return self._group_for(snapshot)

    def _group_for(self, snapshot: tuple[IRecipient, ...]) -> IRecipient:
        cached = self._group
        if cached is not None and cached[0] is snapshot:
            return cached[1]
        group = _build_group(self._group_factory, snapshot)
        with self._lock:
            if self._recipients is snapshot:
                self._group = (snapshot, group)
        return group

    async def notify(self, value: Any) -> None:
        """Dispatch *value* to the current snapshot of recipients.

        Always goes through a broadcast group, so a failing recipient
        surfaces as ``RecipientFailure`` even when it is the only one.
        """
        snapshot = self._recipients
        if not snapshot:
            return
        await self._group_for(snapshot).notify(value)

    def __len__(self) -> int:
        return len(self._recipients)

    def __repr__(self) -> str:
        names = [recipient_name(r) for r in self._recipients]
        return f"RegistrationStore(policy={self._policy.value}, recipients={names})"


class RecipientSlot:
    """Runtime-swappable holder for exactly one recipient.

    The capacity-one case of ``RegistrationStore``, guarded the same way:
    dispatch goes through a one-member group, so a failing observer
    surfaces as ``RecipientFailure`` and is counted and reported there.
    """

    def __init__(
        self,
        recipient: IRecipient | None = None,
        group_factory: GroupFactory | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._recipient: IRecipient | None = recipient
        self._group_factory = group_factory
        self._group: tuple[IRecipient, IRecipient] | None = None

    def set(self, recipient: IRecipient) -> IRecipient | None:
        """Install *recipient*, returning the one it replaced (if any)."""
        if recipient is None:
            raise TypeError("Cannot register None as a recipient")
        with self._lock:
            previous, self._recipient = self._recipient, recipient
        return previous

    def get(self) -> IRecipient:
        """Current recipient, or the no-op recipient when the slot is empty."""
        current = self._recipient
        return current if current is not None else NOOP_RECIPIENT

    def clear(self) -> IRecipient | None:
        with self._lock:
            previous, self._recipient = self._recipient, None
        return previous

    @property
    def is_empty(self) -> bool:
        return self._recipient is None

    def as_recipient(self) -> IRecipient:
        """The group wrapping the current recipient (no-op when empty)."""
        current = self._recipient
        if current is None:
            return NOOP_RECIPIENT
        cached = self._group
        if cached is not None and cached[0] is current:
            return cached[1]
        group = _build_group(self._group_factory, (current,))
        with self._lock:
            if self._recipient is current:
                self._group = (current, group)
        return group

    async def notify(self, value: Any) -> None:
        """Forward *value* to whatever recipient is currently installed."""
        await self.as_recipient().notify(value)


def _build_group(
    group_factory: GroupFactory | None, recipients: Sequence[IRecipient],
) -> IRecipient:
    if group_factory is not None:
        return group_factory(recipients)
    from composition_kit.dispatch.broadcast import SequentialBroadcast

    return SequentialBroadcast(recipients, allow_duplicates=True)
