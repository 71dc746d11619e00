"""Custom exception hierarchy for the composition toolkit."""

from __future__ import annotations

from typing import Any


class CompositionError(Exception):
    """Base exception for all composition toolkit errors."""


# --- Configuration ---
class ConfigError(CompositionError):
    """Invalid or missing configuration."""


# --- Assembly ---
class AssemblyError(CompositionError):
    """Composition root misconfiguration. Fatal, raised before any dispatch."""


class NotYetComposed(CompositionError):
    """A sender was used before assembly completed."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(
            f"Cannot run '{operation}': composition is {state}, not assembled"
        )


# --- Factory ---
class FactoryError(CompositionError):
    """Message factory failure."""


class UnrecognizedInputKind(FactoryError):
    """Raw input carried a discriminator matching no known message kind."""

    def __init__(self, kind: Any, known: list[str] | None = None):
        self.kind = kind
        self.known = list(known or [])
        available = ", ".join(self.known) or "none"
        super().__init__(
            f"Unrecognized input kind {kind!r}. Known kinds: {available}"
        )


class MalformedInput(FactoryError):
    """Raw input names a known kind but its fields do not validate."""

    def __init__(self, kind: str, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(f"Malformed input for kind {kind!r}: {reason}")


class DuplicateKindError(FactoryError):
    """A message kind was registered twice on the same factory."""


# --- Registration ---
class DuplicateRecipientError(CompositionError):
    """The same recipient instance appears twice in a broadcast group."""


# --- Dispatch ---
class DispatchError(CompositionError):
    """Recipient dispatch failure."""


class RecipientFailure(DispatchError):
    """A single recipient raised while handling a dispatched value."""

    def __init__(self, recipient: Any, cause: BaseException):
        self.recipient = recipient
        self.cause = cause
        self.recipient_name = recipient_name(recipient)
        super().__init__(
            f"Recipient {self.recipient_name} failed: "
            f"{type(cause).__name__}: {cause}"
        )
        self.__cause__ = cause


class CompositeDispatchFailure(DispatchError):
    """One or more recipients failed during a single broadcast."""

    def __init__(self, failures: list[RecipientFailure]):
        self.failures = list(failures)
        names = ", ".join(f.recipient_name for f in self.failures)
        super().__init__(
            f"{len(self.failures)} recipient(s) failed during dispatch: {names}"
        )

    def __len__(self) -> int:
        return len(self.failures)


def recipient_name(recipient: Any) -> str:
    """Best-effort readable name for a recipient, used in errors and logs."""
    name = getattr(recipient, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(recipient).__name__
