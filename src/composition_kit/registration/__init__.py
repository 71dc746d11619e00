"""Recipient registration: multi-recipient store and single-slot holder."""

from composition_kit.registration.store import RecipientSlot, RegistrationStore

__all__ = ["RecipientSlot", "RegistrationStore"]
