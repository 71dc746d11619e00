"""Message registry and factory.

Concrete message types register themselves under a discriminator value
with ``@message_kind``.  ``MessageFactory`` holds a lookup table from
discriminator to constructor and is the only place that knows which
concrete type a piece of raw input becomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from composition_kit.core.errors import (
    DuplicateKindError,
    MalformedInput,
    UnrecognizedInputKind,
)
from composition_kit.core.interfaces import IMessage

logger = logging.getLogger(__name__)

MessageConstructor = Callable[[Mapping[str, Any]], IMessage]

_DEFAULT_KINDS: dict[str, MessageConstructor] = {}


def message_kind(kind: str):
    """Decorator to register a pydantic message class in the default catalogue."""

    def decorator(cls: type[BaseModel]) -> type[BaseModel]:
        if kind in _DEFAULT_KINDS:
            raise DuplicateKindError(f"Message kind '{kind}' already registered")
        _DEFAULT_KINDS[kind] = cls.model_validate
        return cls

    return decorator


def list_default_kinds() -> list[str]:
    """List all kinds in the default catalogue."""
    return sorted(_DEFAULT_KINDS.keys())


class MessageFactory:
    """Creates messages from raw mappings by reading a discriminator field.

    Parameters
    ----------
    discriminator_field:
        Key in the raw mapping that names the message kind.
    """

    def __init__(self, discriminator_field: str = "type") -> None:
        self._discriminator_field = discriminator_field
        self._constructors: dict[str, MessageConstructor] = {}

    @property
    def discriminator_field(self) -> str:
        return self._discriminator_field

    def register_kind(self, kind: str, constructor: MessageConstructor) -> None:
        """Map *kind* to *constructor*. Each kind maps to exactly one type."""
        if kind in self._constructors:
            raise DuplicateKindError(f"Message kind '{kind}' already registered")
        self._constructors[kind] = constructor

    def known_kinds(self) -> list[str]:
        return sorted(self._constructors.keys())

    def missing_kinds(self, required: Iterable[str]) -> list[str]:
        """Return the kinds from *required* this factory cannot build."""
        return sorted(set(required) - set(self._constructors))

    def create_from(self, raw: Mapping[str, Any]) -> IMessage:
        """Build the message named by the discriminator in *raw*.

        Raises
        ------
        UnrecognizedInputKind
            The discriminator is missing or matches no registered kind.
            Nothing is constructed in that case.
        MalformedInput
            The kind is known but the remaining fields do not validate.
        """
        kind = raw.get(self._discriminator_field)
        constructor = self._constructors.get(kind) if isinstance(kind, str) else None
        if constructor is None:
            raise UnrecognizedInputKind(kind, self.known_kinds())

        fields = {k: v for k, v in raw.items() if k != self._discriminator_field}
        try:
            message = constructor(fields)
        except ValidationError as exc:
            raise MalformedInput(
                kind, f"{exc.error_count()} validation error(s)",
            ) from exc

        logger.debug("Created message kind=%s", kind)
        return message

    def __contains__(self, kind: object) -> bool:
        return kind in self._constructors


def create_default_factory(discriminator_field: str = "type") -> MessageFactory:
    """Build a factory holding every kind in the default catalogue."""
    # Importing the module runs the @message_kind decorators.
    import composition_kit.factory.messages  # noqa: F401

    factory = MessageFactory(discriminator_field=discriminator_field)
    for kind, constructor in sorted(_DEFAULT_KINDS.items()):
        factory.register_kind(kind, constructor)
    return factory
