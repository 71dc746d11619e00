"""Base class for senders wired by the composition assembler."""

from __future__ import annotations

from composition_kit.assembly.assembler import CompositionAssembler


class ComposedSender:
    """A sender whose operations are only valid after assembly.

    Subclasses call ``self._ensure_composed("<operation>")`` at the top of
    every public operation.
    """

    def __init__(self, assembler: CompositionAssembler) -> None:
        self._assembler = assembler

    def _ensure_composed(self, operation: str) -> None:
        self._assembler.ensure_composed(f"{type(self).__name__}.{operation}")
