"""Composition root: one-shot wiring of concrete implementations."""

from composition_kit.assembly.assembler import (
    AssemblyContext,
    AssemblyGraph,
    CompositionAssembler,
)
from composition_kit.assembly.sender import ComposedSender

__all__ = [
    "AssemblyContext",
    "AssemblyGraph",
    "ComposedSender",
    "CompositionAssembler",
]
