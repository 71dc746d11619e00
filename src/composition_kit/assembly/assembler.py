"""Composition assembler.

The single place where concrete types are chosen and wired into the
capabilities senders depend on.  Assembly runs once::

    assembler = CompositionAssembler()
    assembler.bind("factory", lambda ctx: create_default_factory())
    assembler.bind("alarm", lambda ctx: Siren("hallway"))
    assembler.bind(
        "sensor",
        lambda ctx: TemperatureSensor(ctx.assembler, ctx.get("alarm")),
    )
    assembler.require("sensor")
    graph = assembler.assemble()

State machine: ``UNASSEMBLED -> ASSEMBLING -> ASSEMBLED``.  The first
transition happens once; a second ``assemble()`` is an ``AssemblyError``.
Senders built here call ``ensure_composed()`` before doing work and raise
``NotYetComposed`` until the graph is complete.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from composition_kit.core.enums import AssemblyState
from composition_kit.core.errors import AssemblyError, NotYetComposed

logger = logging.getLogger(__name__)

Provider = Callable[["AssemblyContext"], Any]


class AssemblyGraph(Mapping[str, Any]):
    """Immutable capability-name -> instance mapping produced by assembly."""

    def __init__(self, bindings: Mapping[str, Any]) -> None:
        self._bindings = MappingProxyType(dict(bindings))

    def __getitem__(self, name: str) -> Any:
        try:
            return self._bindings[name]
        except KeyError:
            raise KeyError(f"No capability bound under '{name}'") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def names(self) -> list[str]:
        return list(self._bindings)

    def __repr__(self) -> str:
        return f"AssemblyGraph({self.names()})"


class AssemblyContext:
    """Handed to providers so they can pull in other capabilities.

    Resolution is memoised, so every provider runs at most once and all
    consumers share its instance.
    """

    def __init__(self, assembler: CompositionAssembler) -> None:
        self._assembler = assembler
        self._resolved: dict[str, Any] = {}
        self._resolving: list[str] = []

    @property
    def assembler(self) -> CompositionAssembler:
        return self._assembler

    def get(self, name: str) -> Any:
        """Resolve capability *name*, building it on first use."""
        if name in self._resolved:
            return self._resolved[name]
        if name in self._resolving:
            cycle = " -> ".join(self._resolving[self._resolving.index(name):] + [name])
            raise AssemblyError(f"Dependency cycle: {cycle}")

        provider = self._assembler._providers.get(name)
        if provider is None:
            requester = self._resolving[-1] if self._resolving else "<root>"
            raise AssemblyError(
                f"Capability '{name}' requested by '{requester}' is not bound"
            )

        self._resolving.append(name)
        try:
            instance = provider(self)
        except AssemblyError:
            raise
        except Exception as exc:
            raise AssemblyError(
                f"Provider for '{name}' failed: {type(exc).__name__}: {exc}"
            ) from exc
        finally:
            self._resolving.pop()

        if instance is None:
            raise AssemblyError(f"Provider for '{name}' returned None")
        self._resolved[name] = instance
        return instance

    def resolved(self) -> dict[str, Any]:
        return dict(self._resolved)


class CompositionAssembler:
    """Composition root.

    Collects provider bindings while ``UNASSEMBLED``, builds every one of
    them in a single ``assemble()`` call and then freezes the result.
    """

    def __init__(self) -> None:
        self._state = AssemblyState.UNASSEMBLED
        self._providers: dict[str, Provider] = {}
        self._required: list[str] = []
        self._expected_kinds: dict[str, list[str]] = {}
        self._graph: AssemblyGraph | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> AssemblyState:
        return self._state

    @property
    def is_assembled(self) -> bool:
        return self._state == AssemblyState.ASSEMBLED

    @property
    def graph(self) -> AssemblyGraph:
        """The assembled graph. Raises ``NotYetComposed`` before assembly."""
        self.ensure_composed("graph")
        assert self._graph is not None
        return self._graph

    def ensure_composed(self, operation: str = "operation") -> None:
        """Raise ``NotYetComposed`` unless assembly has completed."""
        if self._state != AssemblyState.ASSEMBLED:
            raise NotYetComposed(operation, self._state.value)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def bind(self, name: str, provider: Provider) -> None:
        """Declare *provider* as the source of capability *name*."""
        self._ensure_declaring("bind")
        if name in self._providers:
            raise AssemblyError(f"Capability '{name}' is already bound")
        self._providers[name] = provider

    def require(self, *names: str) -> None:
        """Mark capabilities that must be bound before assembly can finish."""
        self._ensure_declaring("require")
        for name in names:
            if name not in self._required:
                self._required.append(name)

    def expect_kinds(self, name: str, kinds: Iterable[str]) -> None:
        """Require factory capability *name* to build every kind in *kinds*."""
        self._ensure_declaring("expect_kinds")
        self._expected_kinds.setdefault(name, []).extend(kinds)
        self.require(name)

    def _ensure_declaring(self, operation: str) -> None:
        if self._state != AssemblyState.UNASSEMBLED:
            raise AssemblyError(
                f"Cannot {operation}: composition is already {self._state.value}"
            )

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def assemble(self) -> AssemblyGraph:
        """Build every binding and freeze the result.

        Raises
        ------
        AssemblyError
            On a second call, a missing required binding, a dependency
            cycle, a failing provider or a factory missing expected kinds.
        """
        if self._state != AssemblyState.UNASSEMBLED:
            raise AssemblyError(
                f"assemble() may run once; composition is {self._state.value}"
            )
        self._state = AssemblyState.ASSEMBLING
        logger.info("Assembling %d capability binding(s)", len(self._providers))

        missing = [name for name in self._required if name not in self._providers]
        if missing:
            raise AssemblyError(
                f"Required capabilities not bound: {', '.join(missing)}"
            )

        ctx = AssemblyContext(self)
        for name in self._providers:
            ctx.get(name)
        resolved = ctx.resolved()

        for name, kinds in self._expected_kinds.items():
            self._verify_kinds(name, resolved[name], kinds)

        self._graph = AssemblyGraph(
            {name: resolved[name] for name in self._providers}
        )
        self._state = AssemblyState.ASSEMBLED
        logger.info("Assembly complete: %s", ", ".join(self._graph.names()))
        return self._graph

    @staticmethod
    def _verify_kinds(name: str, factory: Any, kinds: list[str]) -> None:
        missing_kinds = getattr(factory, "missing_kinds", None)
        if missing_kinds is None:
            raise AssemblyError(
                f"Capability '{name}' is not a factory; cannot verify kinds"
            )
        missing = missing_kinds(kinds)
        if missing:
            raise AssemblyError(
                f"Factory '{name}' cannot build kinds: {', '.join(missing)}"
            )
