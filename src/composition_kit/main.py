"""Application bootstrap.

Entry point for the demo: load config, assemble the composition root once,
then drive the assembled senders.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .core.config import Settings, load_settings
from .core.errors import DispatchError, FactoryError
from .core.interfaces import IReportSink
from .demo.wiring import build_assembler
from .observability.logger import setup_logging, start_run

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Outcome of one demo run."""

    readings: int = 0
    alarms_raised: int = 0
    messages: int = 0
    rejected_inputs: list[str] = field(default_factory=list)
    dispatch_failures: list[str] = field(default_factory=list)
    journal: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "readings": self.readings,
            "alarms_raised": self.alarms_raised,
            "messages": self.messages,
            "rejected_inputs": list(self.rejected_inputs),
            "dispatch_failures": list(self.dispatch_failures),
            "journal": list(self.journal),
        }


async def run(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    readings: Iterable[float] = (),
    raw_messages: Iterable[Mapping[str, Any]] = (),
    report_sink: IReportSink | None = None,
    configure_logging: bool = True,
    run_id: str | None = None,
) -> RunSummary:
    """Main entry point. Load config, assemble once, drive the senders."""

    # 1. Load settings
    settings = load_settings(config_path=config_path, overrides=overrides)
    settings.validate_dispatch()

    # 2. Set up logging
    if configure_logging:
        setup_logging(
            settings.observability.log_level,
            settings.observability.log_format.value,
        )
    run_id = start_run(run_id, mode=settings.dispatch.mode.value)

    logger.info(
        "Starting composition demo run=%s mode=%s continue_on_error=%s",
        run_id,
        settings.dispatch.mode.value,
        settings.dispatch.continue_on_error,
    )

    # 3. Composition root: runs exactly once, before any dispatch
    graph = build_assembler(settings, report_sink=report_sink).assemble()

    sensor = graph["sensor"]
    inbox = graph["inbox"]
    summary = RunSummary()

    # 4. Drive the senders
    for celsius in readings:
        summary.readings += 1
        try:
            if await sensor.report(celsius):
                summary.alarms_raised += 1
        except DispatchError as exc:
            logger.error("Reading %.1f not fully delivered: %s", celsius, exc)
            summary.dispatch_failures.append(str(exc))

    for raw in raw_messages:
        try:
            await inbox.receive(raw)
            summary.messages += 1
        except FactoryError as exc:
            logger.warning("Rejected input: %s", exc)
            summary.rejected_inputs.append(str(exc))
        except DispatchError as exc:
            logger.error("Message not fully delivered: %s", exc)
            summary.messages += 1
            summary.dispatch_failures.append(str(exc))

    summary.journal = list(graph["journal"].entries)
    logger.info(
        "Demo finished readings=%d alarms=%d messages=%d failures=%d",
        summary.readings,
        summary.alarms_raised,
        summary.messages,
        len(summary.dispatch_failures),
    )
    return summary


def describe_settings(settings: Settings) -> dict[str, Any]:
    """JSON-friendly dump of the effective settings."""
    return settings.model_dump(mode="json")
