"""Reporting sinks for recipient failures.

A sink is the outside collaborator that hears about recipients a sender
could not reach.  ``as_error_callback`` adapts any sink to the
``on_recipient_error`` hook of the broadcast groups.
"""

from __future__ import annotations

from typing import Any

from composition_kit.core.interfaces import IReportSink
from composition_kit.observability.logger import get_logger


class LoggingReportSink:
    """Writes one structured log record per failed recipient."""

    def __init__(self, component: str = "dispatch") -> None:
        self._log = get_logger("composition_kit.reporting").bind(component=component)
        self._reported = 0

    def report_failure(self, recipient_name: str, error: BaseException) -> None:
        self._reported += 1
        self._log.warning(
            "cannot secure recipient",
            recipient=recipient_name,
            error_type=type(error).__name__,
            error=str(error),
        )

    @property
    def reported(self) -> int:
        return self._reported


class CollectingReportSink:
    """Keeps reported failures in memory. Used by tests and the demo summary."""

    def __init__(self) -> None:
        self.failures: list[tuple[str, BaseException]] = []

    def report_failure(self, recipient_name: str, error: BaseException) -> None:
        self.failures.append((recipient_name, error))


def as_error_callback(sink: IReportSink):
    """Adapt *sink* to the ``(recipient_name, value, exc)`` callback shape."""

    def callback(recipient_name: str, value: Any, exc: BaseException) -> None:
        sink.report_failure(recipient_name, exc)

    return callback
