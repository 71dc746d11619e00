"""Test reporting sinks and their use as dispatch error callbacks."""

import pytest
import structlog

from composition_kit.core.errors import CompositeDispatchFailure
from composition_kit.core.interfaces import IReportSink
from composition_kit.dispatch.broadcast import ParallelBroadcast
from composition_kit.main import run
from composition_kit.observability.logger import current_run_id, start_run
from composition_kit.observability.reporting import (
    CollectingReportSink,
    LoggingReportSink,
    as_error_callback,
)

from tests.conftest import Failing, Recorder


class TestSinks:
    def test_sinks_satisfy_protocol(self):
        assert isinstance(LoggingReportSink(), IReportSink)
        assert isinstance(CollectingReportSink(), IReportSink)

    def test_logging_sink_counts_reports(self):
        sink = LoggingReportSink()
        sink.report_failure("siren", ConnectionError("down"))
        assert sink.reported == 1

    async def test_collecting_sink_via_callback(self):
        sink = CollectingReportSink()
        group = ParallelBroadcast(
            [Recorder("ok"), Failing("siren")],
            on_recipient_error=as_error_callback(sink),
        )
        with pytest.raises(CompositeDispatchFailure):
            await group.notify("alarm")
        assert [name for name, _ in sink.failures] == ["siren"]
        assert isinstance(sink.failures[0][1], RuntimeError)


class TestRunContext:
    def test_explicit_run_id_is_bound(self):
        assert start_run("abc") == "abc"
        assert current_run_id() == "abc"

    def test_generated_run_ids_differ(self):
        first = start_run()
        assert start_run() != first

    def test_new_run_drops_previous_context(self):
        start_run("one", mode="parallel")
        start_run("two")
        assert structlog.contextvars.get_contextvars() == {"run_id": "two"}

    async def test_run_binds_given_id(self, tmp_path):
        await run(
            config_path=tmp_path / "missing.toml",
            configure_logging=False,
            run_id="demo-1",
        )
        assert current_run_id() == "demo-1"
