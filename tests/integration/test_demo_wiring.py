"""Integration: the demo composition root end to end."""

import pytest

from composition_kit.core.config import Settings
from composition_kit.core.enums import AssemblyState
from composition_kit.core.errors import (
    CompositeDispatchFailure,
    NotYetComposed,
    RecipientFailure,
    UnrecognizedInputKind,
)
from composition_kit.demo.recipients import BrokenSiren, Siren
from composition_kit.demo.wiring import DEMO_KINDS, build_assembler
from composition_kit.main import run
from composition_kit.observability.reporting import CollectingReportSink

from tests.conftest import Failing, Recorder


def _settings(**dispatch) -> Settings:
    return Settings(dispatch=dispatch, demo={"sirens": ["hallway", "office"]})


class TestAssembly:
    def test_assembles_every_binding(self):
        assembler = build_assembler(_settings())
        graph = assembler.assemble()
        assert assembler.state == AssemblyState.ASSEMBLED
        assert {"sensor", "lift", "inbox", "factory"} <= set(graph.names())
        assert graph["factory"].known_kinds() == DEMO_KINDS

    async def test_senders_refuse_work_before_assembly(self):
        from composition_kit.demo.senders import TemperatureSensor
        from composition_kit.registration.store import RegistrationStore

        assembler = build_assembler(_settings())
        sensor = TemperatureSensor(assembler, RegistrationStore())
        with pytest.raises(NotYetComposed):
            await sensor.report(50.0)

    def test_alarm_listing_refused_before_assembly(self):
        from composition_kit.demo.senders import TemperatureSensor
        from composition_kit.registration.store import RegistrationStore

        sensor = TemperatureSensor(build_assembler(_settings()), RegistrationStore())
        with pytest.raises(NotYetComposed):
            sensor.alarms


class TestSensor:
    async def test_reading_above_threshold_sounds_every_siren(self):
        graph = build_assembler(_settings()).assemble()
        sensor = graph["sensor"]
        assert await sensor.report(10.0) is False
        assert await sensor.report(45.0) is True
        sirens = sensor.alarms
        assert [s.name for s in sirens] == ["hallway", "office"]
        assert all(len(s.sounded) == 1 for s in sirens)

    async def test_alarm_registered_after_assembly_is_notified(self):
        graph = build_assembler(_settings()).assemble()
        sensor = graph["sensor"]
        extra = Siren("garage")
        sensor.register_alarm(extra)
        await sensor.report(99.0)
        assert len(extra.sounded) == 1

    async def test_broken_siren_halts_by_default(self):
        settings = Settings(demo={"sirens": [], "broken_sirens": ["basement"]})
        graph = build_assembler(settings).assemble()
        sensor = graph["sensor"]
        sensor.register_alarm(Siren("late"))
        with pytest.raises(RecipientFailure):
            await sensor.report(40.0)
        assert sensor.alarms[1].sounded == []

    async def test_broken_siren_reported_with_continue_on_error(self):
        sink = CollectingReportSink()
        settings = Settings(
            dispatch={"continue_on_error": True},
            demo={"sirens": ["hallway"], "broken_sirens": ["basement"]},
        )
        graph = build_assembler(settings, report_sink=sink).assemble()
        sensor = graph["sensor"]
        with pytest.raises(CompositeDispatchFailure):
            await sensor.report(40.0)
        hallway, basement = sensor.alarms
        assert len(hallway.sounded) == 1
        assert isinstance(basement, BrokenSiren)
        assert [name for name, _ in sink.failures] == ["basement"]


class TestLift:
    async def test_observer_swap(self):
        graph = build_assembler(_settings()).assemble()
        lift, panel = graph["lift"], graph["lift_panel"]
        await lift.call(3)
        replacement = Recorder("replacement")
        assert lift.set_observer(replacement) is panel
        await lift.call(5)
        assert panel.floors == [3]
        assert [m.floor for m in replacement.received] == [5]

    async def test_failing_observer_surfaces_recipient_failure(self):
        sink = CollectingReportSink()
        graph = build_assembler(_settings(), report_sink=sink).assemble()
        lift = graph["lift"]
        lift.set_observer(Failing("display", OSError("no power")))
        with pytest.raises(RecipientFailure) as info:
            await lift.call(2)
        assert info.value.recipient_name == "display"
        assert isinstance(info.value.__cause__, OSError)
        assert [name for name, _ in sink.failures] == ["display"]


class TestInbox:
    async def test_message_fans_out(self):
        graph = build_assembler(_settings(mode="parallel")).assemble()
        inbox = graph["inbox"]
        message = await inbox.receive({"type": "door_opened", "door_id": "front"})
        assert message.kind == "door_opened"
        assert graph["journal"].entries == ["door front opened"]

    async def test_only_temperature_messages_reach_alarms(self):
        graph = build_assembler(_settings()).assemble()
        inbox, sensor = graph["inbox"], graph["sensor"]
        await inbox.receive({"type": "door_opened", "door_id": "back"})
        await inbox.receive({"type": "lift_called", "floor": 4})
        assert all(s.sounded == [] for s in sensor.alarms)
        await inbox.receive({"type": "temperature", "sensor_id": "s2", "celsius": 41})
        assert [len(s.sounded) for s in sensor.alarms] == [1, 1]
        assert graph["lift_panel"].floors == [4]

    async def test_unknown_kind_reaches_no_recipient(self):
        graph = build_assembler(_settings()).assemble()
        with pytest.raises(UnrecognizedInputKind):
            await graph["inbox"].receive({"type": "flood"})
        assert graph["journal"].entries == []
        assert graph["inbox"].received == 0


class TestRun:
    async def test_run_summary(self):
        sink = CollectingReportSink()
        summary = await run(
            overrides={
                "dispatch": {"continue_on_error": True},
                "demo": {"sirens": ["hallway"], "broken_sirens": ["basement"]},
            },
            readings=[12.0, 33.0],
            raw_messages=[
                {"type": "lift_called", "floor": 1},
                {"type": "volcano"},
                {"type": "lift_called", "floor": -4},
                {"type": "temperature", "sensor_id": "s9", "celsius": 50},
            ],
            report_sink=sink,
            configure_logging=False,
        )
        assert summary.readings == 2
        assert summary.alarms_raised == 0
        assert len(summary.dispatch_failures) == 2
        assert summary.messages == 2
        assert len(summary.rejected_inputs) == 2
        assert summary.journal == ["lift main called to floor 1", "s9 reads 50.0C"]
        assert [name for name, _ in sink.failures] == ["basement", "basement"]
