"""Demo composition root.

Every concrete type in the demo is chosen here and nowhere else.  The
dispatch strategy for the alarm group and the inbox fan-out comes from
``Settings.dispatch``, so switching to concurrent dispatch is a config
change only.
"""

from __future__ import annotations

from composition_kit.assembly.assembler import AssemblyContext, CompositionAssembler
from composition_kit.core.config import Settings
from composition_kit.core.interfaces import IReportSink
from composition_kit.dispatch.dispatcher import create_dispatcher, dispatcher_from_config
from composition_kit.factory.message_factory import create_default_factory
from composition_kit.observability.reporting import LoggingReportSink, as_error_callback
from composition_kit.registration.store import RecipientSlot, RegistrationStore

from .recipients import BrokenSiren, Journal, KindFilter, LiftPanel, Siren
from .senders import Lift, MessageInbox, TemperatureSensor

DEMO_KINDS = ["door_opened", "lift_called", "temperature"]


def build_assembler(
    settings: Settings,
    report_sink: IReportSink | None = None,
) -> CompositionAssembler:
    """Declare the demo bindings. Call ``assemble()`` on the result once."""
    assembler = CompositionAssembler()
    dispatch = settings.dispatch

    def error_callback(ctx: AssemblyContext):
        if not settings.demo.report_failures:
            return None
        return as_error_callback(ctx.get("report_sink"))

    def sink(ctx: AssemblyContext) -> IReportSink:
        return report_sink if report_sink is not None else LoggingReportSink()

    def alarm_store(ctx: AssemblyContext) -> RegistrationStore:
        store = RegistrationStore(
            policy=settings.registration.policy,
            group_factory=dispatcher_from_config(
                dispatch,
                on_recipient_error=error_callback(ctx),
            ),
        )
        for name in settings.demo.sirens:
            store.register(Siren(name))
        for name in settings.demo.broken_sirens:
            store.register(BrokenSiren(name))
        return store

    def lift_observer(ctx: AssemblyContext) -> RecipientSlot:
        return RecipientSlot(
            ctx.get("lift_panel"),
            group_factory=dispatcher_from_config(
                dispatch,
                on_recipient_error=error_callback(ctx),
            ),
        )

    def inbox_recipient(ctx: AssemblyContext):
        return create_dispatcher(
            dispatch.mode,
            [
                ctx.get("journal"),
                ctx.get("lift_panel"),
                KindFilter({"temperature"}, ctx.get("alarm_store")),
            ],
            continue_on_error=dispatch.continue_on_error,
            timeout=dispatch.recipient_timeout_seconds,
            on_recipient_error=error_callback(ctx),
            name="inbox",
        )

    assembler.bind("report_sink", sink)
    assembler.bind(
        "factory",
        lambda ctx: create_default_factory(settings.factory.discriminator_field),
    )
    assembler.bind("alarm_store", alarm_store)
    assembler.bind("journal", lambda ctx: Journal())
    assembler.bind("lift_panel", lambda ctx: LiftPanel())
    assembler.bind(
        "sensor",
        lambda ctx: TemperatureSensor(
            ctx.assembler,
            ctx.get("alarm_store"),
            threshold_celsius=settings.demo.alarm_threshold_celsius,
        ),
    )
    assembler.bind(
        "lift",
        lambda ctx: Lift(ctx.assembler, lift_observer(ctx)),
    )
    assembler.bind("inbox_recipient", inbox_recipient)
    assembler.bind(
        "inbox",
        lambda ctx: MessageInbox(
            ctx.assembler, ctx.get("factory"), ctx.get("inbox_recipient"),
        ),
    )

    assembler.require("sensor", "lift", "inbox")
    assembler.expect_kinds("factory", DEMO_KINDS)
    return assembler
