"""CLI entry point for the composition toolkit."""

from __future__ import annotations

import json

import click

DEFAULT_CONFIG = "configs/demo.toml"


@click.group()
def main() -> None:
    """Composition Kit."""


@main.command()
@click.option("--config", default=DEFAULT_CONFIG, show_default=True, help="Config file path")
@click.option(
    "--mode",
    type=click.Choice(["sequential", "parallel"]),
    default=None,
    help="Dispatch mode override",
)
@click.option("--continue-on-error/--halt-on-error", default=None, help="Sequential failure policy")
@click.option("--reading", "readings", multiple=True, type=float, help="Temperature reading (repeatable)")
@click.option(
    "--messages",
    "messages_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON-lines file of raw messages",
)
def demo(
    config: str,
    mode: str | None,
    continue_on_error: bool | None,
    readings: tuple[float, ...],
    messages_path: str | None,
) -> None:
    """Assemble the demo composition root and drive it."""
    import asyncio

    from .main import run

    overrides: dict = {}
    if mode is not None:
        overrides.setdefault("dispatch", {})["mode"] = mode
    if continue_on_error is not None:
        overrides.setdefault("dispatch", {})["continue_on_error"] = continue_on_error

    raw_messages = _read_messages(messages_path) if messages_path else []

    summary = asyncio.run(
        run(
            config_path=config,
            overrides=overrides,
            readings=readings,
            raw_messages=raw_messages,
        )
    )
    click.echo(json.dumps(summary.as_dict(), indent=2))


@main.command()
def kinds() -> None:
    """List the message kinds the default factory can build."""
    from .factory.message_factory import create_default_factory

    for kind in create_default_factory().known_kinds():
        click.echo(kind)


@main.command("show-config")
@click.option("--config", default=DEFAULT_CONFIG, show_default=True, help="Config file path")
def show_config(config: str) -> None:
    """Print the effective settings as JSON."""
    from .core.config import load_settings
    from .core.errors import ConfigError
    from .main import describe_settings

    settings = load_settings(config_path=config)
    try:
        settings.validate_dispatch()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(describe_settings(settings), indent=2))


def _read_messages(path: str) -> list[dict]:
    messages = []
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                messages.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise click.ClickException(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
    return messages


if __name__ == "__main__":
    main()
