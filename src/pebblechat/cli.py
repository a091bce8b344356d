"""pebblechat command-line interface."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer

from pebblechat.appmessage import AppMessage
from pebblechat.channels import ChannelManager, MessageBus, StdioChannel
from pebblechat.config import USER_SETTING_KEYS, load_settings
from pebblechat.errors import InvalidSettingsPayloadError
from pebblechat.logging_utils import LogProfile, configure_logging
from pebblechat.orchestrator import ChatOrchestrator
from pebblechat.store import SettingsStore, configuration_url
from pebblechat.transcript import decode as decode_transcript

app = typer.Typer(name="pebblechat", help="Bridge a watch chat to the Claude Messages API", add_completion=False)
config_app = typer.Typer(help="Inspect and change saved settings", add_completion=False)
app.add_typer(config_app, name="config")


def _load_store(home: Path | None, *, profile: LogProfile = "console") -> SettingsStore:
    settings = load_settings()
    if home is not None:
        settings = settings.model_copy(update={"home": home})
    configure_logging(profile=profile, level=settings.log_level)
    return SettingsStore(settings)


def _mask(key: str, value: str) -> str:
    if key != "api_key":
        return value
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}…{value[-4:]}"


@app.command()
def chat(
    transcript: str = typer.Argument(..., help='Encoded transcript, e.g. "[U]hello"'),
    home: Path | None = typer.Option(None, "--home", help="Settings directory"),  # noqa: B008
) -> None:
    """Send one encoded transcript and print the app messages the watch would receive."""

    store = _load_store(home)
    orchestrator = ChatOrchestrator()

    async def emit(payload: AppMessage) -> None:
        typer.echo(json.dumps(payload, ensure_ascii=False))

    asyncio.run(orchestrator.handle(transcript, store.snapshot(), emit))


@app.command()
def decode(transcript: str = typer.Argument(..., help="Encoded transcript")) -> None:
    """Print the turns an encoded transcript decodes to."""

    turns = [turn.to_message() for turn in decode_transcript(transcript)]
    typer.echo(json.dumps(turns, ensure_ascii=False, indent=2))


@app.command()
def ready(home: Path | None = typer.Option(None, "--home", help="Settings directory")) -> None:  # noqa: B008
    """Print 1 when an API key is configured, else 0."""

    typer.echo("1" if _load_store(home).is_ready() else "0")


@app.command()
def serve(home: Path | None = typer.Option(None, "--home", help="Settings directory")) -> None:  # noqa: B008
    """Serve JSON-lines app messages on stdin/stdout until EOF."""

    # stdout carries the protocol; logs go to stderr.
    store = _load_store(home, profile="default")
    asyncio.run(_serve(store))


async def _serve(store: SettingsStore) -> None:
    bus = MessageBus()
    manager = ChannelManager(bus, ChatOrchestrator(), store)
    manager.register(StdioChannel(bus))
    await manager.start()
    try:
        await manager.wait_closed()
    finally:
        await manager.stop()


@config_app.command("show")
def config_show(home: Path | None = typer.Option(None, "--home", help="Settings directory")) -> None:  # noqa: B008
    """Show saved settings."""

    store = _load_store(home)
    values = store.values()
    for key in USER_SETTING_KEYS:
        value = values.get(key)
        typer.echo(f"{key}: {_mask(key, value) if value else '(unset)'}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help=f"One of: {', '.join(USER_SETTING_KEYS)}"),
    value: str = typer.Argument("", help="New value; empty clears the setting"),
    home: Path | None = typer.Option(None, "--home", help="Settings directory"),  # noqa: B008
) -> None:
    """Save or clear one setting."""

    if key not in USER_SETTING_KEYS:
        raise typer.BadParameter(f"unknown setting {key!r}", param_hint="key")
    store = _load_store(home)
    store.set(key, value)
    typer.echo(f"{key} {'saved' if value.strip() else 'cleared'}")


@config_app.command("url")
def config_url(home: Path | None = typer.Option(None, "--home", help="Settings directory")) -> None:  # noqa: B008
    """Print the settings page URL pre-filled with saved values."""

    store = _load_store(home)
    typer.echo(configuration_url(store.settings.config_page_url, store))


@config_app.command("apply")
def config_apply(
    response: str = typer.Argument(..., help="URL-encoded JSON returned by the settings page"),
    home: Path | None = typer.Option(None, "--home", help="Settings directory"),  # noqa: B008
) -> None:
    """Apply a settings page response: non-blank keys are saved, the rest cleared."""

    store = _load_store(home)
    try:
        store.apply_response(response)
    except InvalidSettingsPayloadError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"ready: {1 if store.is_ready() else 0}")
