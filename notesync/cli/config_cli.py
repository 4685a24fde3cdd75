"""
`notesync config`: inspect and edit the settings stored in `.env`.

    • notesync config show
    • notesync config set SUPABASE_URL https://xyz.supabase.co
    • notesync config unset SUPABASE_USER_ID
    • notesync config test
"""

import asyncio

import typer

from notesync.cli import common
from notesync.config import KNOWN_KEYS, SUPABASE_SERVICE_ROLE_KEY, ANTHROPIC_API_KEY
from notesync.errors import SyncError

config_app = typer.Typer(help="Show, edit and test the sync settings.")

SECRET_KEYS = (SUPABASE_SERVICE_ROLE_KEY, ANTHROPIC_API_KEY)


def mask(value: str) -> str:
    if not value:
        return ""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}…{value[-4:]}"


@config_app.command("show")
def show_command() -> None:
    """Print every known setting (secrets are masked)."""
    store = common.get_store()
    values = store.values()
    for key in KNOWN_KEYS:
        value = values.get(key, "")
        shown = mask(value) if key in SECRET_KEYS else value
        typer.echo(f"{key}={shown or '(not set)'}")


@config_app.command("set")
def set_command(key: str, value: str) -> None:
    """Store a setting in the `.env` file."""
    store = common.get_store()
    try:
        store.set(key, value)
    except KeyError as e:
        typer.echo(f"Error: {e.args[0]}")
        raise typer.Exit(code=1)
    typer.echo(f"Saved {key}")


@config_app.command("unset")
def unset_command(key: str) -> None:
    """Remove a setting from the `.env` file."""
    store = common.get_store()
    try:
        store.unset(key)
    except KeyError as e:
        typer.echo(f"Error: {e.args[0]}")
        raise typer.Exit(code=1)
    typer.echo(f"Removed {key}")


@config_app.command("test")
def test_command() -> None:
    """Probe the notes table with the current settings."""
    service = common.build_service(common.get_store())
    try:
        asyncio.run(service.verify_connection())
    except SyncError as e:
        typer.echo(f"Connection failed: {e}")
        raise typer.Exit(code=1)
    typer.echo("OK")
