"""
Root entrypoint for the notesync CLI.

This module defines the top‑level `notesync` command and mounts the
sub‑apps from the other modules under notesync/cli/:

    • notesync/cli/sync_cli.py     →  `notesync sync ...`
    • notesync/cli/capture_cli.py  →  `notesync capture ...`
    • notesync/cli/config_cli.py   →  `notesync config ...`

A typical first run:

    notesync config set SUPABASE_URL https://xyz.supabase.co
    notesync config set SUPABASE_SERVICE_ROLE_KEY <key>
    notesync config set SUPABASE_USER_ID <uuid>
    notesync config test
    notesync sync note "Projects/Alpha/Plan" --content "First draft"
"""

# ---------------------------------------------------------------------------
# Imports (must be at top to satisfy flake8 E402)
# ---------------------------------------------------------------------------
from dotenv import load_dotenv
import typer

from notesync.logging_utils import configure_logging

from .capture_cli import capture_app
from .config_cli import config_app
from .sync_cli import sync_app

# Load environment variables
load_dotenv()

# ---------------------------------------------------------------------------
# Root CLI application
# ---------------------------------------------------------------------------
cli = typer.Typer(
    help=(
        "Folder‑aware note sync to Supabase.\n\n"
        "Notes are addressed by slash‑delimited paths; missing folders are "
        "created on demand and notes are upserted by path."
    )
)


@cli.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Log library diagnostics to stderr."),
) -> None:
    configure_logging(debug)


# ---------------------------------------------------------------------------
# Register sub‑applications
# ---------------------------------------------------------------------------
cli.add_typer(sync_app, name="sync")
cli.add_typer(capture_app, name="capture")
cli.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Entry point for `python -m notesync.cli.main`
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    cli()
