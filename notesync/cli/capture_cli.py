"""
`notesync capture save "<text>"`: the local‑first capture flow.

The note is always written to the notes directory first. If Supabase is
configured, the same note is then synced in the background; a sync failure
is reported but never loses the local file and never changes the exit code.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from notesync.capture import LocalNoteStore, NoteCapture, TitleGenerator
from notesync.capture.orchestrator import CaptureResult
from notesync.cli import common
from notesync.config import ANTHROPIC_API_KEY
from notesync.errors import LocalWriteError
from notesync.logging_utils import log_verbose

capture_app = typer.Typer(help="Capture a note locally and mirror it to Supabase.")


async def _capture(capture: NoteCapture, text: str, folder: str) -> Tuple[CaptureResult, List[bool]]:
    result = await capture.save(text, folder=folder)
    outcomes = await capture.drain()
    return result, outcomes


@capture_app.command("save")
def save_command(
    text: str = typer.Argument(..., help="The note text."),
    folder: str = typer.Option("", "--folder", help='Remote folder, e.g. "Inbox/Voice".'),
    notes_dir: Optional[Path] = typer.Option(
        None,
        "--notes-dir",
        file_okay=False,
        dir_okay=True,
        help="Local notes directory (defaults to NOTES_DIR or ~/Notes).",
    ),
    no_sync: bool = typer.Option(False, "--no-sync", help="Only write the local file."),
    verbose: bool = typer.Option(False, "--verbose", help="Show high‑level progress logs."),
) -> None:
    """Save a note to disk, then sync it to Supabase when configured."""
    store = common.get_store()

    local_store = LocalNoteStore(notes_dir or store.notes_dir())
    titles = TitleGenerator.for_api_key(store.get(ANTHROPIC_API_KEY))

    service = None
    if not no_sync and store.load().is_configured:
        service = common.build_service(store)
    else:
        log_verbose("Remote sync disabled; saving locally only.", verbose)

    capture = NoteCapture(local_store, titles, service)

    try:
        result, outcomes = asyncio.run(_capture(capture, text, folder))
    except LocalWriteError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    typer.echo(f"Saved {result.saved.file_path}")

    if result.sync_scheduled:
        if all(outcomes):
            log_verbose(f"Synced to Supabase as {result.remote_path!r}.", verbose)
        else:
            typer.echo("Warning: remote sync failed; the note is kept locally.")
