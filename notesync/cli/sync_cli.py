"""
Command‑line interface for pushing notes and folders to Supabase.

Mounted in notesync/cli/main.py as `notesync sync`:

    • notesync sync note <path> --title T --content C
    • notesync sync note <path> --file note.md [--strict]
    • notesync sync folder <path>

`sync note` uses the best‑effort entry point by default and only reports
success or failure. With --strict it uses the strict entry point and prints
the typed error, which is what you want while setting things up.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional, Tuple

import frontmatter
import typer

from notesync.cli import common
from notesync.errors import SyncError
from notesync.logging_utils import log_verbose
from notesync.sync.folder_resolution import split_path

sync_app = typer.Typer(help="Push notes and folder chains to Supabase.")


# ---------------------------------------------------------------------------
# Helper: load a note body (and optional title) from disk
# ---------------------------------------------------------------------------
def load_note_file(path: Path) -> Tuple[str, Optional[str]]:
    """
    Read a Markdown note.

    Files written by `notesync capture` carry a front‑matter header; its
    `title` is used when --title is not given. Plain files work too.

    Returns
    -------
    (content, title or None)
    """
    if not path.exists():
        raise FileNotFoundError(f"Note file not found: {path}")

    post = frontmatter.load(str(path))
    title = post.get("title")
    return post.content, str(title) if title else None


def resolve_note_input(
    path: str,
    title: Optional[str],
    content: Optional[str],
    file: Optional[Path],
) -> Tuple[str, str]:
    """Pick content and title from the options; the last path segment is the fallback title."""
    file_title = None
    if file is not None:
        content, file_title = load_note_file(file)

    if content is None:
        raise ValueError("Provide the note body with --content or --file")

    segments = split_path(path)
    default_title = segments[-1] if segments else ""
    return content, title or file_title or default_title


# ---------------------------------------------------------------------------
# Command: sync note <path>
# ---------------------------------------------------------------------------
@sync_app.command("note")
def sync_note_command(
    path: str = typer.Argument(..., help='Logical note path, e.g. "Projects/Alpha/Plan".'),
    title: Optional[str] = typer.Option(None, "--title", help="Note title."),
    content: Optional[str] = typer.Option(None, "--content", help="Note body."),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Read the note body from a Markdown file.",
    ),
    strict: bool = typer.Option(False, "--strict", help="Fail with the backend error instead of a yes/no result."),
    verbose: bool = typer.Option(False, "--verbose", help="Show high‑level progress logs."),
    debug: bool = typer.Option(False, "--debug", help="Print the record sent to Supabase."),
) -> None:
    """Upsert one note, creating its folder chain on demand."""
    try:
        body, note_title = resolve_note_input(path, title, content, file)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    service = common.build_service(common.get_store())
    log_verbose(f"Syncing note {path!r}...", verbose)

    if not strict:
        ok = asyncio.run(service.sync_note(path, note_title, body))
        if not ok:
            typer.echo("Sync failed (run with --strict for details).")
            raise typer.Exit(code=1)
        typer.echo(f"Synced {path}")
        return

    try:
        record = asyncio.run(service.push_note(path, note_title, body))
    except (SyncError, ValueError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    log_verbose("Supabase upsert completed.", verbose)
    if debug:
        typer.echo(json.dumps(record, indent=2, ensure_ascii=False))
    typer.echo(f"Synced {path}")


# ---------------------------------------------------------------------------
# Command: sync folder <path>
# ---------------------------------------------------------------------------
@sync_app.command("folder")
def sync_folder_command(
    path: str = typer.Argument(..., help='Folder path, e.g. "Projects/Alpha".'),
) -> None:
    """Resolve (and create if needed) a folder chain, then print the leaf id."""
    service = common.build_service(common.get_store())
    try:
        folder_id = asyncio.run(service.ensure_folder(path))
    except SyncError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    typer.echo(folder_id if folder_id is not None else "(root)")
