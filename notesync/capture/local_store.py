"""
Local note persistence.

Notes are written as Markdown files with a small YAML front‑matter header:

    ---
    created: '2026-10-19T09:30:00'
    title: Plan the alpha launch
    ---
    # Plan the alpha launch

    ...raw text...

The file name is the sanitized title. When a file with that name already
exists, " 2" … " 99" is appended, then a short random suffix. The file name
without ".md" doubles as the note's logical path in Supabase.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import frontmatter

from notesync.capture.titles import sanitize_title
from notesync.errors import LocalWriteError

NOTE_SUFFIX = ".md"
MAX_NUMBERED_SUFFIX = 99
UNTITLED = "Untitled"


@dataclass(frozen=True)
class SavedNote:
    file_path: Path
    note_path: str
    title: str
    content: str


def render_body(title: str, text: str) -> str:
    return f"# {title}\n\n{text}"


class LocalNoteStore:
    """Writes captured notes into a single directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory).expanduser()

    def _unique_file_name(self, title: str) -> str:
        base = sanitize_title(title) or UNTITLED

        candidate = f"{base}{NOTE_SUFFIX}"
        if not (self.directory / candidate).exists():
            return candidate

        for i in range(2, MAX_NUMBERED_SUFFIX + 1):
            candidate = f"{base} {i}{NOTE_SUFFIX}"
            if not (self.directory / candidate).exists():
                return candidate

        return f"{base} {secrets.token_hex(3)}{NOTE_SUFFIX}"

    def save(self, title: str, text: str) -> SavedNote:
        """
        Persist a note and return where it went.

        Raises
        ------
        LocalWriteError
            If the directory cannot be created or the file cannot be written.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalWriteError(f"Cannot create notes directory {self.directory}: {e}") from e

        file_name = self._unique_file_name(title)
        file_path = self.directory / file_name
        body = render_body(title, text)

        post = frontmatter.Post(
            body,
            title=title,
            created=datetime.now().isoformat(timespec="seconds"),
        )
        try:
            file_path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
        except OSError as e:
            raise LocalWriteError(f"Cannot write note {file_path}: {e}") from e

        return SavedNote(
            file_path=file_path,
            note_path=file_name[: -len(NOTE_SUFFIX)],
            title=title,
            content=body,
        )
