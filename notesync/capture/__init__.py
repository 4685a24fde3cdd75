"""
Public capture API surface.

    • NoteCapture     — local‑first save with background sync
    • LocalNoteStore  — Markdown files with front matter
    • TitleGenerator  — heuristic or model‑generated titles
"""

from .local_store import LocalNoteStore, SavedNote
from .orchestrator import CaptureResult, NoteCapture
from .titles import TitleGenerator, fallback_title, sanitize_title

__all__ = [
    "CaptureResult",
    "LocalNoteStore",
    "NoteCapture",
    "SavedNote",
    "TitleGenerator",
    "fallback_title",
    "sanitize_title",
]
