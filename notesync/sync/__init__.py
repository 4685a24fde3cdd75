"""
Public sync API surface.

External callers (CLI, services, tests) should import from here rather than
reaching into submodules directly:

    • FolderResolver   — path → folder id, with the resolution cache
    • NoteSynchronizer — best‑effort and strict note upserts
"""

from .folder_resolution import FolderResolver, parent_path, split_path
from .note_sync import NoteSynchronizer

__all__ = [
    "FolderResolver",
    "NoteSynchronizer",
    "parent_path",
    "split_path",
]
