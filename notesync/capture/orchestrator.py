"""
Capture orchestrator: title → local file → background remote sync.

The sequencing is strict and local‑first:

    1. Generate a title (never fails; falls back to a heuristic)
    2. Write the note to the local notes directory (failures propagate)
    3. Schedule a best‑effort Supabase sync for the saved note

Step 3 runs as a fire‑and‑forget task. Its outcome never rolls back or
delays step 2; callers that need to wait for it (the CLI before exit,
tests) call drain().
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from notesync.capture.local_store import LocalNoteStore, SavedNote
from notesync.capture.titles import TitleGenerator
from notesync.logging_utils import get_logger
from notesync.supabase_service import SupabaseSyncService
from notesync.sync.folder_resolution import split_path

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaptureResult:
    saved: SavedNote
    remote_path: str
    sync_scheduled: bool


class NoteCapture:
    """
    Save captured text locally and mirror it to Supabase when configured.

    Parameters
    ----------
    store : LocalNoteStore
        Where notes are written.
    titles : TitleGenerator
        Produces the note title.
    service : SupabaseSyncService | None
        Remote sync target. When None, notes are only written locally.
    """

    def __init__(
        self,
        store: LocalNoteStore,
        titles: TitleGenerator,
        service: Optional[SupabaseSyncService] = None,
    ) -> None:
        self.store = store
        self.titles = titles
        self.service = service
        self._pending: List["asyncio.Task[bool]"] = []

    async def save(self, text: str, folder: str = "") -> CaptureResult:
        """
        Capture one note.

        Raises
        ------
        LocalWriteError
            If the local file could not be written. No sync is attempted.
        """
        title = await self.titles.generate(text)
        saved = self.store.save(title, text)

        remote_path = "/".join(split_path(folder) + [saved.note_path])

        if self.service is None:
            return CaptureResult(saved=saved, remote_path=remote_path, sync_scheduled=False)

        task = asyncio.create_task(
            self.service.sync_note(remote_path, saved.title, saved.content)
        )
        self._pending.append(task)
        logger.debug("scheduled remote sync for %r", remote_path)
        return CaptureResult(saved=saved, remote_path=remote_path, sync_scheduled=True)

    async def drain(self) -> List[bool]:
        """Wait for every scheduled sync and return their outcomes in order."""
        pending, self._pending = self._pending, []
        if not pending:
            return []
        return list(await asyncio.gather(*pending))
