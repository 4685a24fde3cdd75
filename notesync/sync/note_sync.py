"""
Note synchronization: upsert a note row keyed by (user_id, path) and link it
to the folder its path lives in.

There are two entry points:

    • sync_note()  — best effort. Never raises; returns True/False and logs
                     the failure. This is what the local‑first capture flow
                     calls after the note is already safe on disk.
    • push_note()  — strict. Raises NotConfigured or the typed gateway /
                     resolver error so callers (CLI, "test settings") can
                     show the reason.

Neither retries. Configuration is checked before any network call.
"""

import asyncio
from typing import Callable, Optional, Tuple
from urllib.parse import quote

from notesync.config import SyncSettings
from notesync.errors import NotConfigured
from notesync.logging_utils import get_logger
from notesync.rest_gateway import PREFER_MERGE_DUPLICATES
from notesync.sync.folder_resolution import FolderResolver, is_root, parent_path, split_path
from notesync.types import NoteRecord, RestGatewayInterface

NOTES_TABLE = "notes"
NOTE_CONFLICT_TARGET = "user_id,path"

SettingsProvider = Callable[[], SyncSettings]
GatewayFactory = Callable[[SyncSettings], RestGatewayInterface]

logger = get_logger(__name__)


class NoteSynchronizer:
    """
    Push notes (and their folder chains) to Supabase.

    Parameters
    ----------
    settings_provider : Callable[[], SyncSettings]
        Called on every operation, so settings edits apply immediately.
    gateway_factory : Callable[[SyncSettings], RestGatewayInterface]
        Builds a gateway for a configured settings snapshot.
    resolver : FolderResolver | None
        Shared resolver (and therefore shared resolution cache).
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        gateway_factory: GatewayFactory,
        resolver: Optional[FolderResolver] = None,
    ) -> None:
        self.settings_provider = settings_provider
        self.gateway_factory = gateway_factory
        self.resolver = resolver or FolderResolver()

    async def connect(self) -> Tuple[RestGatewayInterface, SyncSettings]:
        """
        Take a settings snapshot and build a gateway for it.

        The provider may read a `.env` file, so it runs in a worker thread
        rather than on the event loop. Raises NotConfigured before anything
        touches the network.
        """
        settings = await asyncio.to_thread(self.settings_provider)
        missing = settings.missing_fields()
        if missing:
            raise NotConfigured(missing)
        return self.gateway_factory(settings), settings

    async def ensure_folder(self, path: str) -> Optional[str]:
        """Resolve `path` to a folder id (None for the root)."""
        if is_root(path):
            return None
        gateway, settings = await self.connect()
        return await self.resolver.ensure_folder(gateway, settings.user_id, path)

    async def push_note(self, path: str, title: str, content: str) -> NoteRecord:
        """
        Upsert a note, creating its folder chain first.

        Returns the record that was sent.

        Raises
        ------
        ValueError
            If `path` has no segments.
        NotConfigured
            If URL, service key or user id is missing.
        SyncError
            Any gateway or resolver failure.
        """
        # "/Inbox//Idea/" and "Inbox/Idea" are the same note.
        normalized = "/".join(split_path(path))
        if not normalized:
            raise ValueError("path must be provided")

        gateway, settings = await self.connect()

        folder_id = await self.resolver.ensure_folder(
            gateway, settings.user_id, parent_path(normalized)
        )

        record: NoteRecord = {
            "user_id": settings.user_id,
            "title": title,
            "content": content,
            "path": normalized,
        }
        if folder_id:
            record["folder_id"] = folder_id

        await gateway.request(
            "POST",
            NOTES_TABLE,
            body=record,
            query=f"?on_conflict={quote(NOTE_CONFLICT_TARGET, safe=',')}",
            extra_headers={"Prefer": PREFER_MERGE_DUPLICATES},
        )
        return record

    async def sync_note(self, path: str, title: str, content: str) -> bool:
        """Best-effort push; any failure is logged and reported as False."""
        try:
            await self.push_note(path, title, content)
        except NotConfigured:
            logger.debug("sync_note skipped for %r: sync is not configured", path)
            return False
        except Exception as e:
            logger.warning("sync_note failed for %r: %s", path, e)
            return False
        return True
