"""
Supabase sync service: the single object the CLI and the capture flow talk to.

This facade wires together:

    • a settings provider  (read on every call)
    • a gateway factory    (RestGateway over httpx, one per settings snapshot)
    • a FolderResolver     (owns the path → folder id cache)
    • a NoteSynchronizer   (best‑effort and strict note upserts)

and adds the connectivity probe used to validate configuration.

Typical usage:

    service = SupabaseSyncService.from_env()
    ok = await service.sync_note("Projects/Alpha/Plan", "Plan", "# Plan ...")

For tests, pass an `httpx.MockTransport` as `transport` and every request is
routed to it instead of the network.
"""

from typing import Callable, List, Optional

import httpx

from notesync.config import SettingsStore, SyncSettings
from notesync.logging_utils import get_logger
from notesync.rest_gateway import RestGateway
from notesync.sync.folder_resolution import FolderResolver
from notesync.sync.note_sync import NOTES_TABLE, NoteSynchronizer
from notesync.types import NoteRecord, RestGatewayInterface, Row

logger = get_logger(__name__)


class SupabaseSyncService:
    """
    Folder‑aware note sync against one Supabase project.

    Parameters
    ----------
    settings_provider : Callable[[], SyncSettings]
        Returns the current settings snapshot. Called once per operation.
    transport : httpx.AsyncBaseTransport | None
        Optional transport passed to every RestGateway the service builds.
    gateway_factory : Callable[[SyncSettings], RestGatewayInterface] | None
        Override for how gateways are built. Defaults to RestGateway.
    """

    def __init__(
        self,
        settings_provider: Callable[[], SyncSettings],
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        gateway_factory: Optional[Callable[[SyncSettings], RestGatewayInterface]] = None,
    ) -> None:
        self._transport = transport
        self.resolver = FolderResolver()
        self.notes = NoteSynchronizer(
            settings_provider,
            gateway_factory or self._build_gateway,
            resolver=self.resolver,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "SupabaseSyncService":
        """Factory for production usage: settings come from `.env` / the environment."""
        return cls(SyncSettings.from_env, **kwargs)

    @classmethod
    def from_store(cls, store: SettingsStore, **kwargs) -> "SupabaseSyncService":
        return cls(store.load, **kwargs)

    def _build_gateway(self, settings: SyncSettings) -> RestGatewayInterface:
        return RestGateway(settings.url, settings.service_key, transport=self._transport)

    # -----------------------------------------------------------------------
    # Folder resolution + note sync
    # -----------------------------------------------------------------------
    async def ensure_folder(self, path: str) -> Optional[str]:
        return await self.notes.ensure_folder(path)

    async def sync_note(self, path: str, title: str, content: str) -> bool:
        return await self.notes.sync_note(path, title, content)

    async def push_note(self, path: str, title: str, content: str) -> NoteRecord:
        return await self.notes.push_note(path, title, content)

    # -----------------------------------------------------------------------
    # Connectivity probe
    # -----------------------------------------------------------------------
    async def verify_connection(self) -> List[Row]:
        """
        Minimal read against the notes table (`select=id`, one row).

        Raises NotConfigured or the typed gateway error, so a settings
        screen can show why the connection failed.
        """
        gateway, _ = await self.notes.connect()
        return await gateway.request("GET", NOTES_TABLE, query="?select=id&limit=1")

    async def test_connection(self) -> bool:
        """True only when the probe read returns a 2xx response."""
        try:
            await self.verify_connection()
        except Exception as e:
            logger.warning("test_connection failed: %s", e)
            return False
        return True
