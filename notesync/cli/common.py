"""
Shared wiring for the CLI sub‑apps.

The CLI is responsible for dependency creation: it builds the settings store
and the sync service here and hands them to the library. Tests replace
`build_service` to route requests to an in‑memory backend.
"""

import os
from pathlib import Path

from notesync.config import DEFAULT_ENV_FILE, SettingsStore
from notesync.supabase_service import SupabaseSyncService

ENV_FILE_VARIABLE = "NOTESYNC_ENV_FILE"


def get_store() -> SettingsStore:
    """Settings store backed by $NOTESYNC_ENV_FILE, or `.env` in the working directory."""
    return SettingsStore(Path(os.getenv(ENV_FILE_VARIABLE) or DEFAULT_ENV_FILE))


def build_service(store: SettingsStore) -> SupabaseSyncService:
    return SupabaseSyncService.from_store(store)
