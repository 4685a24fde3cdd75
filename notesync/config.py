# notesync/config.py
"""
Configuration for the Supabase sync engine.

Settings come from the environment, populated from a `.env` file through
python-dotenv, the same way the rest of the project loads SUPABASE_URL and
the service role key. Three values gate every network call:

    SUPABASE_URL               project URL, e.g. https://xyz.supabase.co
    SUPABASE_SERVICE_ROLE_KEY  sent as both `apikey` and bearer token
    SUPABASE_USER_ID           owner id stamped on every folder and note

An empty or absent value means "not configured".
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import dotenv_values, load_dotenv, set_key, unset_key

SUPABASE_URL = "SUPABASE_URL"
SUPABASE_SERVICE_ROLE_KEY = "SUPABASE_SERVICE_ROLE_KEY"
SUPABASE_USER_ID = "SUPABASE_USER_ID"
ANTHROPIC_API_KEY = "ANTHROPIC_API_KEY"
NOTES_DIR = "NOTES_DIR"

KNOWN_KEYS = (
    SUPABASE_URL,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_USER_ID,
    ANTHROPIC_API_KEY,
    NOTES_DIR,
)

DEFAULT_ENV_FILE = Path(".env")
DEFAULT_NOTES_DIR = Path.home() / "Notes"


@dataclass(frozen=True)
class SyncSettings:
    """
    Snapshot of the three values the sync engine needs.

    The service reads a fresh snapshot on every call, so a settings edit
    takes effect without rebuilding the service.
    """

    url: str = ""
    service_key: str = ""
    user_id: str = ""

    def __post_init__(self) -> None:
        # PostgREST paths are appended as "/rest/v1/<table>".
        object.__setattr__(self, "url", (self.url or "").strip().rstrip("/"))
        object.__setattr__(self, "service_key", (self.service_key or "").strip())
        object.__setattr__(self, "user_id", (self.user_id or "").strip())

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.url:
            missing.append(SUPABASE_URL)
        if not self.service_key:
            missing.append(SUPABASE_SERVICE_ROLE_KEY)
        if not self.user_id:
            missing.append(SUPABASE_USER_ID)
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()

    @classmethod
    def from_mapping(cls, values: Dict[str, Optional[str]]) -> "SyncSettings":
        return cls(
            url=values.get(SUPABASE_URL) or "",
            service_key=values.get(SUPABASE_SERVICE_ROLE_KEY) or "",
            user_id=values.get(SUPABASE_USER_ID) or "",
        )

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """Load `.env` into the process environment and read the sync keys."""
        load_dotenv()
        return cls.from_mapping({key: os.getenv(key) for key in KNOWN_KEYS})


class SettingsStore:
    """
    Get/set store for plain-string settings, persisted in a `.env` file.

    Values written here land in the file via python-dotenv's `set_key`, so
    they are picked up by `load_dotenv()` on the next start as well. When
    reading, values in the file take precedence over the process
    environment.

    Parameters
    ----------
    path : Path
        Location of the `.env` file. Created on first write.
    """

    def __init__(self, path: Path = DEFAULT_ENV_FILE) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------
    def _check_key(self, key: str) -> None:
        if key not in KNOWN_KEYS:
            raise KeyError(f"Unknown setting {key!r}. Known settings: {', '.join(KNOWN_KEYS)}")

    def values(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        for key in KNOWN_KEYS:
            env_value = os.getenv(key)
            if env_value:
                merged[key] = env_value

        if self.path.exists():
            for key, value in dotenv_values(self.path).items():
                if key in KNOWN_KEYS and value is not None:
                    merged[key] = value

        return merged

    def get(self, key: str) -> str:
        self._check_key(key)
        return self.values().get(key, "")

    def set(self, key: str, value: str) -> None:
        self._check_key(key)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        set_key(str(self.path), key, value)

    def unset(self, key: str) -> None:
        self._check_key(key)
        if self.path.exists():
            unset_key(str(self.path), key)

    # ------------------------------------------------------------------
    # Typed views
    # ------------------------------------------------------------------
    def load(self) -> SyncSettings:
        """Return the current sync settings snapshot."""
        return SyncSettings.from_mapping(dict(self.values()))

    def notes_dir(self) -> Path:
        configured = self.values().get(NOTES_DIR)
        return Path(configured).expanduser() if configured else DEFAULT_NOTES_DIR
