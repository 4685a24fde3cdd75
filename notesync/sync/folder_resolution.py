"""
Folder resolution: map a logical "A/B/C" path onto rows of the `folders`
table, creating missing ancestors top‑down and memoizing every resolved
prefix.

The resolver walks the path one segment at a time:

    "Projects/Alpha"  →  "Projects"        (lookup, create if missing)
                      →  "Projects/Alpha"  (lookup, create under parent)

Each resolved prefix is written to the resolution cache before the next
segment is attempted, so a failure halfway down the chain leaves the
already‑materialized ancestors cached and a retry resumes from the deepest
cached prefix.

Uniqueness of (user_id, path) is owned by the backend. When a create is
rejected with 409 because another writer got there first, the resolver
re-reads the row and adopts its id.
"""

import asyncio
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from notesync.errors import ConflictError, InvalidServerResponse
from notesync.logging_utils import get_logger
from notesync.rest_gateway import PREFER_REPRESENTATION
from notesync.types import FolderRecord, RestGatewayInterface, Row

FOLDERS_TABLE = "folders"
ROOT_MARKERS = ("", ".", "/")

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------
def split_path(path: str) -> List[str]:
    """Split a logical path into segments, dropping empty and "." parts."""
    return [segment for segment in path.split("/") if segment and segment != "."]


def is_root(path: str) -> bool:
    return path.strip() in ROOT_MARKERS or not split_path(path)


def parent_path(path: str) -> str:
    """
    Strip the last segment of a note path.

        "Projects/Alpha/Plan" → "Projects/Alpha"
        "Plan"                → ""  (root)
    """
    return "/".join(split_path(path)[:-1])


def _row_id(row: Row) -> Optional[str]:
    value = row.get("id")
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)) and str(value):
        return str(value)
    return None


# ---------------------------------------------------------------------------
# Resolution cache
# ---------------------------------------------------------------------------
class FolderCache:
    """
    (owner, path) → folder id, guarded by an asyncio.Lock.

    The lock is held only for the dictionary access itself; network requests
    happen outside it. Entries are never evicted: a folder deleted by another
    client stays cached until the process restarts.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], str] = {}
        self._lock = asyncio.Lock()

    async def get(self, owner: str, path: str) -> Optional[str]:
        async with self._lock:
            return self._entries.get((owner, path))

    async def put(self, owner: str, path: str, folder_id: str) -> None:
        async with self._lock:
            self._entries[(owner, path)] = folder_id

    async def snapshot(self, owner: str) -> Dict[str, str]:
        async with self._lock:
            return {path: fid for (o, path), fid in self._entries.items() if o == owner}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------
class FolderResolver:
    """
    Resolve or create the folder chain for a path.

    The resolver owns its cache; nothing else reads or writes it. The
    gateway and owner are passed per call because both come from the
    settings snapshot taken by the caller.
    """

    def __init__(self) -> None:
        self._cache = FolderCache()

    async def cached_paths(self, owner: str) -> Dict[str, str]:
        """Read-only copy of the cache for one owner (diagnostics and tests)."""
        return await self._cache.snapshot(owner)

    async def ensure_folder(
        self,
        gateway: RestGatewayInterface,
        owner: str,
        path: str,
    ) -> Optional[str]:
        """
        Return the id of the deepest folder in `path`, creating any missing
        segment on the way down.

        Returns None for the root ("", ".", "/") without touching the network.

        Raises
        ------
        InvalidServerResponse
            A folder create succeeded but the response carried no id.
        SyncError
            Anything the gateway surfaces (transport, HTTP status, parsing).
        """
        if is_root(path):
            return None

        segments = split_path(path)
        parent_id: Optional[str] = None

        for index, name in enumerate(segments):
            current_path = "/".join(segments[: index + 1])

            # Fast path: no network for prefixes resolved earlier.
            cached = await self._cache.get(owner, current_path)
            if cached is not None:
                parent_id = cached
                continue

            folder_id = await self._lookup(gateway, owner, current_path)
            if folder_id is None:
                folder_id = await self._create(gateway, owner, name, current_path, parent_id)

            await self._cache.put(owner, current_path, folder_id)
            parent_id = folder_id

        return parent_id

    # ------------------------------------------------------------------
    # Backend round trips
    # ------------------------------------------------------------------
    async def _lookup(
        self,
        gateway: RestGatewayInterface,
        owner: str,
        current_path: str,
    ) -> Optional[str]:
        query = (
            f"?user_id=eq.{quote(owner, safe='')}"
            f"&path=eq.{quote(current_path, safe='')}"
            "&select=id"
        )
        rows = await gateway.request("GET", FOLDERS_TABLE, query=query)
        if not rows:
            return None
        return _row_id(rows[0])

    async def _create(
        self,
        gateway: RestGatewayInterface,
        owner: str,
        name: str,
        current_path: str,
        parent_id: Optional[str],
    ) -> str:
        record: FolderRecord = {"user_id": owner, "name": name, "path": current_path}
        if parent_id:
            record["parent_id"] = parent_id

        try:
            rows = await gateway.request(
                "POST",
                FOLDERS_TABLE,
                body=record,
                extra_headers={"Prefer": PREFER_REPRESENTATION},
            )
        except ConflictError:
            # Someone else created this path between our lookup and insert.
            existing = await self._lookup(gateway, owner, current_path)
            if existing is None:
                raise
            logger.debug("folder %r created concurrently, adopting %s", current_path, existing)
            return existing

        folder_id = _row_id(rows[0]) if rows else None
        if folder_id is None:
            raise InvalidServerResponse(f"Folder create for {current_path!r} returned no id")

        logger.debug("created folder %r (%s) under %s", current_path, folder_id, parent_id)
        return folder_id
