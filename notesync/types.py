"""
notesync/types.py

Centralized type definitions for the note sync engine.

This module defines the TypedDicts and Protocols shared by the REST gateway,
the folder resolver, the note synchronizer and the test doubles. Keeping them
in one place gives:

    • A single source of truth for the `folders` and `notes` row shapes
    • Clear contracts between the CLI, the sync layer and the HTTP layer
    • Easy dependency injection of fake gateways in tests

When the Supabase schema changes, this file should be updated first.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, TypedDict


# ---------------------------------------------------------------------------
# Row
# ---------------------------------------------------------------------------
# A single decoded JSON object returned by PostgREST. The gateway always
# normalizes responses into List[Row], whether the endpoint returned one
# object or an array.
# ---------------------------------------------------------------------------
Row = Dict[str, Any]


# ---------------------------------------------------------------------------
# FolderRecord
# ---------------------------------------------------------------------------
# One row of the `folders` table.
#
# Invariants (enforced by the backend, relied on by the resolver):
#   • (user_id, path) is unique
#   • path is the "/"‑joined chain of ancestor names, ending with `name`
#   • top‑level folders have no parent_id; the root itself is never a row
#
# total=False because the id is assigned by Supabase and parent_id is omitted
# for top‑level folders.
# ---------------------------------------------------------------------------
class FolderRecord(TypedDict, total=False):
    id: str
    user_id: str
    name: str
    path: str
    parent_id: Optional[str]


# ---------------------------------------------------------------------------
# NoteRecord
# ---------------------------------------------------------------------------
# One row of the `notes` table. (user_id, path) is the logical key used for
# merge‑duplicates upserts, so syncing the same path twice updates in place.
# folder_id is omitted when the note lives at the root.
# ---------------------------------------------------------------------------
class NoteRecord(TypedDict, total=False):
    id: str
    user_id: str
    title: str
    content: str
    path: str
    folder_id: Optional[str]


# ---------------------------------------------------------------------------
# RestGatewayInterface
# ---------------------------------------------------------------------------
# Structural protocol for anything that can issue a PostgREST request and
# return normalized rows. The real RestGateway satisfies it, and so can any
# in‑memory fake a test wants to inject into FolderResolver directly.
# ---------------------------------------------------------------------------
class RestGatewayInterface(Protocol):
    async def request(
        self,
        method: str,
        table: str,
        body: Optional[Any] = None,
        query: str = "",
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> List[Row]:
        """Perform one authenticated request and return the decoded rows."""
        ...
