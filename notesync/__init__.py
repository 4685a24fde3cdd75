"""
notesync: folder‑aware note sync to Supabase.

The stable entry point is SupabaseSyncService; see notesync.sync and
notesync.capture for the building blocks.
"""

from .supabase_service import SupabaseSyncService

__version__ = "0.1.0"

__all__ = ["SupabaseSyncService"]
