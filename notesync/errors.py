"""
notesync/errors.py

Typed failures raised by the sync engine.

Every error derives from SyncError, which itself derives from RuntimeError
so that callers that only know "something went wrong talking to Supabase"
can catch RuntimeError.

    • BadURL                — the endpoint URL could not be composed
    • TransportError        — DNS / connection / timeout failures
    • BackendError          — non‑2xx HTTP status (carries status_code)
    • ConflictError         — HTTP 409, a unique key already exists
    • MalformedResponse     — body present but not JSON rows
    • InvalidServerResponse — create succeeded but the row has no id
    • NotConfigured         — URL, key or user id missing (raised before I/O)
    • LocalWriteError       — the local note file could not be written
"""

from typing import Optional, Sequence


class SyncError(RuntimeError):
    """Base class for every failure surfaced by notesync."""


class BadURL(SyncError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Cannot build request URL: {url!r}")
        self.url = url


class TransportError(SyncError):
    """Network-layer failure: the request never produced an HTTP response."""


class BackendError(SyncError):
    """
    The backend answered with a status outside 200–299.

    Parameters
    ----------
    status_code : int
        HTTP status returned by PostgREST.
    message : str | None
        The backend's own `message` field, when the error body was JSON.
    """

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        detail = f"HTTP {status_code}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)
        self.status_code = status_code
        self.message = message


class ConflictError(BackendError):
    """HTTP 409: the row collides with an existing unique key."""


class MalformedResponse(SyncError):
    """The response body was not a JSON object or an array of objects."""


class InvalidServerResponse(SyncError):
    """A create request succeeded but the returned row carried no id."""


class NotConfigured(SyncError):
    def __init__(self, missing: Sequence[str]) -> None:
        super().__init__(f"Supabase sync is not configured (missing: {', '.join(missing)})")
        self.missing = list(missing)


class LocalWriteError(SyncError):
    """The note could not be persisted to the local notes directory."""
