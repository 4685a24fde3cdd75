"""
Thin PostgREST gateway: the only place notesync talks HTTP to Supabase.

Every request targets a single table resource:

    {base_url}/rest/v1/{table}{query}

and carries the same three default headers:

    • apikey: <service key>
    • Authorization: Bearer <service key>
    • Content-Type: application/json

Callers may layer extra headers on top (most importantly `Prefer`, which
selects between "return the created row" and "merge on the unique key").

The gateway is stateless across calls. It opens a short-lived
`httpx.AsyncClient` per request with a fixed 30 second deadline and never
retries: a failure is surfaced to the caller as one of the typed errors in
notesync.errors, and the caller decides what to do next.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, cast

import httpx

from notesync.errors import (
    BackendError,
    BadURL,
    ConflictError,
    MalformedResponse,
    TransportError,
)
from notesync.logging_utils import get_logger
from notesync.types import Row

REQUEST_TIMEOUT = 30.0
ALLOWED_METHODS = ("GET", "POST")

PREFER_REPRESENTATION = "return=representation"
PREFER_MERGE_DUPLICATES = "resolution=merge-duplicates"

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Helper: normalize PostgREST response bodies
# ---------------------------------------------------------------------------
def _extract_rows(payload: bytes) -> List[Row]:
    """
    Normalize a 2xx body into a list of row dictionaries.

        • empty / whitespace body → []
        • JSON array of objects   → that array
        • single JSON object      → [object]

    Anything else raises MalformedResponse.
    """
    if not payload.strip():
        return []

    try:
        parsed = json.loads(payload)
    except ValueError as e:
        raise MalformedResponse(f"Response body is not valid JSON: {e}") from e

    if isinstance(parsed, dict):
        return [cast(Row, parsed)]

    if isinstance(parsed, list) and all(isinstance(item, dict) for item in parsed):
        return cast(List[Row], parsed)

    raise MalformedResponse(
        f"Expected a JSON object or an array of objects, got {type(parsed).__name__}"
    )


def _error_message(payload: bytes) -> Optional[str]:
    """Pull PostgREST's `message` field out of an error body, if there is one."""
    try:
        parsed = json.loads(payload)
    except ValueError:
        return None
    if isinstance(parsed, dict) and parsed.get("message"):
        return str(parsed["message"])
    return None


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if 200 <= status < 300:
        return
    message = _error_message(response.content)
    if status == 409:
        raise ConflictError(status, message)
    raise BackendError(status, message)


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------
class RestGateway:
    """
    Authenticated JSON client for one Supabase project.

    Parameters
    ----------
    base_url : str
        Project URL without the `/rest/v1` suffix.
    api_key : str
        Service key; sent both as `apikey` and as the bearer token.
    timeout : float
        Per-request deadline in seconds.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override. Tests pass an `httpx.MockTransport`
        backed by an in-memory PostgREST.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def default_headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_url(self, table: str, query: str = "") -> httpx.URL:
        """
        Compose the request URL.

        `query` is used verbatim (it is already percent-encoded by the
        caller); a leading "?" is added when missing.
        """
        if query and not query.startswith("?"):
            query = "?" + query
        raw = f"{self.base_url}/rest/v1/{table}{query}"

        if not table or any(ch in table for ch in "/?# "):
            raise BadURL(raw)

        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as e:
            raise BadURL(raw) from e

        if url.scheme not in ("http", "https") or not url.host:
            raise BadURL(raw)

        return url

    async def request(
        self,
        method: str,
        table: str,
        body: Optional[Any] = None,
        query: str = "",
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> List[Row]:
        """
        Perform one request and return the decoded rows.

        Raises
        ------
        BadURL
            The URL could not be composed from the configured base URL.
        TransportError
            DNS, connection, timeout, redirect or decoding failure.
        BackendError
            Status outside 200–299 (ConflictError for 409).
        MalformedResponse
            Non-empty body that is not JSON rows.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method {method!r}; expected one of {ALLOWED_METHODS}")

        url = self.build_url(table, query)

        headers = self.default_headers()
        if extra_headers:
            headers.update(extra_headers)

        content = json.dumps(body).encode("utf-8") if body is not None else None

        logger.debug("%s %s", method, url)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.request(method, url, headers=headers, content=content)
        except httpx.RequestError as e:
            raise TransportError(f"{method} {table} failed: {e}") from e

        _raise_for_status(response)
        return _extract_rows(response.content)
