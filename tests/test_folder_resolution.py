"""
Tests for folder resolution.

These tests exercise FolderResolver through SupabaseSyncService against
the in‑memory PostgREST fake. They cover:

    • the lookup → create walk and parent linkage
    • cache hits (no network on repeat calls or shared prefixes)
    • adopting rows that already exist, including 409 races
    • failure handling: no id in the response, backend errors, partial progress
"""

import asyncio

import httpx
import pytest

from notesync.config import SyncSettings
from notesync.errors import BackendError, InvalidServerResponse
from notesync.supabase_service import SupabaseSyncService
from notesync.sync import parent_path, split_path
from tests.conftest import BASE_URL, OWNER, SERVICE_KEY


def request_summary(fake):
    return [(r.method, fake.table_of(r)) for r in fake.requests]


# =====================================================================
# Path helpers
# =====================================================================


def test_split_path_drops_empty_and_dot_segments() -> None:
    assert split_path("/Projects//./Alpha/") == ["Projects", "Alpha"]


def test_parent_path() -> None:
    assert parent_path("Projects/Alpha/Plan") == "Projects/Alpha"
    assert parent_path("Plan") == ""


# =====================================================================
# Walk + create
# =====================================================================


@pytest.mark.asyncio
async def test_creates_missing_chain_top_down(service, fake_backend) -> None:
    folder_id = await service.ensure_folder("Projects/Alpha")

    assert folder_id == "f2"
    assert request_summary(fake_backend) == [
        ("GET", "folders"),
        ("POST", "folders"),
        ("GET", "folders"),
        ("POST", "folders"),
    ]

    posts = [fake_backend.body_of(r) for r in fake_backend.calls("POST", "folders")]
    assert posts[0] == {"user_id": OWNER, "name": "Projects", "path": "Projects"}
    assert posts[1] == {
        "user_id": OWNER,
        "name": "Alpha",
        "path": "Projects/Alpha",
        "parent_id": "f1",
    }
    for request in fake_backend.calls("POST", "folders"):
        assert request.headers["Prefer"] == "return=representation"

    assert await service.resolver.cached_paths(OWNER) == {
        "Projects": "f1",
        "Projects/Alpha": "f2",
    }


@pytest.mark.asyncio
async def test_second_call_is_served_from_cache(service, fake_backend) -> None:
    first = await service.ensure_folder("Projects/Alpha")
    before = len(fake_backend.requests)

    second = await service.ensure_folder("Projects/Alpha")

    assert second == first
    assert len(fake_backend.requests) == before


@pytest.mark.asyncio
async def test_shared_prefix_is_not_requested_again(service, fake_backend) -> None:
    await service.ensure_folder("Projects/Alpha")
    fake_backend.requests.clear()

    beta = await service.ensure_folder("Projects/Beta")

    assert beta == "f3"
    assert request_summary(fake_backend) == [("GET", "folders"), ("POST", "folders")]
    assert fake_backend.body_of(fake_backend.requests[1])["parent_id"] == "f1"


@pytest.mark.parametrize("path", ["", ".", "/", "//", "./"])
@pytest.mark.asyncio
async def test_root_markers_resolve_to_none_without_requests(service, fake_backend, path) -> None:
    assert await service.ensure_folder(path) is None
    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_equivalent_spellings_share_cache_entries(service, fake_backend) -> None:
    await service.ensure_folder("Projects/Alpha")
    before = len(fake_backend.requests)

    assert await service.ensure_folder("/Projects//Alpha/") == "f2"
    assert len(fake_backend.requests) == before


# =====================================================================
# Existing rows
# =====================================================================


@pytest.mark.asyncio
async def test_adopts_existing_folder_without_creating(service, fake_backend) -> None:
    fake_backend.seed("folders", id="existing-1", user_id=OWNER, name="Inbox", path="Inbox")

    assert await service.ensure_folder("Inbox") == "existing-1"
    assert fake_backend.calls("POST", "folders") == []


@pytest.mark.asyncio
async def test_integer_ids_are_accepted(service, fake_backend) -> None:
    fake_backend.seed("folders", id=42, user_id=OWNER, name="Inbox", path="Inbox")

    assert await service.ensure_folder("Inbox") == "42"


@pytest.mark.asyncio
async def test_other_owners_folders_are_ignored(service, fake_backend) -> None:
    fake_backend.seed("folders", id="theirs", user_id="someone-else", name="Inbox", path="Inbox")

    folder_id = await service.ensure_folder("Inbox")

    assert folder_id != "theirs"
    assert len(fake_backend.calls("POST", "folders")) == 1


@pytest.mark.asyncio
async def test_lookup_query_is_fully_encoded(service, fake_backend) -> None:
    await service.ensure_folder("R&D/Q1 plans")

    lookup = fake_backend.calls("GET", "folders")[0]
    raw_query = lookup.url.query.decode()

    assert "path=eq.R%26D&" in raw_query
    assert raw_query.endswith("select=id")
    assert lookup.url.params["path"] == "eq.R&D"

    second_lookup = fake_backend.calls("GET", "folders")[1]
    assert second_lookup.url.params["path"] == "eq.R&D/Q1 plans"

    paths = [row["path"] for row in fake_backend.tables["folders"]]
    assert paths == ["R&D", "R&D/Q1 plans"]


@pytest.mark.asyncio
async def test_conflict_on_create_adopts_the_winner(service, fake_backend) -> None:
    def competing_writer(request) -> None:
        if request.method == "POST" and fake_backend.table_of(request) == "folders":
            fake_backend.before_request = None
            fake_backend.seed("folders", id="winner", user_id=OWNER, name="Inbox", path="Inbox")

    fake_backend.before_request = competing_writer

    assert await service.ensure_folder("Inbox") == "winner"
    assert request_summary(fake_backend) == [
        ("GET", "folders"),
        ("POST", "folders"),
        ("GET", "folders"),
    ]
    assert await service.resolver.cached_paths(OWNER) == {"Inbox": "winner"}


@pytest.mark.asyncio
async def test_conflict_without_visible_row_is_raised(service, fake_backend) -> None:
    fake_backend.fail("POST", "folders", status=409)

    with pytest.raises(BackendError) as excinfo:
        await service.ensure_folder("Inbox")

    assert excinfo.value.status_code == 409
    assert await service.resolver.cached_paths(OWNER) == {}


# =====================================================================
# Failures
# =====================================================================


@pytest.mark.asyncio
async def test_create_without_id_raises_and_caches_nothing(service, fake_backend) -> None:
    fake_backend.omit_created_ids = True

    with pytest.raises(InvalidServerResponse):
        await service.ensure_folder("Inbox")

    assert await service.resolver.cached_paths(OWNER) == {}


@pytest.mark.asyncio
async def test_backend_error_is_surfaced_and_not_cached(service, fake_backend) -> None:
    fake_backend.fail("GET", "folders", status=500)

    with pytest.raises(BackendError) as excinfo:
        await service.ensure_folder("Inbox")

    assert excinfo.value.status_code == 500
    assert await service.resolver.cached_paths(OWNER) == {}

    # The failure was one-shot; a retry succeeds.
    assert await service.ensure_folder("Inbox") == "f1"


@pytest.mark.asyncio
async def test_partial_progress_is_kept_and_retry_resumes(service, fake_backend) -> None:
    fake_backend.fail(
        "POST",
        "folders",
        status=503,
        when=lambda request: fake_backend.body_of(request)["path"] == "A/B",
    )

    with pytest.raises(BackendError):
        await service.ensure_folder("A/B/C")

    assert await service.resolver.cached_paths(OWNER) == {"A": "f1"}

    fake_backend.requests.clear()
    assert await service.ensure_folder("A/B/C") == "f3"

    lookups = [r.url.params["path"] for r in fake_backend.calls("GET", "folders")]
    assert lookups == ["eq.A/B", "eq.A/B/C"]


# =====================================================================
# Cache scoping + concurrency
# =====================================================================


@pytest.mark.asyncio
async def test_cache_is_scoped_per_owner(fake_backend) -> None:
    current = {"owner": "alice"}

    def settings() -> SyncSettings:
        return SyncSettings(url=BASE_URL, service_key=SERVICE_KEY, user_id=current["owner"])

    service = SupabaseSyncService(settings, transport=fake_backend.transport)

    alice_id = await service.ensure_folder("Inbox")
    current["owner"] = "bob"
    bob_id = await service.ensure_folder("Inbox")

    assert alice_id != bob_id
    assert await service.resolver.cached_paths("alice") == {"Inbox": alice_id}
    assert await service.resolver.cached_paths("bob") == {"Inbox": bob_id}


@pytest.mark.asyncio
async def test_concurrent_resolution_never_duplicates_folders(service, fake_backend) -> None:
    paths = ["Projects/Alpha", "Projects/Beta", "Projects/Alpha", "Archive"]

    results = await asyncio.gather(*(service.ensure_folder(p) for p in paths))

    assert results[0] == results[2]
    stored = [row["path"] for row in fake_backend.tables["folders"]]
    assert len(stored) == len(set(stored))
    assert set(stored) == {"Projects", "Projects/Alpha", "Projects/Beta", "Archive"}


@pytest.mark.asyncio
async def test_stalled_lookup_does_not_block_other_paths(fake_backend, settings) -> None:
    stalled = asyncio.Event()
    released = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if (
            request.method == "GET"
            and request.url.params.get("path") == "eq.Projects"
            and not released.is_set()
        ):
            stalled.set()
            await released.wait()
        return fake_backend.handle(request)

    service = SupabaseSyncService(lambda: settings, transport=httpx.MockTransport(handler))

    projects = asyncio.create_task(service.ensure_folder("Projects"))
    await asyncio.wait_for(stalled.wait(), timeout=5)

    # "Projects" is parked mid-request; an unrelated path must still resolve.
    archive_id = await asyncio.wait_for(service.ensure_folder("Archive"), timeout=5)
    released.set()
    projects_id = await asyncio.wait_for(projects, timeout=5)

    assert archive_id == "f1"
    assert projects_id == "f2"
    assert await service.resolver.cached_paths(OWNER) == {"Archive": "f1", "Projects": "f2"}
