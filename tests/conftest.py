"""
Shared pytest configuration for the notesync test suite.

This file centralizes reusable testing utilities so that:
    • every test runs against an isolated, empty configuration
    • sync tests share one deterministic in‑memory PostgREST backend
    • CLI tests get a fresh Typer CliRunner

Nothing here touches the network: every HTTP request is routed to
FakePostgrest through an httpx.MockTransport.
"""

import logging

import pytest
from typer.testing import CliRunner

from notesync.cli.common import ENV_FILE_VARIABLE
from notesync.config import KNOWN_KEYS, SyncSettings
from notesync.logging_utils import ROOT_LOGGER_NAME
from notesync.supabase_service import SupabaseSyncService
from tests.fixtures.fake_postgrest import FakePostgrest

BASE_URL = "https://example.supabase.co"
SERVICE_KEY = "service-key"
OWNER = "u1"


# ============================================================================
# ISOLATION
# ============================================================================
@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Clear sync settings from the environment and point the CLI at a temp .env."""
    for key in KNOWN_KEYS:
        monkeypatch.delenv(key, raising=False)
    env_file = tmp_path / ".env"
    monkeypatch.setenv(ENV_FILE_VARIABLE, str(env_file))
    yield env_file

    # The CLI callback attaches a stream handler bound to CliRunner's stderr.
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provides a fresh Typer CliRunner instance for CLI tests."""
    return CliRunner()


# ============================================================================
# BACKEND + SERVICE
# ============================================================================
@pytest.fixture
def fake_backend() -> FakePostgrest:
    return FakePostgrest()


@pytest.fixture
def settings() -> SyncSettings:
    return SyncSettings(url=BASE_URL, service_key=SERVICE_KEY, user_id=OWNER)


@pytest.fixture
def service(fake_backend, settings) -> SupabaseSyncService:
    """A fully configured service wired to the fake backend."""
    return SupabaseSyncService(lambda: settings, transport=fake_backend.transport)
