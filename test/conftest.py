"""
Test Configuration and Fixtures

This module provides:
- Environment setup that must happen before application modules are imported
- In-memory seat record repo and a fresh broadcast hub per test
- TestClient running the real app (lifespan included) with DI overrides

Architecture:
- Unit tests (test/**/unit/): construct use cases and adapters directly with fakes
- Integration tests: go through HTTP or a real in-memory SQLite database
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time (src.platform.config.core_setting)
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    # Shared in-memory SQLite; the engine uses a StaticPool for it
    os.environ['DATABASE_URL_ASYNC'] = 'sqlite+aiosqlite://'

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402
from src.platform.event.broadcast_hub import InMemoryBroadcastHub  # noqa: E402
from test.fakes import InMemorySeatRecordRepo  # noqa: E402


@pytest.fixture
def seat_repo() -> InMemorySeatRecordRepo:
    return InMemorySeatRecordRepo()


@pytest.fixture
def broadcast_hub() -> InMemoryBroadcastHub:
    return InMemoryBroadcastHub(buffer_size=10, heartbeat_interval=30.0)


@pytest.fixture
def client(
    seat_repo: InMemorySeatRecordRepo, broadcast_hub: InMemoryBroadcastHub
) -> Generator[TestClient, None, None]:
    """TestClient for the production app with storage and hub swapped for test doubles"""
    from src.main import app

    container.reset_singletons()
    with (
        container.seat_record_repo.override(seat_repo),
        container.broadcast_hub.override(broadcast_hub),
        TestClient(app) as test_client,
    ):
        yield test_client
    container.reset_singletons()
