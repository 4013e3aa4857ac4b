"""
Pytest configuration and fixtures for Feature Flag API tests
"""

import os
import threading
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["TRACING_ENABLED"] = "false"
os.environ["LOG_ACCESS_LOG"] = "true"

from feature_flag_api.core.models import FeatureFlag  # noqa: E402
from feature_flag_api.feature_flags.service import FeatureService  # noqa: E402
from feature_flag_api.storage.memory_store import MemoryFlagStore  # noqa: E402
from feature_flag_api.storage.sqlite_store import SQLiteFlagStore  # noqa: E402


@pytest.fixture
def memory_store():
    """In-memory feature flag store"""
    return MemoryFlagStore()


@pytest.fixture
def sqlite_store(tmp_path):
    """SQLite feature flag store in a temporary directory"""
    store = SQLiteFlagStore(db_path=str(tmp_path / "features.db"))
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Every store backend"""
    if request.param == "memory":
        return MemoryFlagStore()
    return SQLiteFlagStore(db_path=str(tmp_path / "features.db"))


@pytest.fixture
def feature_service(store):
    """Feature service over every store backend"""
    return FeatureService(store)


@pytest.fixture
def dummy_feature():
    """A partially enabled feature"""
    return FeatureFlag(
        key="foo",
        enabled=False,
        users=[42],
        groups=["a", "b"],
        percentage=20,
    )


@pytest.fixture
def homepage_feature():
    return FeatureFlag(
        key="homepage_v2",
        enabled=False,
        users=[2],
        groups=["dev", "admin"],
        percentage=0,
    )


@pytest.fixture
def app_with_store(sqlite_store):
    """FastAPI app backed by a temporary SQLite store"""
    from feature_flag_api.main import create_app

    return create_app(store=sqlite_store)


@pytest.fixture
def client(app_with_store):
    """Test client for FastAPI app"""
    return TestClient(app_with_store)


@pytest.fixture
async def async_client(app_with_store):
    """Async test client for FastAPI app"""
    transport = ASGITransport(app=app_with_store)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def interleave_write(monkeypatch):
    """Run a write on another thread while the next store call is in flight

    A write transaction starts the writer and lets it wait for the lock, so
    it lands after the commit. A read transaction runs the writer to
    completion once the read is done, between the read and any later write.
    Returns a callable that waits for the writer and restores the store.
    """

    def interleave(store, write):
        original_view, original_update = store.view, store.update
        state = {"thread": None}
        errors = []

        def run():
            try:
                write()
            except Exception as e:
                errors.append(e)

        def start():
            if state["thread"] is not None:
                return None
            state["thread"] = threading.Thread(target=run)
            state["thread"].start()
            return state["thread"]

        @contextmanager
        def view():
            with original_view() as tx:
                yield tx
            thread = start()
            if thread is not None:
                thread.join()

        @contextmanager
        def update():
            with original_update() as tx:
                start()
                yield tx

        monkeypatch.setattr(store, "view", view)
        monkeypatch.setattr(store, "update", update)

        def finish():
            if state["thread"] is not None:
                state["thread"].join()
            monkeypatch.setattr(store, "view", original_view)
            monkeypatch.setattr(store, "update", original_update)
            assert errors == []
            assert state["thread"] is not None

        return finish

    return interleave
