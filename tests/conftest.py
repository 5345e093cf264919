"""Common test fixtures for recap."""

import tempfile
from pathlib import Path

import pytest

from recap.config import config
from recap.models.schema import Item
from recap.services.recap_service import RecapService
from recap.storage import Database, SQLAlchemyItemStore
from tests.fakes import FakeEncryptor, InMemoryItemStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for database files."""
    with tempfile.TemporaryDirectory() as db_dir:
        yield Path(db_dir)


@pytest.fixture
def db_path(temp_dir):
    return temp_dir / "recap.db"


@pytest.fixture
def test_config(db_path, monkeypatch):
    """Point the global config at a temporary database (auto-restored)."""
    monkeypatch.setattr(config, "database_path", db_path)
    monkeypatch.setattr(config, "log_dir", None)
    monkeypatch.setattr(config, "log_level", "WARNING")
    yield config


@pytest.fixture
def database(db_path):
    """Open a file-backed database."""
    db = Database.open(db_path)
    yield db
    db.close()


@pytest.fixture
def item_store(database):
    """Create a file-backed item store."""
    yield SQLAlchemyItemStore(database)


@pytest.fixture
def memory_store():
    """Create an item store on an in-memory SQLite database."""
    store = SQLAlchemyItemStore.open(":memory:")
    yield store
    store.close()


@pytest.fixture
def fake_store():
    """Create a pure in-memory fake store."""
    return InMemoryItemStore()


@pytest.fixture
def fake_encryptor():
    return FakeEncryptor()


@pytest.fixture
def recap_service(item_store, fake_encryptor):
    """Create a RecapService over a real store with a fake encryptor."""
    yield RecapService(store=item_store, encryptor=fake_encryptor)


@pytest.fixture
def make_item():
    """Factory for unsaved items."""

    def _make(title="Title", content="Content", tags=None, encrypted=False):
        return Item(
            title=title,
            content=content,
            tags=list(tags or []),
            encrypted=encrypted,
        )

    return _make
