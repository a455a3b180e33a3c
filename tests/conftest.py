import os
import tempfile
from pathlib import Path

import pytest

TEST_ROOT = Path(tempfile.mkdtemp(prefix='shared-memories-tests-'))
os.environ["STORE_BACKEND"] = "sql"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_ROOT / 'memories.db'}"
os.environ["STORAGE_DIR"] = str(TEST_ROOT / "storage")
os.environ["STORAGE_PUBLIC_URL"] = "http://testserver/storage"

from app.core.backends import reset_backends
from app.db.init_db import init_db
from app.db.session import engine
from app.services.record_store import SqlRecordStore
from tests.fakes import FakeCamera, FakeRecordStore, FakeStorage


@pytest.fixture
def fake_camera():
    return FakeCamera()


@pytest.fixture
def calls():
    return []


@pytest.fixture
def fake_storage(calls):
    return FakeStorage(calls=calls)


@pytest.fixture
def fake_records(calls):
    return FakeRecordStore(calls=calls)


@pytest.fixture
def sql_records():
    init_db(drop_all=True)
    return SqlRecordStore(engine)


@pytest.fixture(autouse=True, scope="session")
def _configure_test_database():
    reset_backends()
    init_db(drop_all=True)
    yield
    reset_backends()
