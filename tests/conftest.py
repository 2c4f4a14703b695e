import uuid

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import create_app
from settings import Settings


@pytest.fixture
def settings():
    s = Settings()
    s.database_name = f"chatroom_test_{uuid.uuid4().hex[:8]}"
    s.reaper_enabled = False
    return s


@pytest.fixture
def mock_mongo(monkeypatch):
    monkeypatch.setattr(database, "MongoClient", mongomock.MongoClient)


@pytest.fixture
def db(settings, mock_mongo):
    with database.open_database(settings) as handle:
        yield handle


@pytest.fixture
def client(settings, mock_mongo):
    with TestClient(create_app(settings)) as c:
        yield c
