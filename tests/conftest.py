import pytest
from fastapi.testclient import TestClient

from users.repository import UserRepository
from users.store import MemoryUserStore


@pytest.fixture
def store():
    return MemoryUserStore()


@pytest.fixture
def repo(store):
    return UserRepository(store)


@pytest.fixture
def client(monkeypatch):
    # Each lifespan builds a fresh in-memory store, so tests stay isolated.
    monkeypatch.setenv("USER_STORE", "memory")
    import main

    with TestClient(main.app) as c:
        yield c
