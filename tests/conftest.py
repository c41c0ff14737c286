import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from config import Settings  # noqa: E402
from main import create_app  # noqa: E402
from store import Store  # noqa: E402


@pytest.fixture()
def store():
    """Fresh seeded store with no payment delay."""
    return Store(payment_delay=0)


@pytest.fixture()
def settings():
    return Settings(payment_delay=0)


@pytest.fixture()
def client(store, settings):
    return TestClient(create_app(store=store, settings=settings))
