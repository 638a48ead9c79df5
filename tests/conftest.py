"""Shared fixtures: product records and an in-process remote client."""

import os
import tempfile

import pytest

from catalog_mirror.clients import RealtimeDatabaseError

FULL_PARAMS = {
    "apiKey": "AIzaSyTestKey",
    "authDomain": "shop-test.firebaseapp.com",
    "databaseURL": "https://shop-test-default-rtdb.firebaseio.com",
    "projectId": "shop-test",
    "storageBucket": "shop-test.appspot.com",
    "messagingSenderId": "1234567890",
    "appId": "1:1234567890:web:abcdef",
}


def make_record(**overrides):
    """Product-shaped record as the back-office system publishes it."""
    record = {
        "id": "p-1",
        "name": "Olive Oil 1L",
        "price": 185.5,
        "stock": 24,
        "barcode": "6221234567890",
        "cost": 150.0,
        "category": "Grocery",
        "unit": "bottle",
        "supplier": "Delta Foods",
    }
    record.update(overrides)
    return record


class FakeSubscription:
    def __init__(self, path):
        self.path = path
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    async def wait_closed(self):
        return None


class FakeRemoteClient:
    """Stands in for RealtimeDatabaseClient; tests push values by hand."""

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.listen_calls = []
        self.subscription = None
        self._on_value = None
        self._on_error = None

    async def listen(self, path, on_value, on_error):
        if self.fail_with is not None:
            raise self.fail_with
        self.listen_calls.append(path)
        self._on_value = on_value
        self._on_error = on_error
        self.subscription = FakeSubscription(path)
        return self.subscription

    def emit(self, payload):
        self._on_value(payload)

    def fail(self, message="Permission denied"):
        self._on_error(RealtimeDatabaseError(message))


@pytest.fixture
def full_params():
    return dict(FULL_PARAMS)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def remote_client():
    return FakeRemoteClient()


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def remote_client_factory():
    return FakeRemoteClient
