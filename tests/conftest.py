import pytest
from fastapi.testclient import TestClient

from storefront import Storefront
from storefront.storage import MemoryStorage
from tests.fake_backend import create_app

BASE_URL = "http://testserver"


@pytest.fixture
def backend():
    return create_app()


@pytest.fixture
def http(backend):
    return TestClient(backend)


@pytest.fixture
def db(backend):
    return backend.state.db


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def shop(http, storage):
    return Storefront(BASE_URL, http_session=http, storage=storage)


@pytest.fixture
def customer(shop):
    assert shop.session.login({"username": "alice", "password": "secret"}) is not None
    return shop


@pytest.fixture
def admin(shop):
    assert shop.session.login({"username": "admin", "password": "admin123"}) is not None
    return shop
