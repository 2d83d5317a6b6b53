import fakeredis
import pytest

from roomsync.core.config import settings
from roomsync.model.user import UserPublic
from roomsync.schema.auth import UserRegister
from roomsync.service.auth_service import AuthService
from roomsync.store import KeyValueStore, set_redis_client


@pytest.fixture
def redis_client():
    """Fresh in-memory Redis per test, installed as the process-wide client."""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    set_redis_client(client)
    yield client
    set_redis_client(None)


@pytest.fixture
def store(redis_client):
    return KeyValueStore(redis_client, prefix=settings.KEY_PREFIX)


@pytest.fixture
def make_user(store):
    """Register a user and return its public view."""
    def _make(username: str, password: str = "secret1") -> UserPublic:
        resp = AuthService(store).register_user(
            UserRegister(username=username, password=password, confirm_password=password)
        )
        return UserPublic(**resp.user.model_dump())

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")
