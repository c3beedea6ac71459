"""
Shared test configuration and fixtures for the identity directory tests.

Provides a per-test SQLite credential store, the bundled built-in record set, a
fake Redis client for the profile query queue, a recording metrics client, and a
few pre-generated identities.
"""

import pytest
import pytest_asyncio
import fakeredis.aioredis
from sqlalchemy.ext.asyncio import create_async_engine

from chat.sechat.directory.directory import IdentityDirectory
from chat.sechat.directory.immortals import Immortals
from chat.sechat.directory.mkm.identifier import ID, NetworkType
from chat.sechat.directory.queries import ProfileQueryQueue
from chat.sechat.directory.store.credentials import CredentialStore
from tests.helpers import ATLAS, NOVA, FakeClock, Identity, MockMetricsClient


@pytest.fixture(scope="session")
def alice():
    """An RSA user identity."""
    return Identity("alice")


@pytest.fixture(scope="session")
def bob():
    """A second RSA user identity."""
    return Identity("bob")


@pytest.fixture(scope="session")
def carol_ec():
    """An EC user identity; its key can sign but not decrypt."""
    return Identity("carol", kty="EC")


@pytest.fixture(scope="session")
def chatroom(alice):
    """A group handle created with alice's key."""
    return alice.meta.generate_identifier(NetworkType.group)


@pytest.fixture
def atlas_id():
    return ID.parse(ATLAS)


@pytest.fixture
def nova_id():
    return ID.parse(NOVA)


@pytest.fixture(scope="session")
def immortals():
    """The bundled built-in record set."""
    return Immortals.load()


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create an async engine over a per-test SQLite database file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", echo=False)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def store(engine):
    """Credential store with all tables created."""
    store = CredentialStore(engine)
    await store.create_all()
    return store


@pytest_asyncio.fixture
async def fake_redis():
    """Provide fake Redis client for unit tests."""
    redis_client = fakeredis.aioredis.FakeRedis(decode_responses=False)
    yield redis_client
    await redis_client.flushall()
    await redis_client.aclose()


@pytest.fixture
def mock_metrics():
    return MockMetricsClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def queries(fake_redis):
    return ProfileQueryQueue(fake_redis, queue_name="test:profile:query")


@pytest.fixture
def directory(store, immortals, queries, mock_metrics, clock):
    """Identity directory wired to the test store, fake Redis and a fake clock."""
    return IdentityDirectory(
        store,
        immortals,
        queries=queries,
        metrics=mock_metrics,
        profile_expires=3600,
        clock=clock,
    )
