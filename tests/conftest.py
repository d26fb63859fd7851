import pytest
import pytest_asyncio
from cryptography.fernet import Fernet

from database import build_engine, build_session_factory, create_tables
from src.bots.service import BotService
from src.settings import Settings

from fakes import ACCOUNT_ID, OTHER_USER_ID, OWNER_ID, FakeHttpServer, FakeThreeCommasClient, link_account


@pytest.fixture
def settings():
    return Settings(
        three_commas_api_key="test-3commas-key",
        three_commas_api_secret="test-3commas-secret",
        database_url="sqlite+aiosqlite://",
        api_secret_key="local-service-key",
        encryption_key=Fernet.generate_key().decode(),
        remote_timeout_seconds=0.5,
        exchange_timeout_seconds=0.5,
        remote_retry_attempts=2,
        remote_retry_backoff_seconds=0,
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = build_engine(settings.async_database_url)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def owner(db):
    return await link_account(db, OWNER_ID, ACCOUNT_ID)


@pytest_asyncio.fixture
async def other_user(db):
    return await link_account(db, OTHER_USER_ID, ACCOUNT_ID + 1)


@pytest.fixture
def remote():
    return FakeThreeCommasClient()


@pytest.fixture
def bot_service(remote, settings):
    return BotService(remote, settings)


@pytest_asyncio.fixture
async def http_server():
    server = await FakeHttpServer().start()
    yield server
    await server.close()


