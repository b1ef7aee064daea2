import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger
from sqlalchemy.exc import OperationalError

from main import app
from shared.config import Settings
from shared.dependencies import get_gateway
from shared.infrastructure.database import DatabaseGateway
from users.infrastructure.user_repository import DbUserRepository

USER_PAYLOAD = {
    "first_name": "Alice",
    "last_name": "Smith",
    "phone": "555-0100",
    "email": "alice@example.com",
}


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'checkin.db'}",
        DB_CONNECT_RETRIES=3,
        DB_CONNECT_RETRY_DELAY_SECONDS=0,
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
async def gateway(test_settings):
    gw = DatabaseGateway(test_settings)
    await gw.connect()
    await gw.bootstrap()
    yield gw
    await gw.close()


@pytest.fixture
def repo(gateway) -> DbUserRepository:
    return DbUserRepository(gateway)


@pytest.fixture
async def client(gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def log_records():
    """Every loguru record emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def refused(*_args, **_kwargs):
    raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))
