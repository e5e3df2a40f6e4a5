"""API test fixtures - FastAPI client on in-memory SQLite with a fake mail transport.

Invariants:
    - get_db overridden to the test session factory
    - get_mail_transport overridden: no test ever opens an SMTP socket
"""

import pytest
from httpx import ASGITransport, AsyncClient

from verimail.api.dependencies import get_mail_transport
from verimail.infrastructure.database import DatabaseSessionManager, get_db
import verimail.infrastructure.database as db_module
from verimail.main import app


@pytest.fixture
async def client(test_engine, test_session_factory, fake_transport, seed_db):
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_transport] = lambda: fake_transport

    original_manager = db_module.db_manager
    db_module.db_manager = DatabaseSessionManager(test_engine)

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def creator_headers():
    return {"X-Creator": "Acme"}
