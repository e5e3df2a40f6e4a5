"""Root conftest - shared test configuration, collaborator fakes and config fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import re

import pytest

from verimail.core.dispatch import TransportReport

TOKEN_PATTERN = re.compile(r"token=([\w\-.]+)")


class FakeTransport:
    """MailTransport double: records deliveries, accepts by default."""

    def __init__(self):
        self.deliveries = []
        self.accept = True
        self.fault = None

    async def deliver(self, descriptor, message):
        self.deliveries.append((descriptor, message))
        if self.fault is not None:
            raise self.fault
        if self.accept:
            return TransportReport(accepted=[message.to], response="250 2.0.0 OK")
        return TransportReport(rejected=[message.to], response="550 5.1.1 rejected")

    @property
    def last_message(self):
        return self.deliveries[-1][1]

    def last_token(self) -> str:
        match = TOKEN_PATTERN.search(self.last_message.html)
        assert match, "no token in rendered body"
        return match.group(1)


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def email_config():
    return {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_secure": False,
        "smtp_user": "mailer",
        "smtp_pass": "s3cret-pass",
        "smtp_from": "no-reply@example.com",
        "smtp_name": "Example",
        "subject": "Default subject",
    }


@pytest.fixture
def welcome_template_config():
    return {
        "template": "Hello {{firstname}}, code {{token}}",
        "subject": "Welcome",
    }


@pytest.fixture
def verify_template_config():
    return {
        "template": (
            '<p>Hi {{fullname}}</p>'
            '<a href="https://app.example.com/verify?token={{token}}">Verify {{email}}</a>'
        ),
        "subject": "Verify your email",
    }


@pytest.fixture
def verification_config():
    return {
        "email_verification_template": "verify",
        "email_jwt_secret": "jwt-test-secret",
        "email_jwt_expiresIn": "1h",
    }


@pytest.fixture
def config_entries(
    email_config, welcome_template_config, verify_template_config,
    verification_config,
):
    """Everything a full request -> verify round trip needs."""
    return {
        "EMAIL_CONFIG": email_config,
        "EMAIL_CONFIG_TEMPLATE_welcome": welcome_template_config,
        "EMAIL_CONFIG_TEMPLATE_verify": verify_template_config,
        "EMAIL_VERIFICATION_CONFIG": verification_config,
    }


# ─── Database ────────────────────────────────────────────────────

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from verimail.db.base import Base
import verimail.models  # noqa: F401,E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def seed_db(test_session_factory, config_entries):
    """Insert config entries and two users; returns their ids."""
    from verimail.models.config_entry import ConfigEntry
    from verimail.models.user import User

    async with test_session_factory() as session:
        for key, value in config_entries.items():
            session.add(ConfigEntry(key=key, value=value))
        ann = User(email="ann@example.com", firstname="Ann", lastname="Lee")
        bob = User(
            email="bob@example.com", firstname="Bob", lastname="Ray",
            email_verified=True,
        )
        session.add_all([ann, bob])
        await session.commit()
        return {"ann": str(ann.id), "bob": str(bob.id)}
