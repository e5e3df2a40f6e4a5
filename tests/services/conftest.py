"""Service test fixtures - in-memory config/user stores and wired services.

Invariants:
    - Stores answer with Envelopes exactly like the SQL stores
    - Every call is logged so tests can assert what was (not) touched
"""

import pytest

from verimail.core.envelope import Envelope
from verimail.core.repository_protocols import UPDATE_CONFLICT_CODE, UPDATE_CONFLICT_I18N
from verimail.services.config_resolver import ConfigResolver
from verimail.services.email_dispatcher import EmailDispatcher
from verimail.services.verification_issuer import VerificationTokenIssuer
from verimail.services.verification_validator import VerificationTokenValidator


class FakeConfigStore:

    def __init__(self, entries):
        self.entries = dict(entries)
        self.calls = []
        self.forced = None

    async def multiplex(self, keys):
        keys = list(keys)
        self.calls.append(("multiplex", keys))
        if self.forced is not None:
            return self.forced
        return Envelope.success(data={
            key: {"exists": key in self.entries, "key": key, "value": self.entries.get(key)}
            for key in keys
        })

    async def get(self, key):
        self.calls.append(("get", key))
        if self.forced is not None:
            return self.forced
        if key not in self.entries:
            return Envelope(code=400, i18n="CONFIG_NOT_FOUND", data={"key": key})
        return Envelope.success(data={"key": key, "value": self.entries[key]})


class FakeUserStore:

    def __init__(self):
        self.users = {}
        self.calls = []
        self.forced = {}

    def add(self, user_id, email, firstname="Ann", lastname="Lee", verified=False):
        self.users[user_id] = {
            "id": user_id, "email": email, "firstname": firstname,
            "lastname": lastname, "emailVerified": verified,
        }
        return self.users[user_id]

    async def get_by_unique(self, field, value):
        self.calls.append(("get_by_unique", field, value))
        for user in self.users.values():
            if user.get(field) == value:
                return Envelope.success(data=dict(user))
        return Envelope(code=400, i18n="USER_NOT_FOUND", data={field: value})

    async def get_by_id(self, user_id):
        self.calls.append(("get_by_id", user_id))
        if "get_by_id" in self.forced:
            return self.forced["get_by_id"]
        if user_id not in self.users:
            return Envelope(code=400, i18n="USER_NOT_FOUND", data={"id": user_id})
        return Envelope.success(data=dict(self.users[user_id]))

    async def update(self, user_id, fields, expected=None):
        self.calls.append(("update", user_id, fields, expected))
        if "update" in self.forced:
            return self.forced["update"]
        user = self.users[user_id]
        if any(user.get(k) != v for k, v in (expected or {}).items()):
            return Envelope(code=UPDATE_CONFLICT_CODE, i18n=UPDATE_CONFLICT_I18N, data={"id": user_id})
        user.update(fields)
        return Envelope.success(data=dict(user))

    @property
    def updates(self):
        return [c for c in self.calls if c[0] == "update"]


@pytest.fixture
def config_store(config_entries):
    return FakeConfigStore(config_entries)


@pytest.fixture
def user_store():
    store = FakeUserStore()
    store.add("user-1", "ann@example.com")
    return store


@pytest.fixture
def resolver(config_store):
    return ConfigResolver(config_store)


@pytest.fixture
def dispatcher(resolver, fake_transport):
    return EmailDispatcher(resolver, fake_transport)


@pytest.fixture
def issuer(user_store, resolver, dispatcher):
    return VerificationTokenIssuer(user_store, resolver, dispatcher)


@pytest.fixture
def validator(user_store, resolver):
    return VerificationTokenValidator(user_store, resolver)
