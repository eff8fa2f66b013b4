import sqlite3

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from services.identity import IdentityResolver
from services.quota import QuotaLedger

TOKENS = {
    "alice-token": "user-alice",
    "bob-token": "user-bob",
}


class FakeVerifier:
    def __init__(self, tokens=None):
        self.tokens = dict(TOKENS if tokens is None else tokens)
        self.calls = []

    def verify(self, token):
        self.calls.append(token)
        if token not in self.tokens:
            raise ValueError("invalid JWT")
        return self.tokens[token]


class FakeProvider:
    def __init__(self, reply="A short summary.", error=None, models=("llama3", "gemma2")):
        self.reply = reply
        self.error = error
        self.models = list(models)
        self.calls = []

    def summarize(self, style, text, model):
        self.calls.append({"style": style, "text": text, "model": model})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def settings(tmp_path):
    return Settings(database_path=str(tmp_path / "users.db"), identity_backend="none")


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def ledger(settings):
    return QuotaLedger(settings.database_path, limit=settings.free_summary_limit)


@pytest.fixture
def providers():
    return {"groq": FakeProvider(), "ollama": FakeProvider()}


@pytest.fixture
def make_client(settings, verifier, ledger, providers):
    def _make(**overrides):
        app = create_app(
            settings=overrides.pop("settings", settings),
            resolver=IdentityResolver(verifier),
            ledger=overrides.pop("ledger", ledger),
            providers=overrides.pop("providers", providers),
        )
        return TestClient(app, **overrides)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def summary_record(path, account_id):
    conn = sqlite3.connect(path)
    try:
        row = conn.execute(
            "SELECT account_id, count, last_reset FROM summary_counts WHERE account_id = ?",
            (account_id,),
        ).fetchone()
    finally:
        conn.close()

    if not row:
        return None
    return {"account_id": row[0], "count": row[1], "last_reset": row[2]}
