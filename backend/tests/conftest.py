import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from database import get_db, init_db
from generation import get_generator
from identity import IdentityProvider, get_identity
from main import app

TEST_SECRET = "test-identity-secret-0123456789abcdef0123456789abcdef"

DEFAULT_ASSESSMENT = {
    "totalScore": 72,
    "categoryScores": [
        {"name": "Communication Skills", "score": 80, "comment": "Clear answers."},
        {"name": "Technical Knowledge", "score": 70, "comment": "Solid basics."},
        {"name": "Problem Solving", "score": 65, "comment": "Reasonable approach."},
        {"name": "Cultural Fit", "score": 75, "comment": "Good alignment."},
        {"name": "Confidence and Clarity", "score": 70, "comment": "Mostly confident."},
    ],
    "strengths": ["Structured answers"],
    "areasForImprovement": ["Go deeper on trade-offs"],
    "finalAssessment": "A competent interview with room to grow.",
}


class FakeGenerator:
    def __init__(self):
        self.text = '["Q1", "Q2", "Q3"]'
        self.assessment = dict(DEFAULT_ASSESSMENT)
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def generate_text(self, prompt, *, model=None, system=None):
        self.calls.append({"kind": "text", "prompt": prompt, "model": model, "system": system})
        if self.error:
            raise self.error
        return self.text

    async def generate_object(self, prompt, schema, *, model=None, system=None):
        self.calls.append({"kind": "object", "prompt": prompt, "model": model, "system": system})
        if self.error:
            raise self.error
        return schema.model_validate(self.assessment)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    asyncio.run(init_db(engine))
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        asyncio.run(engine.dispose())


@pytest.fixture
def run_db(session_factory):
    """Run ``fn(db, *args)`` inside a fresh session on a fresh event loop."""

    def _run(fn, *args, **kwargs):
        async def _inner():
            async with session_factory() as db:
                return await fn(db, *args, **kwargs)

        return asyncio.run(_inner())

    return _run


@pytest.fixture
def identity():
    return IdentityProvider(TEST_SECRET)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(session_factory, identity, generator, monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity] = lambda: identity
    app.dependency_overrides[get_generator] = lambda: generator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def register_and_sign_in(client: TestClient, email: str = "ada@example.com", name: str = "Ada") -> str:
    uid = client.post("/api/identity/accounts", json={"email": email, "password": "secret123"}).json()["uid"]
    assert client.post("/api/auth/sign-up", json={"uid": uid, "name": name, "email": email}).json()["success"]
    id_token = client.post("/api/identity/tokens", json={"email": email, "password": "secret123"}).json()["idToken"]
    assert client.post("/api/auth/sign-in", json={"email": email, "idToken": id_token}).json()["success"]
    return uid
