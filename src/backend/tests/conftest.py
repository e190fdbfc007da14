"""Test fixtures."""

import copy
import json

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scopegen.api.deps import get_scope_generator
from scopegen.db import Base, get_db
from scopegen.generation.backend import Completion, CompletionReason
from scopegen.generation.orchestrator import ScopeGenerator
from scopegen.generation.template import OUTPUT_TEMPLATE
from scopegen.main import app

# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER = "user_123"
OTHER_USER = "user_456"


class ScriptedBackend:
    """Generation backend stub that replays a fixed list of completions.

    The last completion is repeated once the script runs out.
    """

    def __init__(self, *completions: Completion, available: bool = True):
        self.completions = list(completions)
        self.available = available
        self.calls: list[dict] = []

    def is_available(self) -> bool:
        return self.available

    async def complete(self, instructions: str, payload: str, max_tokens: int) -> Completion:
        self.calls.append(
            {"instructions": instructions, "payload": payload, "max_tokens": max_tokens}
        )
        if len(self.completions) > 1:
            return self.completions.pop(0)
        return self.completions[0]


def _completion(value) -> Completion:
    if isinstance(value, Completion):
        return value
    text = value if isinstance(value, str) else json.dumps(value)
    return Completion(text=text, reason=CompletionReason.COMPLETE)


@pytest.fixture
def make_backend():
    """Factory for scripted backends.

    Each reply may be a Completion, raw text, or a JSON-able value.
    """
    def _make(*replies, available: bool = True) -> ScriptedBackend:
        return ScriptedBackend(*(_completion(r) for r in replies), available=available)

    return _make


@pytest.fixture
def template() -> dict:
    """A private copy of the output template."""
    return copy.deepcopy(OUTPUT_TEMPLATE)


@pytest.fixture
def intake_data() -> dict:
    """A minimal valid intake in wire (camelCase) form."""
    return {
        "projectName": "Acme Portal",
        "industry": "Finance",
        "projectType": "Web app (SaaS)",
        "primaryGoal": "Automate operations",
        "userTypes": ["Admins", "Customers"],
        "deadline": "1–2 months",
        "budgetRange": "$5k–$10k",
    }


@pytest.fixture
def auth_headers() -> dict:
    return {"X-User-Id": TEST_USER}


@pytest.fixture
def other_auth_headers() -> dict:
    return {"X-User-Id": OTHER_USER}


@pytest.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def backend(make_backend) -> ScriptedBackend:
    """Backend that returns the output template verbatim."""
    return make_backend(OUTPUT_TEMPLATE)


@pytest.fixture
async def client(db_session, backend):
    """Create test client with database session and generator overrides.

    Tests swap the backend by reassigning ``app.dependency_overrides``.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_scope_generator] = lambda: ScopeGenerator(backend)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
