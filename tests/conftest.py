"""Shared fixtures: both record stores, a fake Gemini client, and an API client."""

from __future__ import annotations

import datetime
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from conversation_analyzer.database import Base, init_db, make_session_factory
from conversation_analyzer.services import llm_service
from conversation_analyzer.services.storage import DatabaseStorage, MemoryStorage, get_storage


SAMPLE_CONVERSATION = (
    "Alex: You said you'd call last night.\n"
    "Sam: Work ran late, I'm sorry.\n"
    "Alex: A text would have been enough."
)


def make_result(**overrides):
    result = {
        "emotionalTone": "Tense but caring",
        "emotionalToneDescription": "Frustration sits on top of real concern.",
        "powerDynamics": "Slightly uneven",
        "powerDynamicsDescription": "Alex is pressing; Sam is deflecting.",
        "communicationPatterns": "Pursue-withdraw",
        "communicationPatternsDescription": "One partner raises the issue, the other minimises it.",
        "relationshipInsights": "Trust under strain",
        "relationshipInsightsDescription": "Both want connection but disagree on what it looks like.",
        "recommendations": ["Name the need", "Agree on check-ins", "Avoid sarcasm", "Schedule a talk"],
        "emotionalIntensity": 6,
        "resolutionPotential": 7.5,
        "communicationQuality": 4,
        "powerBalance": 5,
        "rawAnalysis": "Paragraph one.\n\nParagraph two.",
    }
    result.update(overrides)
    return result


class TickingClock:
    """Each call is one second later than the previous one."""

    def __init__(self, start=datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)):
        self.now = start

    def __call__(self):
        self.now = self.now + datetime.timedelta(seconds=1)
        return self.now


class FakeModels:
    def __init__(self):
        self.response_text = json.dumps(make_result())
        self.error = None
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.response_text)


class FakeGeminiClient:
    def __init__(self):
        self.models = FakeModels()


@pytest.fixture
def fake_client(monkeypatch):
    client = FakeGeminiClient()
    monkeypatch.setattr(llm_service, "get_client", lambda: client)
    return client


@pytest.fixture
def memory_storage():
    return MemoryStorage(clock=TickingClock())


@pytest.fixture
def db_engine():
    # StaticPool keeps every session on the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_storage(db_engine):
    return DatabaseStorage(make_session_factory(db_engine), clock=TickingClock())


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """Runs a test once per backend."""
    if request.param == "memory":
        return request.getfixturevalue("memory_storage")
    return request.getfixturevalue("db_storage")


@pytest.fixture
def app(storage):
    from conversation_analyzer.main import app as _app

    _app.dependency_overrides[get_storage] = lambda: storage
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
