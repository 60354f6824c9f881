"""
Shared fixtures: in-memory database and a scripted stand-in for GeminiClient.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from prediktor.db.database import init_db
from prediktor.models.schemas import CompanyData


class ScriptedClient:
    """Answers prompts from a fixed script; exceptions in the script are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("ScriptedClient ran out of responses")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def scripted_client():
    return ScriptedClient


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def commerce_company():
    return CompanyData(
        year="2024", revenue=5_000_000, expenses=3_500_000, employees=10,
        sector="Commerce", market="Local",
    )
