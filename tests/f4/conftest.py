"""Fixtures for Web API, CLI and calendar tests."""

import random

import pytest
from fastapi.testclient import TestClient

from courseflow.config.app_config import AppConfig, LedgerConfig, _parse_config
from courseflow.config.heuristics import ParserHeuristics
from courseflow.core.response_parser import parse_syllabus_response
from courseflow.db.ledger import GradeLedger
from courseflow.db.store import InMemoryStore
from courseflow.web.api import create_app
from courseflow.web.dependencies import get_llm_client


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    config = _parse_config({})
    config.ledger = LedgerConfig(
        database_path=tmp_path / "database.json",
        uploads_dir=tmp_path / "uploads",
        calendar_dir=tmp_path / "calendars",
    )
    return config


@pytest.fixture
def ledger():
    return GradeLedger(InMemoryStore(), rng=random.Random(0))


@pytest.fixture
def seeded_ledger(ledger, sample_outline):
    """Ledger holding the sample course (id 1, assessments 1-6)."""
    ledger.save_syllabus(parse_syllabus_response(sample_outline, ParserHeuristics()))
    return ledger


@pytest.fixture
def app(ledger, app_config, mock_llm_client, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    app = create_app(ledger=ledger, config=app_config)
    app.dependency_overrides[get_llm_client] = lambda: mock_llm_client
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def seeded_client(seeded_ledger, client):
    return client
