"""Shared test fixtures for the Projects Board client tests."""

import sys
from pathlib import Path

import pytest

# Ensure the repository root (projects_board/, board_cli.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from projects_board.app import BoardApp
from projects_board.storage import SessionStorage

from .fakes import COMPANY, EMAIL, PASSWORD, FakeClient


@pytest.fixture
def storage(tmp_path):
    return SessionStorage(str(tmp_path / "session.db"))


@pytest.fixture
def client():
    fake = FakeClient()
    fake.add_user(EMAIL, PASSWORD, COMPANY)
    return fake


@pytest.fixture
def app(client, storage):
    return BoardApp(client, storage)


@pytest.fixture
def signed_in(app):
    """App with an active session and nothing loaded yet."""
    app.sessions.login(EMAIL, PASSWORD)
    return app
