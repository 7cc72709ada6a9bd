# tests/conftest.py
"""
Pytest configuration and fixtures for the SoW Pulse test suite.

Provides:
- A controllable clock
- Mock tracker (Linear) and chat (Slack) clients
- A Container wired with those mocks
- FastAPI test client built around that container

Note: No test talks to Linear or Slack. HTTP-level client tests use respx.
"""

import os
import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

# Set test environment before imports
os.environ["PULSE_ENV"] = "test"
os.environ["PULSE_SCHEDULER_ENABLED"] = "false"
for _var in ("LINEAR_API_KEY", "SLACK_BOT_TOKEN", "TRACKING_STORE_PATH"):
    os.environ.pop(_var, None)


from src.pulse.config import PulseConfig, UploadConfig
from src.pulse.core.container import Container
from src.pulse.main import create_app

from tests.fixtures.data import make_project


# ============== Clock ==============

class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2024-03-15 12:00 UTC."""
    return FakeClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


# ============== Integration Mocks ==============

@pytest.fixture
def mock_tracker() -> MagicMock:
    """Linear client double returning one project by default."""
    tracker = MagicMock()
    tracker.fetch_projects.return_value = [make_project()]
    return tracker


@pytest.fixture
def mock_chat() -> MagicMock:
    """Slack client double; every post succeeds."""
    chat = MagicMock()
    chat.post_message.return_value = {"ok": True}
    chat.ensure_channel.return_value = "C-PROJECT"
    return chat


# ============== Container / App ==============

@pytest.fixture
def test_config(tmp_path) -> PulseConfig:
    return PulseConfig(
        environment="test",
        scheduler_enabled=False,
        uploads=UploadConfig(upload_dir=str(tmp_path / "uploads")),
    )


@pytest.fixture
def container(test_config, mock_tracker, mock_chat, clock) -> Container:
    return Container(config=test_config, tracker=mock_tracker, chat=mock_chat, clock=clock)


@pytest.fixture(scope="function")
def client(container) -> Generator[TestClient, None, None]:
    """FastAPI test client around the mocked container."""
    app = create_app(container)
    with TestClient(app) as test_client:
        yield test_client
