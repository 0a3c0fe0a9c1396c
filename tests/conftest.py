"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import Mock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from src.models.employee import Caller, Role
from src.utils.config import AppConfig
from tests.fakes import FakeBackend
from tests.utils.factories import create_project_data, create_task_data

FROZEN_NOW = "2024-12-09 12:00:00"


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = Mock()
    client.table = Mock(return_value=Mock())
    return client


@pytest.fixture
def caller():
    """Administrator performing the operation."""
    return Caller(user_id="U123456", user_name="Ana Souza", role=Role.ADMIN)


@pytest.fixture
def backend(monkeypatch):
    """In-memory backend patched over every Supabase helper."""
    fake = FakeBackend()
    fake.settings = {"id": "global", "task_completion_base": 10, "complexity_multiplier": 1.2}
    return fake.install(monkeypatch)


@pytest.fixture
def project(backend):
    """Stored project with two managers."""
    return backend.add_project(create_project_data(
        project_id="P-APOLLO",
        name="Apollo Launch",
        managers=["M-001", "M-002"],
    ))


@pytest.fixture
def task(backend, project):
    """Stored pending task, difficulty 5, assigned to E-100."""
    return backend.add_task(create_task_data(
        task_id="T-001",
        title="Prepare launch checklist",
        project_id=project["project_id"],
        assigned_to="E-100",
        difficulty_level=5,
        coins_reward=60,
    ))


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time(FROZEN_NOW) as frozen_time:
        yield frozen_time


@pytest.fixture
def max_retries(monkeypatch):
    """Pin the write retry budget."""
    monkeypatch.setattr(AppConfig, "TASK_WRITE_MAX_RETRIES", 3)
    return 3
