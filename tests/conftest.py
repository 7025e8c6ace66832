"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import AsyncMock
from freezegun import freeze_time

# Set test environment variables before src modules read them
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key")

from src.services.rate_limiter import RateLimitConfig, RateLimiter  # noqa: E402
from tests.utils.fake_supabase import FakeSupabase  # noqa: E402


@pytest.fixture
def fake_supabase(monkeypatch):
    """In-memory Supabase behind every store helper."""
    db = FakeSupabase()
    monkeypatch.setattr("src.services.supabase_client.get_supabase_client", lambda: db)
    return db


@pytest.fixture
def no_sleep():
    """Awaitable sleep replacement that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def rate_limiter(no_sleep):
    """Rate limiter that never actually waits."""
    return RateLimiter(RateLimitConfig(max_requests_per_minute=50), sleep=no_sleep)


@pytest.fixture
def openai_key(monkeypatch):
    monkeypatch.setattr("src.utils.generation_config.GenerationConfig.LLM_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
