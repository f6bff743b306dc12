"""Shared test fixtures and configuration."""

from datetime import datetime, timezone
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from paywall.core.access import AccessService, Account
from paywall.db.repositories import (
    InMemoryStore,
    MemoryAccountRepository,
    MemorySavedStrategyRepository,
    MemoryStrategyRepository,
    MemoryUsageRepository,
    Repositories,
)


# =============================================================================
# Clock Fixtures
# =============================================================================

@pytest.fixture
def now() -> datetime:
    """A fixed request time inside period 2025-01."""
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def next_month() -> datetime:
    """A fixed request time inside period 2025-02."""
    return datetime(2025, 2, 3, 9, 30, tzinfo=timezone.utc)


# =============================================================================
# Environment Variable Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep tests independent of a developer's .env."""
    monkeypatch.setenv("DATABASE_ENABLED", "false")
    monkeypatch.delenv("API_KEY_REQUIRED", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("API_PREFIX", raising=False)


@pytest.fixture
def relay_api_key(monkeypatch) -> str:
    """Configure the billing relay API key."""
    monkeypatch.setenv("API_KEY", "relay-secret")
    return "relay-secret"


# =============================================================================
# Repository Fixtures (in-memory backend)
# =============================================================================

@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repositories(memory_store) -> Repositories:
    return Repositories(
        accounts=MemoryAccountRepository(memory_store),
        usage=MemoryUsageRepository(memory_store),
        strategies=MemoryStrategyRepository(memory_store),
        saved=MemorySavedStrategyRepository(memory_store),
    )


@pytest.fixture
def add_account(memory_store) -> Callable[..., Account]:
    """Seed an account directly into the in-memory store."""

    def _add(
        account_id: str,
        subscription_tier: Optional[str] = None,
        role: Optional[str] = None,
        **fields,
    ) -> Account:
        account = Account(
            id=account_id,
            role=role,
            subscription_tier=subscription_tier,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        memory_store.accounts[account_id] = account
        return account

    return _add


@pytest.fixture
def access_service(repositories) -> AccessService:
    return AccessService(repositories.accounts, repositories.usage)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def app(repositories, now):
    """FastAPI app wired to the in-memory repositories and a fixed clock."""
    from paywall.api import create_app
    from paywall.api.dependencies import get_request_time

    application = create_app(repositories=repositories)
    application.dependency_overrides[get_request_time] = lambda: now
    return application


@pytest.fixture
def client(app):
    """Test client with the lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
