"""Pytest configuration and shared fixtures."""

import os

import pytest

from memfire.adapters.async_client import AsyncMemFirestore
from memfire.adapters.client import MemFirestore
from memfire.config.logging import configure_logging_from_settings
from memfire.config.settings import Settings
from memfire.services.mutation_engine import MutationEngine
from memfire.store.document_store import DocumentStore


@pytest.fixture(autouse=True)
def set_test_env() -> None:
    """Set test environment variables."""
    os.environ.setdefault("MEMFIRE_AUTO_ID_LENGTH", "20")
    os.environ.setdefault("MEMFIRE_LOG_JSON", "false")


@pytest.fixture(autouse=True, scope="session")
def configure_test_logging() -> None:
    """Configure structlog the way an embedding application would."""
    configure_logging_from_settings(Settings(_env_file=None))


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def db(settings: Settings) -> MemFirestore:
    """Fresh in-memory database."""
    return MemFirestore(settings)


@pytest.fixture
def async_db(settings: Settings) -> AsyncMemFirestore:
    """Fresh async client."""
    return AsyncMemFirestore(settings)


@pytest.fixture
def store() -> DocumentStore:
    """Empty document store."""
    return DocumentStore()


@pytest.fixture
def mutations(store: DocumentStore) -> MutationEngine:
    """MutationEngine bound to the ``store`` fixture."""
    return MutationEngine(store)
