"""Shared pytest configuration and fixtures for LLM Router tests."""

import pytest

from llm_router.core.config import ConfigSchema, reset_config
from llm_router.core.factory import reset_manager

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]


@pytest.fixture
def mock_openai_api_key(monkeypatch):
    """Mock OpenAI API key for testing."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai-key")


@pytest.fixture
def mock_anthropic_api_key(monkeypatch):
    """Mock Anthropic API key for testing."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-anthropic-key")


@pytest.fixture
def offline_mode(monkeypatch):
    """Serve everything from the mock provider."""
    monkeypatch.setenv("SKIP_AI_REQUEST", "true")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires services)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="function", autouse=True)
def setup_test_environment(monkeypatch):
    """Start every test from a clean environment.

    All configuration variables are removed (a developer's .env must not
    leak into tests) and the cached Config and manager are dropped.
    """
    for spec in ConfigSchema.all_specs().values():
        monkeypatch.delenv(spec.name, raising=False)
    # Keep startup health sweeps out of unit tests unless a test opts in
    monkeypatch.setenv("LLM_HEALTH_CHECK_ON_START", "false")

    reset_config()
    reset_manager()
    yield
    reset_config()
    reset_manager()
