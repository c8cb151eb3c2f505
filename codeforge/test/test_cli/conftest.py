"""
Pytest configuration for CLI tests.
"""

import os
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from codeforge.config import get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Provide a clean environment for tests."""
    for var in list(os.environ):
        if var.startswith("CODEFORGE_") or var in ("OPENAI_API_KEY", "GROQ_API_KEY"):
            monkeypatch.delenv(var)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None, None, None]:
    """Keep the CLI from replacing the test run's logging handlers."""
    with patch("codeforge.cli.main.configure_logging"):
        yield


@pytest.fixture
def mock_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODEFORGE_PROVIDER", "mock")


@pytest.fixture
def test_env_file(tmp_path: Path) -> Path:
    """Create a test environment file."""
    env_file = tmp_path / ".env"
    env_content = (
        "CODEFORGE_PROVIDER=openai\n"
        "CODEFORGE_LOG_LEVEL=DEBUG\n"
        "CODEFORGE_MAX_RETRIES=2\n"
        "OPENAI_API_KEY=sk-1234567890abcdef1234567890abcdef1234567890abcdef1234\n"
        "CODEFORGE_LEARNING_DATABASE_URL=sqlite:///test.db\n"
    )
    env_file.write_text(env_content)
    return env_file
