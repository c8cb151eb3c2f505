"""
Tests for configuration management commands.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from codeforge.cli.config_cmd import config, mask_api_key


def test_mask_api_key() -> None:
    assert mask_api_key("short") == "short"
    assert (
        mask_api_key("sk-1234567890abcdef1234567890abcdef1234567890abcdef1234")
        == "sk-1234567...1234"
    )


def test_config_show(test_env_file: Path) -> None:
    """Test config show command."""
    runner = CliRunner()
    result = runner.invoke(config, ["show", "--env-file", str(test_env_file)])

    assert result.exit_code == 0
    assert "provider=openai" in result.output
    assert "log_level=DEBUG" in result.output
    assert "max_retries=2" in result.output
    assert "openai_api_key=sk-1234567...1234" in result.output
    assert "abcdef1234567890abcdef" not in result.output
    assert "groq_api_key=(unset)" in result.output
    assert "optimization_categories=formatting,readability" in result.output


def test_config_show_environment_overrides_file(
    test_env_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CODEFORGE_PROVIDER", "mock")
    result = CliRunner().invoke(config, ["show", "--env-file", str(test_env_file)])
    assert "provider=mock" in result.output


def test_config_show_invalid(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("CODEFORGE_MAX_RETRIES=-3\n")

    result = CliRunner().invoke(config, ["show", "--env-file", str(env_file)])

    assert result.exit_code == 1
    assert "❌ Invalid configuration" in result.output


def test_config_validate(test_env_file: Path) -> None:
    """Test config validate command."""
    runner = CliRunner()
    result = runner.invoke(config, ["validate", "--env-file", str(test_env_file)])

    assert result.exit_code == 0
    assert "✅ CODEFORGE_PROVIDER: Valid provider" in result.output
    assert "✅ OPENAI_API_KEY: Valid openai API key" in result.output
    assert "✅ Configuration is valid" in result.output


def test_config_validate_errors(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "CODEFORGE_PROVIDER=anthropic\n"
        "GROQ_API_KEY=not-a-key\n"
        "CODEFORGE_TYPO=1\n"
        "CODEFORGE_LOG_LEVEL=info\n"
    )

    result = CliRunner().invoke(config, ["validate", "--env-file", str(env_file)])

    assert result.exit_code == 1
    assert "❌ CODEFORGE_PROVIDER: Invalid provider" in result.output
    assert "❌ GROQ_API_KEY: Invalid groq API key format" in result.output
    assert "❌ CODEFORGE_TYPO: Invalid configuration key" in result.output
    assert "✅ CODEFORGE_LOG_LEVEL" in result.output
    assert "❌ Configuration has errors" in result.output


def test_config_validate_nothing_set(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        config, ["validate", "--env-file", str(tmp_path / "missing.env")]
    )
    assert result.exit_code == 0
    assert "No configuration values found" in result.output
