"""
Configuration management commands.
"""

import os
from pathlib import Path
from typing import Dict

import click
from dotenv import dotenv_values
from pydantic import ValidationError

from codeforge.config import Settings
from codeforge.config.validation import KNOWN_KEYS, validate_config


def mask_api_key(key: str) -> str:
    """Mask sensitive API key."""
    if len(key) <= 12:
        return key
    return f"{key[:10]}...{key[-4:]}"


def _collect_values(env_file: str) -> Dict[str, str]:
    """Raw values from the .env file, overridden by the process environment."""
    values: Dict[str, str] = {}
    if Path(env_file).exists():
        values.update({k: v or "" for k, v in dotenv_values(env_file).items()})
    for key, value in os.environ.items():
        if key.startswith("CODEFORGE_") or key in KNOWN_KEYS:
            values[key] = value
    return values


@click.group()
def config() -> None:
    """Manage codeforge configuration."""
    pass


@config.command()
@click.option("--env-file", default=".env", help="Path to .env file")
def show(env_file: str) -> None:
    """Show effective settings. API keys are masked."""
    try:
        settings = Settings(_env_file=env_file)
    except ValidationError as e:
        click.echo(f"❌ Invalid configuration:\n{e}")
        raise SystemExit(1)

    for name, value in settings.model_dump().items():
        if value is None:
            value = "(unset)"
        elif name.endswith("api_key"):
            value = mask_api_key(value)
        elif isinstance(value, list):
            value = ",".join(value)
        click.echo(f"{name}={value}")


@config.command()
@click.option("--env-file", default=".env", help="Path to .env file")
def validate(env_file: str) -> None:
    """Check raw configuration values from the environment and .env file."""
    values = _collect_values(env_file)
    if not values:
        click.echo("No configuration values found")
        return

    has_errors = False
    for key, result in sorted(validate_config(values).items()):
        if result.is_valid:
            click.echo(f"✅ {key}: {result.message}")
        else:
            click.echo(f"❌ {key}: {result.message}")
            has_errors = True

    if has_errors:
        click.echo("❌ Configuration has errors")
        raise SystemExit(1)
    click.echo("✅ Configuration is valid")


if __name__ == "__main__":
    config()
