"""
Configuration validation module.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict
import re


@dataclass
class ValidationResult:
    """Result of a configuration validation."""

    is_valid: bool
    message: str


SUPPORTED_PROVIDERS = ["openai", "groq", "mock"]
SUPPORTED_LANGUAGES = ["typescript", "javascript", "python"]
KNOWN_KEYS = [
    "CODEFORGE_PROVIDER",
    "CODEFORGE_MODEL",
    "OPENAI_API_KEY",
    "GROQ_API_KEY",
    "CODEFORGE_OPENAI_API_KEY",
    "CODEFORGE_GROQ_API_KEY",
    "CODEFORGE_PROVIDER_ENDPOINT",
    "CODEFORGE_DEFAULT_LANGUAGE",
    "CODEFORGE_DEFAULT_FRAMEWORK",
    "CODEFORGE_ENABLE_VALIDATION",
    "CODEFORGE_ENABLE_OPTIMIZATION",
    "CODEFORGE_ENABLE_CACHE",
    "CODEFORGE_MAX_RETRIES",
    "CODEFORGE_RETRY_BACKOFF_SECONDS",
    "CODEFORGE_REQUEST_TIMEOUT_SECONDS",
    "CODEFORGE_MAX_TOKENS",
    "CODEFORGE_TEMPERATURE",
    "CODEFORGE_MAX_CONCURRENCY",
    "CODEFORGE_MIN_VIABLE_LENGTH",
    "CODEFORGE_COMPLEXITY_CEILING",
    "CODEFORGE_OPTIMIZATION_CATEGORIES",
    "CODEFORGE_LEARNING_DATABASE_URL",
    "CODEFORGE_LOG_LEVEL",
    "CODEFORGE_LOG_FILE",
]


def validate_provider(name: str) -> ValidationResult:
    """Validate provider name."""
    if name.lower() in SUPPORTED_PROVIDERS:
        return ValidationResult(True, "Valid provider")
    return ValidationResult(
        False, f"Invalid provider. Must be one of: {', '.join(SUPPORTED_PROVIDERS)}"
    )


def validate_api_key(key: str, provider: str) -> ValidationResult:
    """Validate API key format."""
    patterns = {"openai": r"^sk-[A-Za-z0-9_\-]{20,}$", "groq": r"^gsk_[A-Za-z0-9]{20,}$"}
    if provider not in patterns:
        return ValidationResult(False, f"Unknown provider: {provider}")

    if re.match(patterns[provider], key):
        return ValidationResult(True, f"Valid {provider} API key")
    return ValidationResult(False, f"Invalid {provider} API key format")


def validate_endpoint(url: str) -> ValidationResult:
    """Validate provider endpoint URL."""
    if re.match(r"^https?://[^\s/]+", url):
        return ValidationResult(True, "Valid endpoint")
    return ValidationResult(False, "Endpoint must be an http(s) URL")


def validate_language(language: str) -> ValidationResult:
    if language.lower() in SUPPORTED_LANGUAGES:
        return ValidationResult(True, "Valid language")
    return ValidationResult(
        False, f"Invalid language. Must be one of: {', '.join(SUPPORTED_LANGUAGES)}"
    )


def validate_positive_number(value: str, allow_zero: bool = False) -> ValidationResult:
    """Validate a numeric setting such as a timeout or retry count."""
    try:
        number = float(value)
    except ValueError:
        return ValidationResult(False, f"Not a number: {value}")
    if number < 0 or (number == 0 and not allow_zero):
        return ValidationResult(False, f"Value must be positive: {value}")
    return ValidationResult(True, "Valid number")


def validate_flag(value: str) -> ValidationResult:
    if value.strip().lower() in ("true", "false", "1", "0", "yes", "no"):
        return ValidationResult(True, "Valid flag")
    return ValidationResult(False, f"Invalid boolean flag: {value}")


def validate_database_url(url: str) -> ValidationResult:
    """Validate database URL format."""
    valid_schemes = ["sqlite", "postgresql", "mysql"]
    if "://" not in url:
        return ValidationResult(False, "Invalid database URL format")
    scheme = url.split("://")[0].split("+")[0]
    if scheme not in valid_schemes:
        return ValidationResult(
            False,
            f"Invalid database scheme. Must be one of: {', '.join(valid_schemes)}",
        )
    return ValidationResult(True, "Valid database URL")


def validate_log_level(level: str) -> ValidationResult:
    """Validate log level."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if level.upper() in valid_levels:
        return ValidationResult(True, "Valid log level")
    return ValidationResult(
        False, f"Invalid log level. Must be one of: {', '.join(valid_levels)}"
    )


def validate_log_file(path: str) -> ValidationResult:
    """Validate log file path."""
    log_dir = Path(path).parent
    if not log_dir.exists():
        return ValidationResult(False, f"Log directory does not exist: {log_dir}")
    return ValidationResult(True, "Valid log file path")


def validate_config(config: Dict[str, str]) -> Dict[str, ValidationResult]:
    """Validate all configuration settings.

    Unknown keys are reported as invalid so typos surface early.
    """
    validators = {
        "CODEFORGE_PROVIDER": validate_provider,
        "OPENAI_API_KEY": lambda v: validate_api_key(v, "openai"),
        "GROQ_API_KEY": lambda v: validate_api_key(v, "groq"),
        "CODEFORGE_OPENAI_API_KEY": lambda v: validate_api_key(v, "openai"),
        "CODEFORGE_GROQ_API_KEY": lambda v: validate_api_key(v, "groq"),
        "CODEFORGE_PROVIDER_ENDPOINT": validate_endpoint,
        "CODEFORGE_DEFAULT_LANGUAGE": validate_language,
        "CODEFORGE_ENABLE_VALIDATION": validate_flag,
        "CODEFORGE_ENABLE_OPTIMIZATION": validate_flag,
        "CODEFORGE_ENABLE_CACHE": validate_flag,
        "CODEFORGE_MAX_RETRIES": lambda v: validate_positive_number(v, allow_zero=True),
        "CODEFORGE_RETRY_BACKOFF_SECONDS": lambda v: validate_positive_number(
            v, allow_zero=True
        ),
        "CODEFORGE_REQUEST_TIMEOUT_SECONDS": validate_positive_number,
        "CODEFORGE_MAX_TOKENS": validate_positive_number,
        "CODEFORGE_TEMPERATURE": lambda v: validate_positive_number(v, allow_zero=True),
        "CODEFORGE_MAX_CONCURRENCY": validate_positive_number,
        "CODEFORGE_MIN_VIABLE_LENGTH": lambda v: validate_positive_number(
            v, allow_zero=True
        ),
        "CODEFORGE_COMPLEXITY_CEILING": validate_positive_number,
        "CODEFORGE_LEARNING_DATABASE_URL": validate_database_url,
        "CODEFORGE_LOG_LEVEL": validate_log_level,
        "CODEFORGE_LOG_FILE": validate_log_file,
    }

    results = {}
    for key, value in config.items():
        if key not in KNOWN_KEYS:
            results[key] = ValidationResult(False, f"Invalid configuration key: {key}")
        elif key in validators:
            results[key] = validators[key](value or "")
        else:
            results[key] = ValidationResult(True, "Accepted")
    return results
