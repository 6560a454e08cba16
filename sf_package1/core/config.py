"""CLI configuration loaded from environment variables.

All configuration values have sensible defaults.  The object is built
once per invocation by the CLI group and passed explicitly to every
command; nothing reads the environment after startup.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any numeric
    value is out of its valid range, so bad configuration surfaces
    before any remote call is made.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from sf_package1.core.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_AUTH_FILE,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PROJECT_FILE,
    api_version_number,
)
from sf_package1.core.exceptions import ValidationError


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class CliConfig:
    """Immutable CLI configuration.

    Attributes:
        default_hub: Alias or username used when no hub flag is given.
        api_version: Salesforce REST API version (e.g. ``"59.0"``).
        poll_interval_seconds: Seconds between upload status polls.
        http_timeout_seconds: Timeout for each REST call.
        auth_file: Path of the JSON file holding hub sessions.
        project_file: Path of the ``sfdx-project.json`` used for aliases.
    """

    default_hub: str = ""
    api_version: str = DEFAULT_API_VERSION
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    auth_file: str = DEFAULT_AUTH_FILE
    project_file: str = DEFAULT_PROJECT_FILE

    @classmethod
    def from_env(cls) -> CliConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or malformed.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``SF_PACKAGE1_POLL_INTERVAL_SECONDS=abc``).
        """
        config = cls(
            default_hub=os.getenv("SF_TARGET_DEV_HUB", ""),
            api_version=os.getenv("SF_API_VERSION", DEFAULT_API_VERSION),
            poll_interval_seconds=float(
                os.getenv("SF_PACKAGE1_POLL_INTERVAL_SECONDS", str(DEFAULT_POLL_INTERVAL_SECONDS))
            ),
            http_timeout_seconds=float(
                os.getenv("SF_PACKAGE1_HTTP_TIMEOUT_SECONDS", str(DEFAULT_HTTP_TIMEOUT_SECONDS))
            ),
            auth_file=os.getenv("SF_PACKAGE1_AUTH_FILE", DEFAULT_AUTH_FILE),
            project_file=os.getenv("SF_PROJECT_FILE", DEFAULT_PROJECT_FILE),
        )
        _validate(config)
        return config


def _validate(config: CliConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    try:
        version = api_version_number(config.api_version)
    except ValueError:
        version = 0.0
    if version <= 0:
        raise ConfigValidationError(
            "SF_API_VERSION",
            config.api_version,
            "must be a positive version number such as '59.0'",
        )

    if config.poll_interval_seconds <= 0:
        raise ConfigValidationError(
            "SF_PACKAGE1_POLL_INTERVAL_SECONDS",
            config.poll_interval_seconds,
            "must be > 0 (seconds)",
        )

    if config.http_timeout_seconds <= 0:
        raise ConfigValidationError(
            "SF_PACKAGE1_HTTP_TIMEOUT_SECONDS",
            config.http_timeout_seconds,
            "must be > 0 (seconds)",
        )

    if not config.auth_file:
        raise ConfigValidationError(
            "SF_PACKAGE1_AUTH_FILE",
            config.auth_file,
            "must not be empty",
        )
