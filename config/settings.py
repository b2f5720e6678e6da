"""
Configuration management for the session gateway.

This module provides centralized configuration loading and validation using
Pydantic settings. Values are loaded from environment variables or .env
files; OAuth client credentials are not configured here directly, only the
names of the SSM parameters that hold them.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional, List, Tuple

from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


SESSION_STORE_TYPES = {"dynamodb", "redis", "memory"}

# One week, the lifetime of a login session
DEFAULT_SESSION_TTL_SECONDS = 604800


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    The base .env file is loaded first, then the environment-specific file
    overrides it.

    Args:
        environment: The target environment.

    Returns:
        Tuple of .env file paths to load.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }
    return (".env", env_file_map.get(environment, ".env.development"))


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The ENVIRONMENT variable determines which environment-specific .env
    file is layered over the base .env file.
    """

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Session Store Configuration
    session_store_type: str = Field(
        default="dynamodb",
        description="Key-value backend for sessions: 'dynamodb', 'redis' or 'memory'"
    )
    table_name: Optional[str] = Field(
        default=None,
        description="DynamoDB table holding session records"
    )
    aws_region: Optional[str] = Field(
        default=None,
        description="AWS region for DynamoDB and SSM (defaults to the boto3 chain)"
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL when session_store_type is 'redis'"
    )
    redis_key_prefix: str = Field(
        default="kv:",
        description="Prefix for the Redis hash holding each partition"
    )
    session_signing_key: SecretStr = Field(
        ...,
        description="HMAC key used to sign session cookie values"
    )
    session_ttl_seconds: int = Field(
        default=DEFAULT_SESSION_TTL_SECONDS,
        ge=60,
        description="Lifetime of a session created by the login flow"
    )

    # OAuth Configuration
    github_client_id_param: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("github_client_id_param", "param_github_client_id"),
        description="SSM parameter name holding the GitHub OAuth client id"
    )
    github_client_secret_param: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("github_client_secret_param", "param_github_client_secret"),
        description="SSM parameter name holding the GitHub OAuth client secret"
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for token exchange and profile requests"
    )
    http_user_agent: str = Field(
        default="oath",
        description="User-Agent sent to the OAuth provider"
    )

    # Routing Configuration
    api_stage: str = Field(
        default="",
        description="API Gateway stage prefixed to the post-login redirect path"
    )
    protected_path: str = Field(
        default="/protected",
        description="Path of the protected resource users land on after login"
    )

    # Observability Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("session_store_type")
    @classmethod
    def validate_session_store_type(cls, v: str) -> str:
        """Validate that session_store_type names a supported backend."""
        v = v.strip().lower()
        if v not in SESSION_STORE_TYPES:
            raise ValueError(
                f"session_store_type must be one of: {', '.join(sorted(SESSION_STORE_TYPES))}"
            )
        return v

    @field_validator("session_signing_key")
    @classmethod
    def validate_session_signing_key(cls, v: SecretStr) -> SecretStr:
        """Validate that the signing key is long enough to resist guessing."""
        if len(v.get_secret_value().strip()) < 32:
            raise ValueError("session_signing_key must be at least 32 characters")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v

    @field_validator("api_stage")
    @classmethod
    def normalize_stage(cls, v: str) -> str:
        """Normalize the stage to '' or '/stage' without a trailing slash."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    @field_validator("protected_path")
    @classmethod
    def normalize_protected_path(cls, v: str) -> str:
        """Normalize to '/path'; the login redirect needs a route to land on."""
        v = v.strip().strip("/")
        if not v:
            raise ValueError("protected_path must name a path, not '/'")
        return f"/{v}"

    @model_validator(mode="after")
    def validate_session_store_config(self) -> "Settings":
        """Validate that the selected backend has its table or URL."""
        if self.environment == Environment.DEVELOPMENT:
            # Development falls back to the in-memory store
            return self
        if self.session_store_type == "memory":
            raise ValueError(
                "session_store_type 'memory' is only allowed in development"
            )
        if self.session_store_type == "dynamodb" and not self.table_name:
            raise ValueError(
                "table_name is required when session_store_type is 'dynamodb' "
                "in non-development environments"
            )
        if self.session_store_type == "redis" and not self.redis_url:
            raise ValueError(
                "redis_url is required when session_store_type is 'redis' "
                "in non-development environments"
            )
        return self


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    Args:
        environment: Optional environment override. If not provided, detected from
                    the ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = tuple(f for f in _get_env_files(environment) if Path(f).exists())

    class EnvironmentSettings(Settings):
        model_config = SettingsConfigDict(
            env_file=env_files or None,
            env_file_encoding="utf-8",
            case_sensitive=False,
            extra="ignore"
        )

    try:
        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        # Pydantic ValidationError carries per-field errors
        if hasattr(e, "errors"):
            for error in e.errors():
                field_name = ".".join(str(loc) for loc in error.get("loc", [])) or "settings"
                error_type = error.get("type", "")
                error_msg = error.get("msg", str(error))

                if error_type == "missing":
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name] = error_msg

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Returns:
        Settings: The validated application settings.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() reloads from the environment."""
    global _settings_cache
    _settings_cache = None
