# ABOUTME: Validation utilities for provider profiles
# ABOUTME: Structural checks applied at the provider store boundary
import os
import shutil
from dataclasses import dataclass
from urllib.parse import urlparse

from ccs.models import Provider
from ccs.utils.env import referenced_env_vars
from ccs.utils.paths import expand_path

PROVIDER_TYPES = ("oauth", "api_key")

# ABOUTME: Env keys a provider may override; anything else is rejected
ALLOWED_ENV_KEYS = (
    "ANTHROPIC_AUTH_TOKEN",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_BASE_URL",
    "ANTHROPIC_MODEL",
    "ANTHROPIC_SMALL_FAST_MODEL",
    "API_TIMEOUT_MS",
)


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    provider_key: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Validate that a command exists on the system.

    ABOUTME: Uses shutil.which() for cross-platform command lookup
    ABOUTME: Returns None if command found, ValidationError otherwise

    Examples:
        >>> validate_command_exists("claude")
        None
        >>> validate_command_exists("nonexistent_cmd")
        ValidationError(provider_key='', message='Command not found: nonexistent_cmd', severity='error')
    """
    if shutil.which(command) is None:
        return ValidationError(
            provider_key="",
            message=f"Command not found: {command}",
            severity="error"
        )
    return None


def validate_url(url: str) -> ValidationError | None:
    """Validate that a URL is properly formatted.

    ABOUTME: Requires HTTP or HTTPS scheme and a host
    ABOUTME: Returns None if URL valid, ValidationError otherwise
    """
    try:
        parsed = urlparse(url)
    except ValueError as e:
        return ValidationError(
            provider_key="",
            message=f"Invalid URL format '{url}': {e}",
            severity="error"
        )
    if parsed.scheme not in ("http", "https"):
        return ValidationError(
            provider_key="",
            message=f"URL must use HTTP or HTTPS scheme: {url}",
            severity="error"
        )
    if not parsed.netloc:
        return ValidationError(
            provider_key="",
            message=f"URL missing host/domain: {url}",
            severity="error"
        )
    return None


def validate_provider(key: str, provider: Provider) -> list[ValidationError]:
    """Validate a provider profile.

    ABOUTME: Errors block the provider from being stored
    ABOUTME: Warnings cover a missing config dir and unset ${VAR} references

    Args:
        key: Provider key in the store
        provider: Provider to validate

    Returns:
        List of ValidationError instances (empty if valid)

    Examples:
        >>> validate_provider("glm", Provider(name="GLM", type="api_key", config_dir="~/.claude-glm"))
        []
    """
    errors: list[ValidationError] = []

    def error(message: str) -> None:
        errors.append(ValidationError(provider_key=key, message=message, severity="error"))

    def warning(message: str) -> None:
        errors.append(ValidationError(provider_key=key, message=message, severity="warning"))

    if not key.strip():
        error("Provider key is required")
    if not provider.name.strip():
        error("Provider name is required")
    if provider.type not in PROVIDER_TYPES:
        error(f"Invalid type '{provider.type}'. Must be 'oauth' or 'api_key'.")
    if not provider.config_dir.strip():
        error("configDir is required")
    elif not expand_path(provider.config_dir).is_dir():
        warning(f"Config directory does not exist yet: {provider.config_dir}")

    env = provider.env or {}
    if env and provider.type == "oauth":
        error("OAuth providers cannot define env overrides")

    for env_key, value in env.items():
        if env_key not in ALLOWED_ENV_KEYS:
            error(f"Unknown env key '{env_key}'")
            continue
        if value is None:
            continue
        if not isinstance(value, str):
            error(f"env.{env_key} must be a string")
            continue

        references = referenced_env_vars(value)
        for var_name in references:
            if var_name not in os.environ:
                warning(f"Environment variable '${var_name}' not set (referenced in env.{env_key})")

        # URLs built from ${VAR} references are only known at launch time
        if env_key == "ANTHROPIC_BASE_URL" and not references:
            url_error = validate_url(value)
            if url_error:
                error(url_error.message)

    return errors


def blocking_errors(errors: list[ValidationError]) -> list[ValidationError]:
    """Filter out warnings."""
    return [e for e in errors if e.severity == "error"]
