# Provider store: loading, validating and saving ~/.ccs/config.json
import json
import logging
import os
from pathlib import Path
from typing import Any

from ccs.models import Config, Provider
from ccs.utils import blocking_errors, validate_provider

logger = logging.getLogger(__name__)

# ABOUTME: Overrides the provider store location when set
CONFIG_PATH_ENV = "CCS_CONFIG_PATH"

DEFAULT_PROVIDER_KEY = "anthropic"


class ProviderNotFoundError(KeyError):
    """Raised when a provider key is not in the store."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Provider '{self.key}' not found"


def get_state_dir() -> Path:
    """Return ~/.ccs, home of the state database and backups."""
    return Path.home() / ".ccs"


def get_config_path() -> Path:
    """Return the path to the provider store.

    ABOUTME: $CCS_CONFIG_PATH if set, else ~/.ccs/config.json
    ABOUTME: File may not exist yet - read_config() falls back to defaults
    """
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return get_state_dir() / "config.json"


def default_config() -> Config:
    """Single OAuth provider using the stock ~/.claude tree."""
    return Config(
        current=DEFAULT_PROVIDER_KEY,
        providers={
            DEFAULT_PROVIDER_KEY: Provider(
                name="Anthropic (OAuth)",
                type="oauth",
                config_dir="~/.claude",
            )
        },
    )


def provider_from_dict(key: str, data: dict[str, Any]) -> Provider:
    """Convert a stored provider entry to a Provider.

    ABOUTME: Fail-fast on missing or mistyped fields
    ABOUTME: Runs validate_provider() and raises on blocking errors

    Raises:
        ValueError: If the entry is malformed or invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"Provider '{key}' must be an object")

    for required in ("name", "type", "configDir"):
        if not isinstance(data.get(required), str):
            raise ValueError(f"Provider '{key}' missing required '{required}' field")

    env = data.get("env")
    if env is not None and not isinstance(env, dict):
        raise ValueError(f"Provider '{key}' field 'env' must be an object")

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise ValueError(f"Provider '{key}' field 'description' must be a string")

    memory_reset = data.get("memoryReset", False)
    if not isinstance(memory_reset, bool):
        raise ValueError(f"Provider '{key}' field 'memoryReset' must be a boolean")

    provider = Provider(
        name=data["name"],
        type=data["type"],
        config_dir=data["configDir"],
        description=description,
        env=dict(env) if env is not None else None,
        memory_reset=memory_reset,
    )

    errors = blocking_errors(validate_provider(key, provider))
    if errors:
        raise ValueError("; ".join(f"{key}: {e.message}" for e in errors))

    return provider


def provider_to_dict(provider: Provider) -> dict[str, Any]:
    """Convert a Provider to its stored form, omitting unset optionals."""
    result: dict[str, Any] = {
        "name": provider.name,
        "type": provider.type,
    }
    if provider.description:
        result["description"] = provider.description
    result["configDir"] = provider.config_dir
    if provider.env:
        env = {k: v for k, v in provider.env.items() if v is not None}
        if env:
            result["env"] = env
    if provider.memory_reset:
        result["memoryReset"] = True
    return result


def parse_config(data: Any) -> Config:
    """Validate raw JSON data and build a Config.

    Raises:
        ValueError: If required fields are missing or invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Config must be a JSON object")

    current = data.get("current")
    if not isinstance(current, str) or not current:
        raise ValueError("Missing required 'current' field")

    providers_data = data.get("providers")
    if not isinstance(providers_data, dict) or not providers_data:
        raise ValueError("At least one provider is required")

    providers = {
        key: provider_from_dict(key, value) for key, value in providers_data.items()
    }

    if current not in providers:
        raise ValueError(f"Current provider '{current}' must exist in providers list")

    return Config(current=current, providers=providers)


def read_config(path: Path | None = None) -> Config:
    """Load the provider store.

    ABOUTME: Missing file -> default config
    ABOUTME: Invalid JSON or schema -> logged error, default config
    """
    path = path or get_config_path()
    if not path.exists():
        return default_config()

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError:
        logger.error(f"{path.name} contains invalid JSON. Using default config.")
        return default_config()
    except OSError as e:
        logger.error(f"Error reading {path}: {e}")
        return default_config()

    try:
        return parse_config(raw)
    except ValueError as e:
        logger.error(f"Invalid {path.name}: {e}")
        logger.error(f"Using default config. Fix {path} or delete it to regenerate.")
        return default_config()


def write_config(config: Config, path: Path | None = None) -> None:
    """Save the provider store.

    ABOUTME: Creates parent directory if needed
    """
    path = path or get_config_path()
    data = {
        "current": config.current,
        "providers": {
            key: provider_to_dict(provider) for key, provider in config.providers.items()
        },
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def get_current_provider() -> tuple[str, Provider]:
    """Return the selected provider key and record."""
    config = read_config()
    return config.current, config.providers[config.current]


def get_provider(key: str) -> Provider | None:
    return read_config().providers.get(key)


def require_provider(key: str) -> Provider:
    """Like get_provider() but raises ProviderNotFoundError."""
    provider = get_provider(key)
    if provider is None:
        raise ProviderNotFoundError(key)
    return provider


def set_current_provider(key: str) -> bool:
    """Select `key` as the current provider; False if unknown."""
    config = read_config()
    if key not in config.providers:
        return False
    config.current = key
    write_config(config)
    return True


def add_provider(key: str, provider: Provider) -> tuple[bool, str | None]:
    """Add a provider to the store.

    Returns:
        (True, None) on success, (False, error message) otherwise
    """
    config = read_config()

    if key in config.providers:
        return False, f"Provider '{key}' already exists. Use 'ccs remove {key}' first."

    errors = blocking_errors(validate_provider(key, provider))
    if errors:
        return False, "Invalid provider: " + ", ".join(e.message for e in errors)

    config.providers[key] = provider
    write_config(config)
    return True, None


def remove_provider(key: str) -> tuple[bool, str | None]:
    """Remove a provider from the store.

    ABOUTME: The last provider cannot be removed
    ABOUTME: Removing the current provider selects another one first
    """
    config = read_config()

    if key not in config.providers:
        return False, f"Provider '{key}' not found."

    if len(config.providers) == 1:
        return False, "Cannot remove the last provider."

    if config.current == key:
        config.current = next(k for k in config.providers if k != key)

    del config.providers[key]
    write_config(config)
    return True, None


def list_providers() -> list[tuple[str, Provider, bool]]:
    """All providers as (key, provider, is_current)."""
    config = read_config()
    return [
        (key, provider, key == config.current)
        for key, provider in config.providers.items()
    ]
