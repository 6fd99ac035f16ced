# Launch orchestration: pre-flight hygiene, sync, env and the foreground claude process
import enum
import logging
import os
import sqlite3
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from ccs.cleanup import DEFAULT_POLICY, CleanupPolicy, auto_clean, reset_memory, truncate_oversized_sessions
from ccs.config import require_provider
from ccs.models import Provider
from ccs.state import StateStore
from ccs.sync import sync_provider
from ccs.utils import DirSizeCache, expand_env_vars, expand_path, same_path
from ccs.utils.paths import CLAUDE_HOME

logger = logging.getLogger(__name__)

CLAUDE_BINARY = "claude"
CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"

# ABOUTME: Node heap ceiling added to NODE_OPTIONS unless the user set one
NODE_OPTIONS_ENV = "NODE_OPTIONS"
HEAP_FLAG = "--max-old-space-size"
DEFAULT_HEAP_MB = 8192

# ABOUTME: Exit code when the child ends without a status (killed by a signal)
FALLBACK_EXIT_CODE = 1


class LaunchError(OSError):
    """The assistant binary could not be started."""


class LaunchPhase(enum.Enum):
    IDLE = "idle"
    MEMORY_RESET = "memory-reset"
    CLEANUP = "cleanup"
    SYNC = "sync"
    ENVIRONMENT = "environment"
    SPAWN = "spawn"
    TERMINAL = "terminal"


def _enter(phase: LaunchPhase, provider_key: str) -> None:
    logger.debug(f"[{provider_key}] {phase.value}")


def with_heap_limit(node_options: str | None, heap_mb: int = DEFAULT_HEAP_MB) -> str:
    """Append the heap flag to NODE_OPTIONS unless one is already present.

    Examples:
        >>> with_heap_limit(None)
        '--max-old-space-size=8192'
        >>> with_heap_limit("--max-old-space-size=4096")
        '--max-old-space-size=4096'
    """
    existing = (node_options or "").strip()
    if HEAP_FLAG in existing:
        return existing
    flag = f"{HEAP_FLAG}={heap_mb}"
    return f"{existing} {flag}" if existing else flag


def build_env(
    provider: Provider,
    base_env: Mapping[str, str] | None = None,
    heap_mb: int = DEFAULT_HEAP_MB,
) -> dict[str, str]:
    """Environment for the claude process.

    ABOUTME: Inherits base_env (default os.environ), points CLAUDE_CONFIG_DIR at the provider
    ABOUTME: api_key providers add every defined env entry, ${VAR} references expanded
    ABOUTME: None entries are omitted, never written as empty strings
    """
    source = os.environ if base_env is None else base_env
    env = dict(source)
    env[CONFIG_DIR_ENV] = str(expand_path(provider.config_dir))
    env[NODE_OPTIONS_ENV] = with_heap_limit(env.get(NODE_OPTIONS_ENV), heap_mb)

    if provider.is_api_key and provider.env:
        for key, value in provider.env.items():
            if value is not None:
                env[key] = expand_env_vars(value, source)

    return env


def spawn(command: Sequence[str], env: Mapping[str, str]) -> int:
    """Run `command` in the foreground sharing this process's terminal.

    ABOUTME: No stdio redirection: claude needs the real TTY
    ABOUTME: Ctrl-C reaches the child through the terminal; we keep waiting for it

    Raises:
        LaunchError: If the binary is missing or not executable
    """
    try:
        proc = subprocess.Popen(list(command), env=dict(env))
    except OSError as e:
        raise LaunchError(f"Failed to launch {command[0]}: {e}") from e

    while True:
        try:
            returncode = proc.wait()
            break
        except KeyboardInterrupt:
            continue

    if returncode < 0:
        logger.debug(f"{command[0]} terminated by signal {-returncode}")
        return FALLBACK_EXIT_CODE
    return returncode


def preflight(
    provider_key: str,
    provider: Provider,
    store: StateStore,
    policy: CleanupPolicy = DEFAULT_POLICY,
    source_root: str | Path | None = None,
    source_file: str | Path | None = None,
) -> None:
    """Memory reset, cleanup and sync for one provider, in that order.

    ABOUTME: Every step is best-effort; nothing here stops the launch
    """
    config_dir = expand_path(provider.config_dir)
    sizes = DirSizeCache()

    if provider.memory_reset:
        _enter(LaunchPhase.MEMORY_RESET, provider_key)
        try:
            if store.should_reset_memory(provider_key, policy.memory_reset_interval_ms):
                reset_memory(config_dir, policy, sizes)
                store.set_last_memory_reset(provider_key)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Memory reset skipped, state database unavailable: {e}")

    _enter(LaunchPhase.CLEANUP, provider_key)
    auto_clean(config_dir, policy, sizes)
    if provider.memory_reset:
        truncate_oversized_sessions(config_dir, policy)

    _enter(LaunchPhase.SYNC, provider_key)
    if same_path(config_dir, source_root or CLAUDE_HOME):
        return
    sync_provider(
        config_dir,
        strip_oauth=provider.is_api_key,
        source_root=source_root,
        source_file=source_file,
    )


def run_claude(
    provider_key: str,
    provider: Provider,
    args: Sequence[str],
    store: StateStore,
    policy: CleanupPolicy = DEFAULT_POLICY,
    binary: str = CLAUDE_BINARY,
    source_root: str | Path | None = None,
    source_file: str | Path | None = None,
) -> int:
    """Prepare the provider's config dir and run claude in the foreground.

    Args:
        provider_key: Store key, used for memory reset gating
        provider: Provider to launch
        args: Arguments passed through to claude
        store: State store for the reset gate
        policy: Cleanup thresholds
        binary: Assistant executable
        source_root: Canonical tree (default ~/.claude)
        source_file: Canonical MCP document (default ~/.claude.json)

    Returns:
        claude's exit code (1 if it was killed by a signal)

    Raises:
        LaunchError: If claude could not be started
    """
    _enter(LaunchPhase.IDLE, provider_key)
    preflight(provider_key, provider, store, policy, source_root, source_file)

    _enter(LaunchPhase.ENVIRONMENT, provider_key)
    env = build_env(provider)

    _enter(LaunchPhase.SPAWN, provider_key)
    exit_code = spawn([binary, *args], env)

    _enter(LaunchPhase.TERMINAL, provider_key)
    return exit_code


def run_provider(provider_key: str, args: Sequence[str], store: StateStore, **kwargs) -> int:
    """Look up `provider_key` in the provider store and launch it.

    Raises:
        ProviderNotFoundError: Before any pre-flight work if the key is unknown
        LaunchError: If claude could not be started
    """
    provider = require_provider(provider_key)
    return run_claude(provider_key, provider, args, store, **kwargs)
