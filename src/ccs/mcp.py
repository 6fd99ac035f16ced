# MCP server merging between the canonical and per-provider .claude.json
import json
import logging
import os
from pathlib import Path
from typing import Any, cast

from ccs.models import McpMergeResult
from ccs.utils import backup_label, create_backup, expand_path, get_backup_dir, same_path
from ccs.utils.paths import CLAUDE_HOME, CLAUDE_JSON, CLAUDE_JSON_NAME

logger = logging.getLogger(__name__)

MCP_SERVERS_KEY = "mcpServers"
OAUTH_ACCOUNT_KEY = "oauthAccount"


def read_json_file(path: Path) -> dict[str, Any]:
    """Read a JSON object from disk.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises ValueError for invalid JSON or a non-object document
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            result = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return cast(dict[str, Any], result)


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Write a JSON document atomically.

    ABOUTME: Writes a sibling temp file then os.replace()s it into place
    ABOUTME: Key order is preserved so unrelated settings stay where they were
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def servers_of(document: dict[str, Any]) -> dict[str, Any]:
    """The `mcpServers` mapping of a document, {} if absent or malformed."""
    servers = document.get(MCP_SERVERS_KEY)
    if not isinstance(servers, dict):
        return {}
    return servers


def canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def merge_servers(
    source: dict[str, Any],
    target: dict[str, Any],
    force: bool = False,
) -> dict[str, Any]:
    """Merge canonical servers into a provider's servers.

    ABOUTME: Source entries win on name collisions
    ABOUTME: force=True drops target-only servers (target becomes a copy of source)
    ABOUTME: Returns new dict (doesn't mutate inputs)

    Examples:
        >>> merge_servers({"a": 1, "b": 2}, {"b": 3, "c": 4})
        {'b': 2, 'c': 4, 'a': 1}
        >>> merge_servers({"a": 1, "b": 2}, {"b": 3, "c": 4}, force=True)
        {'a': 1, 'b': 2}
    """
    if force:
        return dict(source)
    return {**target, **source}


def _backup_before_write(path: Path) -> None:
    if not path.exists():
        return
    try:
        create_backup(path, get_backup_dir(), backup_label(path.parent))
    except OSError as e:
        logger.warning(f"Could not back up {path}: {e}")


def merge_mcp_servers(
    config_dir: str | Path,
    force: bool = False,
    source_file: str | Path | None = None,
    source_root: str | Path | None = None,
) -> McpMergeResult:
    """Merge MCP servers from the canonical document into a provider's.

    ABOUTME: Skipped if config_dir is the canonical tree or the source has no servers
    ABOUTME: Unreadable target documents are treated as empty
    ABOUTME: Only `mcpServers` is replaced; every other key is written back untouched
    ABOUTME: Writes only when the merged set differs from the current one

    Args:
        config_dir: Provider config dir holding .claude.json
        force: Replace the provider's servers with the canonical set
        source_file: Canonical document (default ~/.claude.json)
        source_root: Canonical tree (default ~/.claude)

    Returns:
        McpMergeResult with status merged, unchanged or skipped
    """
    source_root = expand_path(source_root or CLAUDE_HOME)
    target_dir = expand_path(config_dir)

    if same_path(target_dir, source_root):
        return McpMergeResult("skipped", reason="source directory")

    source_path = expand_path(source_file or CLAUDE_JSON)
    if not source_path.exists():
        return McpMergeResult("skipped", reason=f"{source_path} not found")

    try:
        source_servers = servers_of(read_json_file(source_path))
    except (ValueError, OSError) as e:
        logger.warning(f"Cannot read MCP servers from {source_path}: {e}")
        return McpMergeResult("skipped", reason="source unreadable")

    if not source_servers:
        return McpMergeResult("skipped", reason="no MCP servers in source")

    target_path = target_dir / CLAUDE_JSON_NAME
    try:
        target_doc = read_json_file(target_path)
    except (ValueError, OSError) as e:
        logger.warning(f"Ignoring unreadable {target_path}: {e}")
        target_doc = {}

    current = servers_of(target_doc)
    merged = merge_servers(source_servers, current, force=force)

    if canonical_json(merged) == canonical_json(current):
        return McpMergeResult("unchanged", servers=len(merged))

    target_doc[MCP_SERVERS_KEY] = merged
    _backup_before_write(target_path)
    try:
        write_json_file(target_path, target_doc)
    except OSError as e:
        logger.warning(f"Could not write {target_path}: {e}")
        return McpMergeResult("skipped", reason=f"write failed: {e}")

    logger.debug(f"Merged {len(source_servers)} MCP server(s) into {target_path}")
    return McpMergeResult("merged", servers=len(merged))


def strip_oauth_account(config_dir: str | Path) -> bool:
    """Remove a stale OAuth account from a provider's .claude.json.

    ABOUTME: claude prefers OAuth over ANTHROPIC_AUTH_TOKEN when both are present
    ABOUTME: Best-effort: read/write failures are logged and reported as False

    Returns:
        True if the document was rewritten without `oauthAccount`
    """
    path = expand_path(config_dir) / CLAUDE_JSON_NAME
    if not path.exists():
        return False

    try:
        document = read_json_file(path)
    except (ValueError, OSError) as e:
        logger.warning(f"Cannot check {path} for OAuth credentials: {e}")
        return False

    if OAUTH_ACCOUNT_KEY not in document:
        return False

    del document[OAUTH_ACCOUNT_KEY]
    _backup_before_write(path)
    try:
        write_json_file(path, document)
    except OSError as e:
        logger.warning(f"Could not remove {OAUTH_ACCOUNT_KEY} from {path}: {e}")
        return False

    logger.info(f"Removed stale {OAUTH_ACCOUNT_KEY} from {path}")
    return True
