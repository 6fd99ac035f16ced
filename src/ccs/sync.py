# Shared resource synchronization for ccs
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from ccs.mcp import merge_mcp_servers, strip_oauth_account
from ccs.models import McpMergeResult, SharedResource, SyncResult
from ccs.utils import expand_path, same_path
from ccs.utils.paths import CLAUDE_HOME

logger = logging.getLogger(__name__)

# ABOUTME: Linked in declared order; `source` marks resources living outside ~/.claude
SHARED_RESOURCES: tuple[SharedResource, ...] = (
    SharedResource("commands", "dir"),
    SharedResource("settings.json", "file"),
    SharedResource("plugins", "dir"),
    SharedResource("skills", "dir"),
    SharedResource("agents", "dir"),
    SharedResource("CLAUDE.md", "file"),
    SharedResource(".claudeignore", "file", source="~/.ccsignore"),
)


@dataclass
class ProviderSyncReport:
    """Report from syncing one provider config dir.

    ABOUTME: One SyncResult per shared resource plus the MCP merge outcome
    """
    links: list[SyncResult] = field(default_factory=list)
    mcp: McpMergeResult | None = None
    oauth_stripped: bool = False

    @property
    def links_created(self) -> int:
        return sum(1 for r in self.links if r.status in ("created", "forced"))


def resource_source(resource: SharedResource, source_root: Path) -> Path:
    """Canonical location of a shared resource."""
    if resource.source:
        return expand_path(resource.source)
    return source_root / resource.name


def is_linked(source: Path, target: Path) -> bool:
    """True if `target` is a symlink pointing exactly at `source`."""
    return target.is_symlink() and os.readlink(target) == str(source)


def ensure_symlink(source: Path, target: Path, force: bool = False) -> bool:
    """Make `target` a symlink to `source`.

    ABOUTME: Missing source or correct link -> no-op
    ABOUTME: Links pointing elsewhere are replaced
    ABOUTME: Real files/dirs are kept unless force=True, then removed and relinked
    ABOUTME: Never follows or modifies `source`

    Args:
        source: Canonical resource
        target: Entry inside the provider config dir
        force: Replace real files/directories at `target`

    Returns:
        True if a link was created

    Examples:
        >>> ensure_symlink(Path("~/.claude/commands").expanduser(), Path("~/.claude-glm/commands").expanduser())
        True
        >>> ensure_symlink(Path("~/.claude/commands").expanduser(), Path("~/.claude-glm/commands").expanduser())
        False
    """
    if not source.exists():
        return False

    try:
        if target.is_symlink():
            if os.readlink(target) == str(source):
                return False
            target.unlink()
        elif target.exists():
            if not force:
                return False
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()

        target.parent.mkdir(parents=True, exist_ok=True)
        target.symlink_to(source, target_is_directory=source.is_dir())
        return True
    except OSError as e:
        logger.warning(f"Could not link {target} -> {source}: {e}")
        return False


def sync_shared_resources(
    config_dir: str | Path,
    force: bool = False,
    source_root: str | Path | None = None,
) -> list[SyncResult] | None:
    """Link every shared resource into a provider config dir.

    ABOUTME: Returns None without touching anything if config_dir is the canonical tree
    ABOUTME: Produces exactly one SyncResult per SHARED_RESOURCES entry, in order

    Args:
        config_dir: Provider config dir (``~`` allowed)
        force: Replace real files/directories with links
        source_root: Canonical tree (default ~/.claude)

    Returns:
        List of SyncResult, or None if config_dir is the source itself
    """
    source_root = expand_path(source_root or CLAUDE_HOME)
    target_dir = expand_path(config_dir)

    if same_path(target_dir, source_root):
        return None

    results: list[SyncResult] = []

    for resource in SHARED_RESOURCES:
        source = resource_source(resource, source_root)
        target = target_dir / resource.name

        try:
            if not source.exists():
                results.append(SyncResult(resource.name, "skipped"))
                continue

            if is_linked(source, target):
                results.append(SyncResult(resource.name, "exists"))
                continue

            if source.is_dir() != (resource.kind == "dir"):
                logger.warning(f"{source} is not a {resource.kind}; linking it anyway")

            created = ensure_symlink(source, target, force)
        except OSError as e:
            logger.warning(f"Could not sync {resource.name}: {e}")
            results.append(SyncResult(resource.name, "skipped"))
            continue

        if not created:
            status = "skipped"
        else:
            status = "forced" if force else "created"
        results.append(SyncResult(resource.name, status))

    return results


def sync_provider(
    config_dir: str | Path,
    force: bool = False,
    strip_oauth: bool = False,
    source_root: str | Path | None = None,
    source_file: str | Path | None = None,
) -> ProviderSyncReport | None:
    """Sync shared resources and MCP servers into one provider config dir.

    ABOUTME: None if config_dir is the canonical tree (nothing to sync)
    ABOUTME: strip_oauth removes stale OAuth accounts for api_key providers
    """
    links = sync_shared_resources(config_dir, force=force, source_root=source_root)
    if links is None:
        return None

    report = ProviderSyncReport(links=links)
    report.mcp = merge_mcp_servers(
        config_dir, force=force, source_file=source_file, source_root=source_root
    )
    if strip_oauth:
        report.oauth_stripped = strip_oauth_account(config_dir)

    return report
