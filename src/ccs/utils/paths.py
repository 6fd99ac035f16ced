# ABOUTME: Path expansion and recursive directory sizing for config trees.
# ABOUTME: Sizes are cached per path for a short TTL to coalesce repeated walks.
import logging
import os
import time
from pathlib import Path

logger = logging.getLogger(__name__)

# ABOUTME: Seconds a computed directory size stays valid
DEFAULT_SIZE_TTL = 5.0

# ABOUTME: Canonical config tree and MCP document of the stock install
CLAUDE_HOME = "~/.claude"
CLAUDE_JSON = "~/.claude.json"

# ABOUTME: Document claude reads from a provider's CLAUDE_CONFIG_DIR
CLAUDE_JSON_NAME = ".claude.json"


def expand_path(path: str | Path) -> Path:
    """Expand a leading ``~`` to the user's home directory.

    ABOUTME: Home is resolved at call time so HOME overrides are honoured
    ABOUTME: Never fails, even for paths that do not exist

    Examples:
        >>> expand_path("~/.claude-glm")
        PosixPath('/Users/user/.claude-glm')
        >>> expand_path("/opt/claude")
        PosixPath('/opt/claude')
    """
    text = str(path)
    if text == "~":
        return Path.home()
    if text.startswith("~/"):
        return Path.home() / text[2:]
    return Path(text)


def same_path(a: str | Path, b: str | Path) -> bool:
    """Return True if both paths resolve to the same location."""
    return expand_path(a).resolve() == expand_path(b).resolve()


def _walk_size(path: str) -> int:
    # Only real subdirectories are descended into; symlinks add nothing
    total = 0
    try:
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    if entry.is_symlink():
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        total += _walk_size(entry.path)
                    elif entry.is_file(follow_symlinks=False):
                        total += entry.stat(follow_symlinks=False).st_size
                except OSError as e:
                    logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
    except OSError as e:
        logger.debug(f"Cannot list {path}: {e}")
    return total


class DirSizeCache:
    """Recursive size lookups cached per absolute path.

    ABOUTME: Entries expire after `ttl` seconds, never on mutation
    ABOUTME: A caller that mutates then re-measures may see a stale size
    """

    def __init__(self, ttl: float = DEFAULT_SIZE_TTL) -> None:
        self.ttl = ttl
        self._entries: dict[str, tuple[int, float]] = {}

    def size_of(self, path: str | Path) -> int:
        """Return the size in bytes of a file or directory tree.

        Args:
            path: File or directory, ``~`` allowed

        Returns:
            0 for missing paths and symlinks, file length for files,
            recursive sum of descendant files for directories
        """
        key = os.path.abspath(expand_path(path))
        now = time.monotonic()

        cached = self._entries.get(key)
        if cached is not None and now - cached[1] < self.ttl:
            return cached[0]

        size = self._measure(key)
        self._entries[key] = (size, now)
        return size

    def clear(self) -> None:
        self._entries.clear()

    @staticmethod
    def _measure(path: str) -> int:
        try:
            st = os.lstat(path)
        except OSError:
            return 0

        if os.path.islink(path):
            return 0
        if os.path.isdir(path):
            return _walk_size(path)
        return st.st_size


_default_cache = DirSizeCache()


def get_dir_size(path: str | Path) -> int:
    """Size of `path` using the process-wide cache."""
    return _default_cache.size_of(path)
