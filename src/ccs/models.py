# Core data models for ccs
from dataclasses import dataclass, field
from typing import Literal

ProviderType = Literal["oauth", "api_key"]
SyncStatus = Literal["created", "exists", "skipped", "forced"]
MergeStatus = Literal["merged", "unchanged", "skipped"]


@dataclass(frozen=True)
class Provider:
    """Immutable provider profile.

    ABOUTME: Selects auth mode, config directory and env overrides for claude
    ABOUTME: OAuth providers carry no env; api_key providers may
    """
    name: str
    type: ProviderType
    config_dir: str
    description: str | None = None
    env: dict[str, str | None] | None = None
    memory_reset: bool = False

    @property
    def is_api_key(self) -> bool:
        return self.type == "api_key"


@dataclass
class Config:
    """Provider store contents loaded from config.json.

    ABOUTME: `current` always names a key of `providers`
    """
    current: str
    providers: dict[str, Provider]


@dataclass(frozen=True)
class SharedResource:
    """A canonical resource linked into every provider config dir.

    ABOUTME: `name` is relative to both the canonical tree and the target dir
    ABOUTME: `source` overrides the canonical location (e.g. ~/.ccsignore)
    """
    name: str
    kind: Literal["file", "dir"]
    source: str | None = None


@dataclass(frozen=True)
class SyncResult:
    """Outcome of linking one shared resource."""
    resource: str
    status: SyncStatus


@dataclass(frozen=True)
class McpMergeResult:
    """Outcome of merging MCP servers into a provider config.

    ABOUTME: `reason` is set when the merge was skipped
    """
    status: MergeStatus
    reason: str | None = None
    servers: int = 0

    @property
    def merged(self) -> bool:
        return self.status == "merged"


@dataclass
class CleanupReport:
    """Report from size-triggered cache cleanup.

    ABOUTME: Maps each removed or truncated path to the bytes it freed
    ABOUTME: Errors are non-fatal, cleanup continues
    """
    removed: dict[str, int] = field(default_factory=dict)
    truncated: dict[str, int] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def bytes_freed(self) -> int:
        return sum(self.removed.values()) + sum(self.truncated.values())

    def add_error(self, error: str) -> None:
        self.errors.append(error)


@dataclass
class SessionTruncationReport:
    """Report from oversized session transcript truncation."""
    files_cleaned: int = 0
    bytes_saved: int = 0
    errors: list[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        self.errors.append(error)


@dataclass
class MemoryResetReport:
    """Report from a full memory reset."""
    removed: list[str] = field(default_factory=list)
    bytes_freed: int = 0
    errors: list[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        self.errors.append(error)
