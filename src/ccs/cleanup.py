# ABOUTME: Best-effort disk hygiene for provider config dirs before each launch.
# ABOUTME: Size-triggered cache deletion, JSONL truncation, and the scheduled memory reset.
import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ccs.models import CleanupReport, MemoryResetReport, SessionTruncationReport
from ccs.state import MEMORY_RESET_INTERVAL_MS
from ccs.utils import DirSizeCache, expand_path, get_dir_size

logger = logging.getLogger(__name__)

MB = 1024 * 1024


@dataclass(frozen=True)
class CleanupPolicy:
    """Thresholds and targets for cleanup.

    ABOUTME: DEFAULT_POLICY holds the tuned values; tests pass their own
    """
    # (relative path, bytes) - deleted entirely once over the threshold
    cache_thresholds: tuple[tuple[str, int], ...] = (
        ("shell-snapshots", 10 * MB),
        ("debug", 5 * MB),
        ("statsig", 5 * MB),
    )
    history_file: str = "history.jsonl"
    history_threshold: int = 5 * MB
    history_keep_ratio: float = 0.3
    min_lines: int = 10
    session_dir: str = "projects"
    session_threshold: int = 10 * MB
    session_keep_ratio: float = 0.2
    memory_reset_targets: tuple[str, ...] = (
        "projects",
        "file-history",
        "session-env",
        "plans",
        "todos",
    )
    memory_reset_interval_ms: int = MEMORY_RESET_INTERVAL_MS


DEFAULT_POLICY = CleanupPolicy()


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    elif size < MB:
        return f"{size / 1024:.1f}KB"
    else:
        return f"{size / MB:.1f}MB"


def _measure(sizes: DirSizeCache | None) -> Callable[[Path], int]:
    return sizes.size_of if sizes is not None else get_dir_size


def remove_path(path: Path) -> None:
    """Delete a file, symlink or directory tree. Raises OSError."""
    if path.is_symlink() or not path.is_dir():
        path.unlink()
    else:
        shutil.rmtree(path)


def truncate_lines(path: Path, keep_ratio: float, min_lines: int = 10) -> int:
    """Keep only the trailing fraction of a newline-delimited file.

    ABOUTME: Files with min_lines records or fewer are never touched
    ABOUTME: Keeps max(int(n * keep_ratio), min_lines) records

    Args:
        path: JSONL/log file to truncate in place
        keep_ratio: Fraction of records to keep (0.3 keeps the newest 30%)
        min_lines: Record floor

    Returns:
        Bytes saved, 0 if the file was left alone

    Raises:
        OSError: If the file cannot be read or rewritten

    Examples:
        >>> truncate_lines(Path("history.jsonl"), 0.3)  # 1000 lines -> last 300
        81234
    """
    with open(path, "rb") as f:
        lines = f.readlines()

    total = len(lines)
    if total <= min_lines:
        return 0

    keep = max(int(total * keep_ratio), min_lines)
    if keep >= total:
        return 0

    before = sum(len(line) for line in lines)
    kept = lines[-keep:]

    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "wb") as f:
            f.writelines(kept)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    return before - sum(len(line) for line in kept)


def auto_clean(
    config_dir: str | Path,
    policy: CleanupPolicy = DEFAULT_POLICY,
    sizes: DirSizeCache | None = None,
) -> CleanupReport:
    """Delete oversized caches and truncate the prompt history.

    ABOUTME: Runs before every launch; errors are logged, never raised
    ABOUTME: The history file is truncated in place instead of deleted
    """
    root = expand_path(config_dir)
    measure = _measure(sizes)
    report = CleanupReport()

    for subdir, threshold in policy.cache_thresholds:
        path = root / subdir
        size = measure(path)
        if size <= threshold:
            continue
        try:
            remove_path(path)
        except OSError as e:
            logger.warning(f"Could not clean {path}: {e}")
            report.add_error(f"{subdir}: {e}")
            continue
        report.removed[subdir] = size
        logger.info(f"Auto-cleaned {subdir} ({format_size(size)})")

    history = root / policy.history_file
    if measure(history) > policy.history_threshold:
        try:
            saved = truncate_lines(history, policy.history_keep_ratio, policy.min_lines)
        except OSError as e:
            logger.warning(f"Could not truncate {history}: {e}")
            report.add_error(f"{policy.history_file}: {e}")
        else:
            if saved:
                report.truncated[policy.history_file] = saved
                logger.info(f"Truncated {policy.history_file} (saved {format_size(saved)})")

    return report


def truncate_oversized_sessions(
    config_dir: str | Path,
    policy: CleanupPolicy = DEFAULT_POLICY,
) -> SessionTruncationReport:
    """Truncate session transcripts above the size threshold.

    ABOUTME: Scans projects/<project>/*.jsonl one level deep
    ABOUTME: Symlinked projects and transcripts are skipped
    """
    report = SessionTruncationReport()
    projects = expand_path(config_dir) / policy.session_dir
    if not projects.is_dir():
        return report

    try:
        project_dirs = sorted(
            p for p in projects.iterdir() if p.is_dir() and not p.is_symlink()
        )
    except OSError as e:
        logger.warning(f"Cannot list {projects}: {e}")
        report.add_error(str(e))
        return report

    for project in project_dirs:
        for transcript in sorted(project.glob("*.jsonl")):
            try:
                if transcript.is_symlink() or not transcript.is_file():
                    continue
                if transcript.stat().st_size <= policy.session_threshold:
                    continue
                saved = truncate_lines(transcript, policy.session_keep_ratio, policy.min_lines)
            except OSError as e:
                logger.warning(f"Could not truncate {transcript}: {e}")
                report.add_error(f"{transcript.name}: {e}")
                continue
            if saved:
                report.files_cleaned += 1
                report.bytes_saved += saved

    if report.files_cleaned:
        logger.info(
            f"Truncated {report.files_cleaned} oversized session(s) "
            f"(saved {format_size(report.bytes_saved)})"
        )
    return report


def reset_memory(
    config_dir: str | Path,
    policy: CleanupPolicy = DEFAULT_POLICY,
    sizes: DirSizeCache | None = None,
) -> MemoryResetReport:
    """Wipe high-churn state dirs (sessions, file history, plans, todos).

    ABOUTME: Does not touch the reset gate; the caller records the timestamp
    """
    root = expand_path(config_dir)
    measure = _measure(sizes)
    report = MemoryResetReport()

    for target in policy.memory_reset_targets:
        path = root / target
        if not os.path.lexists(path):
            continue
        size = measure(path)
        try:
            remove_path(path)
        except OSError as e:
            logger.warning(f"Could not reset {path}: {e}")
            report.add_error(f"{target}: {e}")
            continue
        report.removed.append(target)
        report.bytes_freed += size

    logger.info(f"Memory reset: freed {format_size(report.bytes_freed)}")
    return report
