# ABOUTME: Backup utilities for provider .claude.json documents.
# ABOUTME: Timestamped copies taken before ccs rewrites a document, newest 5 kept per provider.
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# ABOUTME: Pattern matches {label}_{YYYYMMDD}_{HHMMSS}.{ext}
BACKUP_PATTERN = re.compile(r"^(.+?)_(\d{8}_\d{6})\.(.+)$")

MAX_BACKUPS_PER_LABEL = 5


def get_backup_dir() -> Path:
    """Get the default backup directory path.

    ABOUTME: Returns ~/.ccs/backups
    ABOUTME: Does not create the directory

    Examples:
        >>> get_backup_dir()
        PosixPath('/Users/user/.ccs/backups')
    """
    return Path.home() / ".ccs" / "backups"


def backup_label(config_dir: Path) -> str:
    """Derive a backup label from a provider config dir.

    ABOUTME: ~/.claude-glm -> claude-glm
    """
    label = config_dir.name.lstrip(".").replace("_", "-")
    return label or "root"


def create_backup(source_path: Path, backup_dir: Path, label: str | None = None) -> Path:
    """Create a timestamped backup of a file.

    ABOUTME: Backup format: {label}_{YYYYMMDD}_{HHMMSS}{ext}
    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Label defaults to the file stem; underscores become dashes

    Args:
        source_path: Path to file to backup
        backup_dir: Directory where backup should be created
        label: Name used to group backups for retention

    Returns:
        Path to created backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist
        OSError: If backup creation fails

    Examples:
        >>> source = Path("~/.claude-glm/.claude.json").expanduser()
        >>> create_backup(source, get_backup_dir(), "claude-glm").name
        'claude-glm_20260108_143022.json'
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    name = (label or source_path.stem.lstrip(".") or "backup").replace("_", "-")
    extension = source_path.suffix or ".bak"
    backup_path = backup_dir / f"{name}_{timestamp}{extension}"

    shutil.copy2(source_path, backup_path)

    cleanup_old_backups(backup_dir)

    return backup_path


def cleanup_old_backups(backup_dir: Path, max_backups_per_label: int = MAX_BACKUPS_PER_LABEL) -> list[Path]:
    """Remove old backup files, keeping only the most recent per label.

    ABOUTME: Logs warnings on errors but does not raise exceptions

    Args:
        backup_dir: Directory containing backup files
        max_backups_per_label: Maximum backups to keep per label (default 5)

    Returns:
        List of paths that were deleted
    """
    deleted_files: list[Path] = []

    if not backup_dir.exists():
        return deleted_files

    backups_by_label: dict[str, list[tuple[str, Path]]] = {}

    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue

        match = BACKUP_PATTERN.match(file_path.name)
        if not match:
            continue

        backups_by_label.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in backups_by_label.values():
        # Newest first
        backups.sort(key=lambda x: x[0], reverse=True)

        for _timestamp, file_path in backups[max_backups_per_label:]:
            try:
                file_path.unlink()
                deleted_files.append(file_path)
                logger.debug(f"Deleted old backup: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup {file_path}: {e}")

    return deleted_files
