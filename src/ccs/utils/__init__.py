# ABOUTME: Utility modules for ccs
# ABOUTME: Exports path, env expansion, backup, and validation functions

from ccs.utils.backup import backup_label, create_backup, get_backup_dir
from ccs.utils.env import expand_env_vars
from ccs.utils.paths import DirSizeCache, expand_path, get_dir_size, same_path
from ccs.utils.validation import (
    ValidationError,
    blocking_errors,
    validate_command_exists,
    validate_provider,
    validate_url,
)

__all__ = [
    "expand_path",
    "same_path",
    "DirSizeCache",
    "get_dir_size",
    "expand_env_vars",
    "ValidationError",
    "blocking_errors",
    "validate_command_exists",
    "validate_provider",
    "validate_url",
    "backup_label",
    "create_backup",
    "get_backup_dir",
]
