# ccs - Claude Code Switch
# ABOUTME: Version information
__version__ = "0.2.0"

# ABOUTME: Export core data models
# ABOUTME: Export provider store and launch entry points
from ccs.config import ProviderNotFoundError, get_config_path, read_config
from ccs.models import Config, Provider, SharedResource, SyncResult

__all__ = [
    "__version__",
    "Config",
    "Provider",
    "SharedResource",
    "SyncResult",
    "ProviderNotFoundError",
    "get_config_path",
    "read_config",
]
