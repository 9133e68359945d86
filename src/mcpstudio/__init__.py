# mcpstudio - MCP server registry with client sync and backups
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and stores
from mcpstudio.app import Studio
from mcpstudio.clients import ClientRegistry
from mcpstudio.config import ensure_config_dir, get_config_dir
from mcpstudio.errors import ConfigParseError, ConfigValidationError
from mcpstudio.models import (
    ClientRegistration,
    FormatAdapter,
    RegistryDocument,
    ServerEntry,
)
from mcpstudio.registry import RegistryStore
from mcpstudio.sync import ClientSync

# ABOUTME: Export utility functions
from mcpstudio.utils import (
    BackupStore,
    ValidationError,
    expand_path,
    validate_server,
)

__all__ = [
    "__version__",
    "Studio",
    "ClientRegistry",
    "ClientRegistration",
    "ClientSync",
    "FormatAdapter",
    "RegistryDocument",
    "RegistryStore",
    "ServerEntry",
    "BackupStore",
    "ConfigParseError",
    "ConfigValidationError",
    "ensure_config_dir",
    "get_config_dir",
    "expand_path",
    "ValidationError",
    "validate_server",
]
