# Filesystem locations and defaults for mcpstudio
from pathlib import Path

# ABOUTME: Default config directory in user's home
CONFIG_DIR = Path.home() / ".config" / "mcp-studio"

# ABOUTME: Canonical registry file (JSON: mcpServers + inactive)
REGISTRY_FILENAME = "mcp_studio_config.json"

# ABOUTME: Per-client sync settings (JSON keyed by client id)
CLIENTS_FILENAME = "client-paths.json"

# ABOUTME: Backup root, one subdirectory per client id
BACKUPS_DIRNAME = "backups"

# ABOUTME: Automatic backups kept per client after pruning
DEFAULT_MAX_BACKUPS = 3

# ABOUTME: The client enabled (with auto-sync) on first run
PRIMARY_CLIENT_ID = "claude"


def get_config_dir() -> Path:
    """Return the mcpstudio config directory.

    ABOUTME: Returns ~/.config/mcp-studio
    ABOUTME: Directory may not exist yet - use ensure_config_dir() first
    """
    return CONFIG_DIR


def get_registry_path(config_dir: Path | None = None) -> Path:
    """Return the path to the canonical registry file."""
    return (config_dir or CONFIG_DIR) / REGISTRY_FILENAME


def get_clients_path(config_dir: Path | None = None) -> Path:
    """Return the path to the client registration file."""
    return (config_dir or CONFIG_DIR) / CLIENTS_FILENAME


def get_backup_root(config_dir: Path | None = None) -> Path:
    """Return the backup root directory.

    ABOUTME: Does not create the directory
    """
    return (config_dir or CONFIG_DIR) / BACKUPS_DIRNAME


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Create config directory if it doesn't exist.

    ABOUTME: Creates ~/.config/mcp-studio/ if missing
    ABOUTME: Returns path to config directory

    Returns:
        Path to config directory (guaranteed to exist)
    """
    directory = config_dir or CONFIG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory

# ABOUTME: Backup subdirectory for registry snapshots taken before an import
REGISTRY_BACKUP_ID = "registry"
