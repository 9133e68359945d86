# ABOUTME: Utility modules for mcpstudio
# ABOUTME: Exports backup store, path expansion, and validation functions

from mcpstudio.utils.backup import BackupStore, format_file_size
from mcpstudio.utils.paths import expand_path
from mcpstudio.utils.validation import (
    ValidationError,
    validate_command_exists,
    validate_server,
)

__all__ = [
    "BackupStore",
    "format_file_size",
    "expand_path",
    "ValidationError",
    "validate_command_exists",
    "validate_server",
]
