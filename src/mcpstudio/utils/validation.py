# ABOUTME: Validation utilities for canonical server entries
# ABOUTME: Structural checks plus a PATH lookup for the launcher command
import re
import shutil
from dataclasses import dataclass

from mcpstudio.models import ServerEntry

# ABOUTME: Names end up as map keys in JSON, YAML and TOML client files
SERVER_NAME_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.@-]*$')


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    server_name: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Validate that a command exists on the system.

    ABOUTME: Uses shutil.which() for cross-platform command lookup
    ABOUTME: Returns None if command found, ValidationError otherwise

    Examples:
        >>> validate_command_exists("nonexistent_cmd")
        ValidationError(server_name='', message='Command not found: nonexistent_cmd', severity='warning')
    """
    if shutil.which(command) is None:
        return ValidationError(
            server_name="",
            message=f"Command not found: {command}",
            severity="warning"
        )
    return None


def validate_server(entry: ServerEntry) -> list[ValidationError]:
    """Validate a canonical server entry.

    ABOUTME: Errors block adding the entry, warnings are informational
    ABOUTME: A missing command on PATH is only a warning, clients may have their own PATH

    Args:
        entry: Server entry to validate

    Returns:
        List of validation errors and warnings (empty if all good)
    """
    errors: list[ValidationError] = []

    if not SERVER_NAME_PATTERN.match(entry.name):
        errors.append(ValidationError(
            server_name=entry.name,
            message=f"Invalid server name '{entry.name}'",
            severity="error"
        ))

    if not entry.command.strip():
        errors.append(ValidationError(
            server_name=entry.name,
            message="Missing required 'command'",
            severity="error"
        ))
    else:
        missing = validate_command_exists(entry.command)
        if missing:
            errors.append(ValidationError(
                server_name=entry.name,
                message=missing.message,
                severity=missing.severity
            ))

    for key in entry.env:
        if not key:
            errors.append(ValidationError(
                server_name=entry.name,
                message="Environment variable with empty name",
                severity="error"
            ))

    return errors
