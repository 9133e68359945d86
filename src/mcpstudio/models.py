# Core data models for mcpstudio
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

# ABOUTME: The two sections of the canonical registry
Section = Literal["active", "inactive"]
SECTIONS: tuple[Section, ...] = ("active", "inactive")

# ABOUTME: How an adapter combines canonical entries with a client file
MergePolicy = Literal["replace", "selective"]

# ABOUTME: Keys of a canonical entry that map onto ServerEntry fields
_KNOWN_ENTRY_KEYS = {"command", "args", "env", "metadata", "disabled"}


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class ServerEntry:
    """Immutable canonical MCP server definition.

    ABOUTME: Section membership (active/inactive) is never stored on the entry
    ABOUTME: metadata and extras round-trip through the registry file unchanged
    """
    name: str
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "ServerEntry":
        """Build an entry from its registry-file representation.

        ABOUTME: Drops a stray 'disabled' key, the section already encodes it
        ABOUTME: Unknown keys are kept in extras

        Raises:
            ValueError: If data is not a mapping or fields have the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Server '{name}' must be an object")

        command = data.get("command", "")
        if not isinstance(command, str):
            raise ValueError(f"Server '{name}' has a non-string 'command'")

        args = data.get("args") or []
        if not isinstance(args, list):
            raise ValueError(f"Server '{name}' has non-list 'args'")

        env = data.get("env") or {}
        if not isinstance(env, dict):
            raise ValueError(f"Server '{name}' has non-object 'env'")

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError(f"Server '{name}' has non-object 'metadata'")

        extras = {key: value for key, value in data.items() if key not in _KNOWN_ENTRY_KEYS}

        return cls(
            name=name,
            command=command,
            args=[str(arg) for arg in args],
            env={str(key): str(value) for key, value in env.items()},
            metadata=dict(metadata),
            extras=extras,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the registry-file representation.

        ABOUTME: Omits empty env and metadata for cleaner output
        """
        result: dict[str, Any] = {
            "command": self.command,
            "args": list(self.args),
        }
        if self.env:
            result["env"] = dict(self.env)
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        for key, value in self.extras.items():
            result.setdefault(key, value)
        return result


@dataclass
class RegistryDocument:
    """Canonical registry of active and inactive servers.

    ABOUTME: A name lives in at most one of the two sections
    """
    active: dict[str, ServerEntry] = field(default_factory=dict)
    inactive: dict[str, ServerEntry] = field(default_factory=dict)

    def section(self, section: Section) -> dict[str, ServerEntry]:
        """Return the mapping backing a section name."""
        if section == "active":
            return self.active
        if section == "inactive":
            return self.inactive
        raise ValueError(f"Unknown section '{section}'. Must be 'active' or 'inactive'.")


@dataclass(frozen=True)
class ClientServerEntry:
    """Server entry as written into a client config file.

    ABOUTME: managed is True only for entries this tool wrote
    ABOUTME: Anything but a literal boolean true counts as foreign
    """
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    managed: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "ClientServerEntry":
        """Read a raw client-file entry, tolerating hand-edited shapes."""
        if not isinstance(data, dict):
            return cls(command="")
        command = data.get("command")
        args = data.get("args")
        env = data.get("env")
        return cls(
            command=command if isinstance(command, str) else "",
            args=list(args) if isinstance(args, list) else [],
            env=dict(env) if isinstance(env, dict) else {},
            managed=data.get("managed") is True,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "command": self.command,
            "args": list(self.args),
        }
        if self.env:
            result["env"] = dict(self.env)
        result["managed"] = self.managed
        return result


@dataclass
class ClientRegistration:
    """Per-client sync settings persisted in client-paths.json.

    ABOUTME: auto_sync is always False while enabled is False
    ABOUTME: last_sync is only set after a successful write
    """
    client_id: str
    enabled: bool = False
    auto_sync: bool = False
    detected_path: str | None = None
    custom_path: str | None = None
    last_sync: str | None = None
    restart_command: str | None = None

    @property
    def effective_path(self) -> str | None:
        """Custom path when set, otherwise the detected one."""
        return self.custom_path or self.detected_path

    @classmethod
    def from_dict(cls, client_id: str, data: dict[str, Any]) -> "ClientRegistration":
        """Read a hand-editable client-paths.json entry.

        ABOUTME: Only literal booleans count as flags, non-string text fields become None
        """
        enabled = data.get("enabled") is True
        return cls(
            client_id=client_id,
            enabled=enabled,
            auto_sync=enabled and data.get("autoSync") is True,
            detected_path=_optional_str(data.get("detectedPath")),
            custom_path=_optional_str(data.get("customPath")),
            last_sync=_optional_str(data.get("lastSync")),
            restart_command=_optional_str(data.get("restartCommand")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "autoSync": self.auto_sync,
            "customPath": self.custom_path,
            "detectedPath": self.detected_path,
            "lastSync": self.last_sync,
            "restartCommand": self.restart_command,
        }


@dataclass(frozen=True)
class BackupInfo:
    """A backup file found in a client's backup directory."""
    name: str
    path: Path
    created: datetime
    size: int
    formatted_size: str
    formatted_date: str
    manual: bool = False


@dataclass(frozen=True)
class SaveResult:
    """Outcome of persisting the registry.

    ABOUTME: Truthy on success so callers can write 'if store.save():'
    """
    ok: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class PathTestResult:
    """Feedback for a candidate client config path."""
    success: bool
    message: str


@runtime_checkable
class FormatAdapter(Protocol):
    """Protocol for client-specific config formatters.

    ABOUTME: One implementation per client type, looked up by client id
    ABOUTME: Uses @runtime_checkable for isinstance() support
    """

    client_id: str
    merge_policy: MergePolicy
    servers_key: str

    def format_servers(self, entries: dict[str, ServerEntry]) -> dict[str, dict[str, Any]]:
        """Convert canonical entries to managed client-file entries."""
        ...

    def merge_mcp_servers(
        self, existing: dict[str, Any], entries: dict[str, ServerEntry]
    ) -> dict[str, Any]:
        """Return a new client document with canonical entries merged in."""
        ...

    def parse_config(self, text: str) -> dict[str, Any]:
        """Parse native text into a document, raising ConfigParseError."""
        ...

    def stringify_config(self, document: dict[str, Any]) -> str:
        """Serialize a document back to native text."""
        ...

    def validate_config(self, text: str) -> bool:
        """Structural sanity check of native text."""
        ...

    def create_default_config(self) -> dict[str, Any]:
        """Minimal document with an empty server map."""
        ...

    def get_file_extension(self) -> str:
        """File extension including the leading dot."""
        ...
