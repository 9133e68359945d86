# Sync orchestration for mcpstudio
import logging
from collections.abc import Mapping
from pathlib import Path

from mcpstudio.clients import ClientRegistry
from mcpstudio.errors import ConfigParseError, ConfigValidationError
from mcpstudio.formatters import get_formatter
from mcpstudio.models import FormatAdapter, PathTestResult, RegistryDocument, ServerEntry
from mcpstudio.utils.backup import BackupStore

logger = logging.getLogger(__name__)

Entries = RegistryDocument | Mapping[str, ServerEntry]


def active_only(entries: Entries) -> dict[str, ServerEntry]:
    """Entries eligible for propagation.

    ABOUTME: A RegistryDocument contributes only its active section
    """
    if isinstance(entries, RegistryDocument):
        return dict(entries.active)
    return dict(entries)


class ClientSync:
    """Writes the canonical active servers into each client's config file.

    ABOUTME: Only component that touches client files, backups and formatters together
    ABOUTME: Clients are processed one after another, each independently
    """

    def __init__(self, clients: ClientRegistry, backups: BackupStore) -> None:
        self._clients = clients
        self._backups = backups

    @property
    def clients(self) -> ClientRegistry:
        return self._clients

    def get_formatter(self, client_id: str) -> FormatAdapter:
        return get_formatter(client_id)

    def get_client_path(self, client_id: str) -> Path | None:
        return self._clients.get_client_path(client_id)

    def sync_one(self, client_id: str, entries: Entries) -> bool:
        """Sync canonical active servers to one client.

        ABOUTME: Backup first (best effort), then read, merge, validate, write
        ABOUTME: An invalid merge result aborts before the file is touched
        ABOUTME: Returns False on any failure, last_sync is only set on success

        Args:
            client_id: Client to sync
            entries: RegistryDocument or mapping of active entries

        Returns:
            True if the client file was written
        """
        registration = self._clients.get(client_id)
        if registration is None or not registration.enabled:
            logger.debug(f"Client {client_id} is disabled, skipping sync")
            return False

        try:
            client_path = self._clients.get_client_path(client_id)
            if client_path is None:
                logger.warning(f"No path configured for client {client_id}")
                return False

            formatter = self.get_formatter(client_id)

            if client_path.exists():
                try:
                    self._backups.create_backup(client_id, client_path)
                except OSError as e:
                    logger.warning(f"Failed to create backup for {client_id}: {e}")

            existing = self._read_document(formatter, client_path)
            merged = formatter.merge_mcp_servers(existing, active_only(entries))
            content = formatter.stringify_config(merged)

            if not formatter.validate_config(content):
                raise ConfigValidationError(
                    f"Generated configuration is invalid for {client_id}"
                )

            client_path.parent.mkdir(parents=True, exist_ok=True)
            client_path.write_text(content, encoding="utf-8")
        except Exception as e:
            logger.error(f"Failed to sync to {client_id}: {e}")
            return False

        self._clients.record_sync(client_id)
        logger.info(f"Synced {client_id} ({client_path})")
        return True

    def sync_all(self, entries: Entries) -> dict[str, bool | None]:
        """Sync every enabled auto-sync client.

        ABOUTME: None for clients not (enabled and auto_sync), else sync_one's result
        ABOUTME: One client's failure never stops the others
        """
        results: dict[str, bool | None] = {}
        for client_id in self._clients.client_ids():
            registration = self._clients.get(client_id)
            if registration is None or not (registration.enabled and registration.auto_sync):
                results[client_id] = None
                continue
            results[client_id] = self.sync_one(client_id, entries)
        return results

    def test_path(self, client_id: str, candidate_path: str | Path) -> PathTestResult:
        """Check a candidate config path before it is committed.

        ABOUTME: Existence check plus parse and validate with the client's formatter
        """
        try:
            formatter = self.get_formatter(client_id)
        except ValueError as e:
            return PathTestResult(success=False, message=str(e))

        path = Path(candidate_path).expanduser()
        if not path.is_file():
            return PathTestResult(success=False, message="File does not exist")

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return PathTestResult(success=False, message=f"Cannot read file: {e}")

        if not formatter.validate_config(content):
            file_format = formatter.get_file_extension().lstrip(".").upper()
            return PathTestResult(success=False, message=f"Invalid {file_format} format")

        return PathTestResult(success=True, message="Valid configuration file")

    def _read_document(self, formatter: FormatAdapter, client_path: Path) -> dict:
        if not client_path.exists():
            return formatter.create_default_config()

        try:
            content = client_path.read_text(encoding="utf-8")
            if not content.strip():
                return formatter.create_default_config()
            return formatter.parse_config(content)
        except (ConfigParseError, UnicodeDecodeError) as e:
            logger.warning(f"Unreadable config {client_path}, starting from defaults: {e}")
            return formatter.create_default_config()
