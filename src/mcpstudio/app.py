# Composition root: builds the stores and wires auto-sync
import logging
from pathlib import Path

from mcpstudio.clients import ClientRegistry, Detector
from mcpstudio.config import (
    DEFAULT_MAX_BACKUPS,
    REGISTRY_BACKUP_ID,
    get_backup_root,
    get_clients_path,
    get_registry_path,
)
from mcpstudio.formatters import extract_servers
from mcpstudio.models import RegistryDocument, Section
from mcpstudio.registry import INACTIVE_KEY, RegistryStore
from mcpstudio.sync import ClientSync
from mcpstudio.utils.backup import BackupStore

logger = logging.getLogger(__name__)


class Studio:
    """Owns one instance of every store for the lifetime of the process.

    ABOUTME: After each successful registry save, auto-sync clients are synced
    ABOUTME: Pass config_dir to relocate every file (tests, portable installs)
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        backup_root: Path | None = None,
        max_backups: int = DEFAULT_MAX_BACKUPS,
        detector: Detector | None = None,
        auto_sync: bool = True,
    ) -> None:
        self.registry = RegistryStore(get_registry_path(config_dir))
        self.backups = BackupStore(backup_root or get_backup_root(config_dir), max_backups)
        self.clients = ClientRegistry(get_clients_path(config_dir), detector)
        self.sync = ClientSync(self.clients, self.backups)
        self.last_sync_results: dict[str, bool | None] = {}

        if auto_sync:
            self.registry.add_change_listener(self._auto_sync)

    def load(self) -> RegistryDocument:
        """Load client registrations and the registry."""
        self.clients.load()
        return self.registry.load()

    def sync_all(self) -> dict[str, bool | None]:
        self.last_sync_results = self.sync.sync_all(self.registry.document)
        return self.last_sync_results

    def sync_one(self, client_id: str) -> bool:
        return self.sync.sync_one(client_id, self.registry.document)

    def manual_backup(self, client_id: str) -> Path:
        """Manual backup of a client's current config file.

        Raises:
            FileNotFoundError: If the client has no path or the file is missing
            OSError: If the backup cannot be written
        """
        client_path = self.clients.get_client_path(client_id)
        if client_path is None:
            raise FileNotFoundError(f"No path configured for client {client_id}")
        return self.backups.create_manual_backup(client_id, client_path)

    def restore(self, client_id: str, backup_filename: str) -> bool:
        """Restore a backup over the client's current config file."""
        client_path = self.clients.get_client_path(client_id)
        if client_path is None:
            logger.error(f"No path configured for client {client_id}")
            return False
        return self.backups.restore_backup(client_id, backup_filename, client_path)

    def import_client(
        self,
        client_id: str,
        section: Section = "active",
        overwrite: bool = False,
    ) -> list[str]:
        """Seed the registry from servers already in a client's config file.

        ABOUTME: Foreign servers go to section, a legacy 'inactive' map to inactive
        ABOUTME: Backs up the registry file before saving the merged result

        Args:
            client_id: Client whose config file is read
            section: Section receiving the client's servers
            overwrite: Replace registry entries that have the same name

        Returns:
            Names that were imported

        Raises:
            FileNotFoundError: If the client has no path or the file is missing
            ConfigParseError: If the client file cannot be parsed
            OSError: If the registry cannot be saved
        """
        client_path = self.clients.get_client_path(client_id)
        if client_path is None or not client_path.is_file():
            raise FileNotFoundError(f"No config file found for client {client_id}")

        formatter = self.sync.get_formatter(client_id)
        document = formatter.parse_config(client_path.read_text(encoding="utf-8"))

        found = extract_servers(document, formatter.servers_key)
        legacy_inactive = {
            name: entry
            for name, entry in extract_servers(document, INACTIVE_KEY).items()
            if name not in found
        }
        if not found and not legacy_inactive:
            logger.info(f"No servers to import from {client_path}")
            return []

        if self.registry.path.exists():
            try:
                self.backups.create_backup(REGISTRY_BACKUP_ID, self.registry.path)
            except OSError as e:
                logger.warning(f"Failed to back up registry before import: {e}")

        imported = self.registry.import_entries(found, section, overwrite)
        imported += self.registry.import_entries(legacy_inactive, "inactive", overwrite)
        if not imported:
            return imported

        result = self.registry.save()
        if not result:
            raise OSError(f"Could not save registry: {result.error}")
        logger.info(f"Imported {len(imported)} servers from {client_id}")
        return imported

    def _auto_sync(self, document: RegistryDocument) -> None:
        if not self.clients.is_auto_sync_enabled():
            return
        logger.info("Auto-syncing to enabled clients")
        self.last_sync_results = self.sync.sync_all(document)
