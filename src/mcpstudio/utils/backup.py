# ABOUTME: Backup store for client configuration files.
# ABOUTME: Timestamped per-client snapshots with retention (keep last 3 automatic backups).
import logging
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path

from mcpstudio.config import DEFAULT_MAX_BACKUPS, get_backup_root
from mcpstudio.models import BackupInfo

logger = logging.getLogger(__name__)

# ABOUTME: Every backup file name starts with this prefix
BACKUP_PREFIX = "config.backup."

# ABOUTME: Manual backups carry an extra segment and are never pruned
MANUAL_PREFIX = BACKUP_PREFIX + "manual."

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_timestamp(moment: datetime) -> str:
    """Render a UTC moment as a filename-safe sortable timestamp.

    ABOUTME: ISO-8601 with milliseconds and Z, ':' and '.' replaced by '-'

    Examples:
        >>> format_timestamp(datetime(2026, 10, 19, 7, 53, 12, 345000, tzinfo=timezone.utc))
        '2026-10-19T07-53-12-345Z'
    """
    moment = moment.astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def format_file_size(size: int) -> str:
    """Format a byte count with binary units.

    ABOUTME: One decimal place, a trailing '.0' is dropped

    Examples:
        >>> format_file_size(0)
        '0 B'
        >>> format_file_size(1536)
        '1.5 KB'
        >>> format_file_size(1048576)
        '1 MB'
    """
    if size <= 0:
        return "0 B"

    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1

    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text} {_SIZE_UNITS[unit_index]}"


def is_manual_backup(filename: str) -> bool:
    return filename.startswith(MANUAL_PREFIX)


class BackupStore:
    """Per-client backup directories under a common root.

    ABOUTME: Automatic backups are pruned to max_backups, manual ones are kept
    ABOUTME: Restore and accessors never raise, they return False or ""
    """

    def __init__(self, root: Path | None = None, max_backups: int = DEFAULT_MAX_BACKUPS) -> None:
        self._root = root if root else get_backup_root()
        self._max_backups = max_backups

    @property
    def root(self) -> Path:
        return self._root

    @property
    def max_backups(self) -> int:
        return self._max_backups

    def get_backup_dir(self, client_id: str) -> Path:
        """Directory holding a client's backups (not created)."""
        return self._root / client_id

    def create_backup(self, client_id: str, source_path: Path) -> Path:
        """Snapshot a client config file, then prune old automatic backups.

        ABOUTME: Backup format: config.backup.{timestamp}{ext}
        ABOUTME: Copies content only so the backup mtime is its creation time

        Args:
            client_id: Client the file belongs to
            source_path: File to back up

        Returns:
            Path to created backup file

        Raises:
            FileNotFoundError: If source_path doesn't exist
            OSError: If the backup directory or file cannot be written
        """
        backup_path = self._write_backup(client_id, Path(source_path), BACKUP_PREFIX)
        logger.info(f"Created backup: {backup_path}")
        self.cleanup_old_backups(client_id)
        return backup_path

    def create_manual_backup(self, client_id: str, source_path: Path) -> Path:
        """Snapshot a client config file without pruning.

        ABOUTME: Backup format: config.backup.manual.{timestamp}{ext}

        Raises:
            FileNotFoundError: If source_path doesn't exist
            OSError: If the backup directory or file cannot be written
        """
        backup_path = self._write_backup(client_id, Path(source_path), MANUAL_PREFIX)
        logger.info(f"Created manual backup: {backup_path}")
        return backup_path

    def list_backups(self, client_id: str) -> list[BackupInfo]:
        """List a client's backups, newest first.

        ABOUTME: Includes both automatic and manual backups
        ABOUTME: Returns empty list if the directory doesn't exist
        """
        backup_dir = self.get_backup_dir(client_id)
        if not backup_dir.is_dir():
            return []

        backups: list[tuple[int, BackupInfo]] = []
        try:
            for file_path in backup_dir.iterdir():
                if not file_path.is_file() or not file_path.name.startswith(BACKUP_PREFIX):
                    continue
                stat = file_path.stat()
                created = datetime.fromtimestamp(stat.st_mtime)
                info = BackupInfo(
                    name=file_path.name,
                    path=file_path,
                    created=created,
                    size=stat.st_size,
                    formatted_size=format_file_size(stat.st_size),
                    formatted_date=created.strftime("%Y-%m-%d %H:%M:%S"),
                    manual=is_manual_backup(file_path.name),
                )
                backups.append((stat.st_mtime_ns, info))
        except OSError as e:
            logger.error(f"Failed to list backups for {client_id}: {e}")
            return []

        backups.sort(key=lambda item: (item[0], item[1].name), reverse=True)
        return [info for _, info in backups]

    def get_backup_count(self, client_id: str) -> int:
        return len(self.list_backups(client_id))

    def restore_backup(self, client_id: str, backup_filename: str, target_path: Path) -> bool:
        """Overwrite target_path with a backup's content.

        ABOUTME: Backup content is read before the safety backup is taken,
        ABOUTME: so pruning triggered by that safety backup cannot remove it
        ABOUTME: Returns False on any failure, never raises

        Args:
            client_id: Client the backup belongs to
            backup_filename: Name of the backup file (as listed)
            target_path: Client config file to overwrite

        Returns:
            True if the target now holds the backup's content
        """
        backup_path = self._resolve(client_id, backup_filename)
        if backup_path is None:
            return False

        target_path = Path(target_path)
        try:
            content = backup_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read backup {backup_filename}: {e}")
            return False

        if target_path.exists():
            try:
                self.create_backup(client_id, target_path)
            except OSError as e:
                logger.warning(f"Failed to back up {target_path} before restore: {e}")

        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            target_path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to restore backup {backup_filename} to {target_path}: {e}")
            return False

        logger.info(f"Restored backup {backup_filename} to {target_path}")
        return True

    def delete_backup(self, client_id: str, backup_filename: str) -> bool:
        """Delete one backup file, returning False if it could not be removed."""
        backup_path = self._resolve(client_id, backup_filename)
        if backup_path is None:
            return False

        try:
            backup_path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete backup {backup_filename}: {e}")
            return False

        logger.info(f"Deleted backup: {backup_filename}")
        return True

    def get_backup_content(self, client_id: str, backup_filename: str) -> str:
        """Return a backup's text, or "" if it cannot be read."""
        backup_path = self._resolve(client_id, backup_filename)
        if backup_path is None:
            return ""

        try:
            return backup_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read backup content {backup_filename}: {e}")
            return ""

    def cleanup_old_backups(self, client_id: str) -> list[Path]:
        """Remove automatic backups beyond the retention limit.

        ABOUTME: Sorts by mtime descending (newest first), name breaks ties
        ABOUTME: Manual backups are neither counted nor deleted
        ABOUTME: Logs warnings on errors but does not raise exceptions

        Returns:
            List of paths that were deleted
        """
        deleted_files: list[Path] = []
        backup_dir = self.get_backup_dir(client_id)

        try:
            automatic = [
                (file_path.stat().st_mtime_ns, file_path.name, file_path)
                for file_path in backup_dir.iterdir()
                if file_path.is_file()
                and file_path.name.startswith(BACKUP_PREFIX)
                and not is_manual_backup(file_path.name)
            ]
        except OSError as e:
            logger.warning(f"Failed to clean old backups for {client_id}: {e}")
            return deleted_files

        automatic.sort(reverse=True)

        for _, name, file_path in automatic[self._max_backups:]:
            try:
                file_path.unlink()
                deleted_files.append(file_path)
                logger.debug(f"Deleted old backup: {name}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup {file_path}: {e}")

        return deleted_files

    def _write_backup(self, client_id: str, source_path: Path, prefix: str) -> Path:
        if not source_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {source_path}")

        backup_dir = self.get_backup_dir(client_id)
        backup_dir.mkdir(parents=True, exist_ok=True)

        # Same-millisecond backups advance the stamp so names stay unique and sortable
        moment = datetime.now(timezone.utc)
        backup_path = backup_dir / f"{prefix}{format_timestamp(moment)}{source_path.suffix}"
        while backup_path.exists():
            moment += timedelta(milliseconds=1)
            backup_path = backup_dir / f"{prefix}{format_timestamp(moment)}{source_path.suffix}"

        shutil.copyfile(source_path, backup_path)
        return backup_path

    def _resolve(self, client_id: str, backup_filename: str) -> Path | None:
        if Path(backup_filename).name != backup_filename or not backup_filename.startswith(
            BACKUP_PREFIX
        ):
            logger.error(f"Invalid backup name for {client_id}: {backup_filename}")
            return None

        backup_path = self.get_backup_dir(client_id) / backup_filename
        if not backup_path.is_file():
            logger.error(f"Backup file not found: {backup_filename}")
            return None
        return backup_path
