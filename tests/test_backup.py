# ABOUTME: Tests for the backup store.
# ABOUTME: Covers naming, retention, manual backups, listing, restore and fail-soft accessors.
import os
import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from mcpstudio.utils.backup import (
    BACKUP_PREFIX,
    MANUAL_PREFIX,
    BackupStore,
    format_file_size,
    format_timestamp,
)

# config.backup.2026-10-19T07-53-12-345Z.json
AUTO_NAME = re.compile(r"^config\.backup\.\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.json$")
MANUAL_NAME = re.compile(
    r"^config\.backup\.manual\.\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.json$"
)


@pytest.fixture
def store(tmp_path: Path) -> BackupStore:
    return BackupStore(tmp_path / "backups")


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "claude_desktop_config.json"
    path.write_text('{"mcpServers": {}}')
    return path


def seed_backup(store: BackupStore, client_id: str, name: str, mtime: int, content: str = "{}") -> Path:
    """Write a backup file by hand with a fixed mtime."""
    backup_dir = store.get_backup_dir(client_id)
    backup_dir.mkdir(parents=True, exist_ok=True)
    path = backup_dir / name
    path.write_text(content)
    os.utime(path, (mtime, mtime))
    return path


class TestFormatting:
    """Tests for timestamp and size formatting."""

    def test_format_timestamp_replaces_colons_and_dots(self):
        moment = datetime(2026, 10, 19, 7, 53, 12, 345678, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2026-10-19T07-53-12-345Z"

    @pytest.mark.parametrize("size, expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1048576, "1 MB"),
        (5 * 1024 ** 3, "5 GB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected


class TestCreateBackup:
    """Tests for BackupStore.create_backup."""

    def test_creates_backup_with_content(self, store, source):
        backup_path = store.create_backup("claude", source)

        assert backup_path.exists()
        assert backup_path.parent == store.get_backup_dir("claude")
        assert backup_path.read_text() == source.read_text()

    def test_backup_filename_format(self, store, source):
        backup_path = store.create_backup("claude", source)
        assert AUTO_NAME.match(backup_path.name)

    def test_keeps_original_extension(self, store, tmp_path):
        yaml_source = tmp_path / "librechat.yaml"
        yaml_source.write_text("version: 1.0.0\n")

        backup_path = store.create_backup("librechat", yaml_source)

        assert backup_path.name.startswith(BACKUP_PREFIX)
        assert backup_path.suffix == ".yaml"

    def test_source_file_not_found(self, store, tmp_path):
        with pytest.raises(FileNotFoundError):
            store.create_backup("claude", tmp_path / "missing.json")

    def test_unwritable_backup_dir_raises(self, tmp_path, source):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = BackupStore(blocker)

        with pytest.raises(OSError):
            store.create_backup("claude", source)

    def test_rapid_backups_get_unique_names(self, store, source):
        paths = [store.create_backup("claude", source) for _ in range(3)]
        assert len({p.name for p in paths}) == 3


class TestRetention:
    """Tests for automatic pruning."""

    def test_four_backups_leave_three_newest_first(self, store, source):
        created = []
        for i in range(4):
            source.write_text(f'{{"generation": {i}}}')
            created.append(store.create_backup("x", source))

        backups = store.list_backups("x")

        assert len(backups) == 3
        assert [b.name for b in backups] == [p.name for p in reversed(created[1:])]
        assert not created[0].exists()

    def test_keeps_n_most_recent_of_n_plus_k(self, tmp_path, source):
        store = BackupStore(tmp_path / "backups", max_backups=2)
        created = [store.create_backup("claude", source) for _ in range(5)]

        remaining = {b.name for b in store.list_backups("claude")}

        assert remaining == {created[-1].name, created[-2].name}

    def test_manual_backups_never_pruned(self, store, source):
        manual = [store.create_manual_backup("claude", source) for _ in range(5)]
        for _ in range(5):
            store.create_backup("claude", source)

        backups = store.list_backups("claude")

        assert all(path.exists() for path in manual)
        assert sum(1 for b in backups if b.manual) == 5
        assert sum(1 for b in backups if not b.manual) == 3

    def test_cleanup_uses_mtime_order(self, store):
        for i in range(5):
            seed_backup(store, "claude", f"config.backup.seed-{i}.json", mtime=1_700_000_000 + i)

        deleted = store.cleanup_old_backups("claude")

        assert sorted(p.name for p in deleted) == [
            "config.backup.seed-0.json",
            "config.backup.seed-1.json",
        ]

    def test_cleanup_ignores_foreign_files_and_dirs(self, store):
        backup_dir = store.get_backup_dir("claude")
        backup_dir.mkdir(parents=True)
        (backup_dir / "readme.txt").write_text("keep me")
        (backup_dir / "config.backup.dir").mkdir()
        for i in range(4):
            seed_backup(store, "claude", f"config.backup.seed-{i}.json", mtime=1_700_000_000 + i)

        store.cleanup_old_backups("claude")

        assert (backup_dir / "readme.txt").exists()
        assert (backup_dir / "config.backup.dir").is_dir()

    def test_cleanup_missing_dir_is_noop(self, store):
        assert store.cleanup_old_backups("nobody") == []

    def test_clients_pruned_independently(self, store, source):
        for _ in range(4):
            store.create_backup("claude", source)
        store.create_backup("librechat", source)

        assert store.get_backup_count("claude") == 3
        assert store.get_backup_count("librechat") == 1


class TestManualBackup:
    """Tests for BackupStore.create_manual_backup."""

    def test_manual_filename_format(self, store, source):
        backup_path = store.create_manual_backup("claude", source)
        assert MANUAL_NAME.match(backup_path.name)
        assert backup_path.name.startswith(MANUAL_PREFIX)

    def test_manual_backup_listed_as_manual(self, store, source):
        store.create_manual_backup("claude", source)
        [info] = store.list_backups("claude")
        assert info.manual is True


class TestListBackups:
    """Tests for BackupStore.list_backups."""

    def test_missing_dir_returns_empty(self, store):
        assert store.list_backups("claude") == []

    def test_sorted_newest_first(self, store):
        seed_backup(store, "claude", "config.backup.a.json", mtime=1_700_000_300)
        seed_backup(store, "claude", "config.backup.b.json", mtime=1_700_000_100)
        seed_backup(store, "claude", "config.backup.c.json", mtime=1_700_000_200)

        names = [b.name for b in store.list_backups("claude")]

        assert names == ["config.backup.a.json", "config.backup.c.json", "config.backup.b.json"]

    def test_backup_info_fields(self, store):
        path = seed_backup(store, "claude", "config.backup.a.json", mtime=1_700_000_000,
                           content="x" * 2048)

        [info] = store.list_backups("claude")

        assert info.path == path
        assert info.size == 2048
        assert info.formatted_size == "2 KB"
        assert info.created == datetime.fromtimestamp(1_700_000_000)
        assert info.manual is False

    def test_ignores_non_backup_files(self, store):
        backup_dir = store.get_backup_dir("claude")
        backup_dir.mkdir(parents=True)
        (backup_dir / "notes.txt").write_text("x")
        assert store.list_backups("claude") == []


class TestRestoreBackup:
    """Tests for BackupStore.restore_backup."""

    def test_restore_overwrites_target_byte_for_byte(self, store, source):
        backup_path = store.create_backup("claude", source)
        original = backup_path.read_bytes()
        source.write_text('{"mcpServers": {"changed": {"command": "x"}}}')

        assert store.restore_backup("claude", backup_path.name, source) is True
        assert source.read_bytes() == original

    def test_restore_takes_safety_backup_of_current_content(self, store, source):
        backup_path = store.create_backup("claude", source)
        source.write_text("pre-restore content")

        store.restore_backup("claude", backup_path.name, source)

        contents = [b.path.read_text() for b in store.list_backups("claude")]
        assert "pre-restore content" in contents

    def test_restore_oldest_backup_survives_safety_prune(self, store, source):
        created = []
        for i in range(3):
            source.write_text(f"generation {i}")
            created.append(store.create_backup("claude", source))
        source.write_text("current")

        assert store.restore_backup("claude", created[0].name, source) is True
        assert source.read_text() == "generation 0"

    def test_restore_creates_missing_target_dirs(self, store, source, tmp_path):
        backup_path = store.create_backup("claude", source)
        target = tmp_path / "new" / "dir" / "config.json"

        assert store.restore_backup("claude", backup_path.name, target) is True
        assert target.read_text() == source.read_text()

    def test_restore_missing_target_makes_no_safety_backup(self, store, source, tmp_path):
        backup_path = store.create_backup("claude", source)
        target = tmp_path / "fresh.json"

        store.restore_backup("claude", backup_path.name, target)

        assert store.get_backup_count("claude") == 1

    def test_restore_missing_backup_returns_false(self, store, source):
        assert store.restore_backup("claude", "config.backup.nope.json", source) is False

    def test_restore_rejects_path_traversal(self, store, source):
        assert store.restore_backup("claude", "../config.backup.x.json", source) is False

    def test_restore_write_failure_returns_false(self, store, source, tmp_path):
        backup_path = store.create_backup("claude", source)
        blocker = tmp_path / "blocker"
        blocker.write_text("file")

        assert store.restore_backup("claude", backup_path.name, blocker / "config.json") is False


class TestAccessors:
    """Tests for delete_backup and get_backup_content."""

    def test_get_backup_content(self, store, source):
        backup_path = store.create_backup("claude", source)
        assert store.get_backup_content("claude", backup_path.name) == source.read_text()

    def test_get_backup_content_missing_returns_empty(self, store):
        assert store.get_backup_content("claude", "config.backup.nope.json") == ""

    def test_delete_backup(self, store, source):
        backup_path = store.create_backup("claude", source)
        assert store.delete_backup("claude", backup_path.name) is True
        assert not backup_path.exists()

    def test_delete_missing_backup_returns_false(self, store):
        assert store.delete_backup("claude", "config.backup.nope.json") is False

    def test_delete_rejects_non_backup_names(self, store, source):
        assert store.delete_backup("claude", "claude_desktop_config.json") is False
