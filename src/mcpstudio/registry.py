# Canonical server registry for mcpstudio
import json
import logging
import os
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

from mcpstudio.config import get_registry_path
from mcpstudio.models import SECTIONS, RegistryDocument, SaveResult, Section, ServerEntry

logger = logging.getLogger(__name__)

# ABOUTME: On-disk keys for the two registry sections
ACTIVE_KEY = "mcpServers"
INACTIVE_KEY = "inactive"

ChangeListener = Callable[[RegistryDocument], None]


def _other_section(section: Section) -> Section:
    if section not in SECTIONS:
        raise ValueError(f"Unknown section '{section}'. Must be 'active' or 'inactive'.")
    return "inactive" if section == "active" else "active"


def _discard(path: Path) -> None:
    if not path.exists():
        return
    try:
        path.unlink()
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


def parse_registry(data: Any) -> RegistryDocument:
    """Build a RegistryDocument from decoded registry JSON.

    ABOUTME: Missing sections default to empty
    ABOUTME: A name present in both sections is kept only as active

    Raises:
        ValueError: If the root or a section is not an object, or an entry is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Registry root must be an object")

    document = RegistryDocument()
    for key, target in ((ACTIVE_KEY, document.active), (INACTIVE_KEY, document.inactive)):
        section_data = data.get(key) or {}
        if not isinstance(section_data, dict):
            raise ValueError(f"Registry section '{key}' must be an object")
        for name, entry_data in section_data.items():
            target[name] = ServerEntry.from_dict(name, entry_data)

    for name in set(document.active) & set(document.inactive):
        logger.warning(f"Server '{name}' is both active and inactive, keeping the active copy")
        del document.inactive[name]

    return document


def dump_registry(document: RegistryDocument) -> dict[str, Any]:
    """Convert a RegistryDocument to its JSON-ready form."""
    return {
        ACTIVE_KEY: {name: entry.to_dict() for name, entry in document.active.items()},
        INACTIVE_KEY: {name: entry.to_dict() for name, entry in document.inactive.items()},
    }


class RegistryStore:
    """Owns the canonical registry document and its file.

    ABOUTME: Mutations only touch memory, save() persists them
    ABOUTME: Listeners are notified after every successful save
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path else get_registry_path()
        self._document = RegistryDocument()
        self._listeners: list[ChangeListener] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def document(self) -> RegistryDocument:
        """The current in-memory document."""
        return self._document

    def load(self) -> RegistryDocument:
        """Load the registry from disk.

        ABOUTME: Missing or malformed files yield an empty document
        ABOUTME: Never raises, a corrupt registry must not block startup

        Returns:
            The loaded (or empty) document, also kept as the current document
        """
        if not self._path.exists():
            logger.debug(f"No registry at {self._path}, starting empty")
            self._document = RegistryDocument()
            return self._document

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            self._document = parse_registry(data)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Could not read registry {self._path}: {e}")
            self._document = RegistryDocument()

        return self._document

    def save(self) -> SaveResult:
        """Write the current document to disk.

        ABOUTME: Serializes fully, then replaces the file in one step via a temp file
        ABOUTME: On failure memory and the previous file are left as-is so the caller can retry

        Returns:
            SaveResult, falsy with an error message if the write failed
        """
        try:
            content = json.dumps(dump_registry(self._document), indent=2) + "\n"
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize registry: {e}")
            return SaveResult(ok=False, error=str(e))

        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(content, encoding="utf-8")
            os.replace(temp_path, self._path)
        except OSError as e:
            logger.error(f"Failed to write registry {self._path}: {e}")
            _discard(temp_path)
            return SaveResult(ok=False, error=str(e))

        logger.debug(f"Saved registry to {self._path}")
        self._notify()
        return SaveResult(ok=True)

    def add_entry(self, name: str, entry: ServerEntry, section: Section = "active") -> None:
        """Insert an entry, evicting a same-named entry from the other section."""
        other = _other_section(section)
        self._document.section(other).pop(name, None)
        if entry.name != name:
            entry = replace(entry, name=name)
        self._document.section(section)[name] = entry

    def update_entry(
        self,
        name: str,
        previous_name: str | None,
        entry: ServerEntry,
        disabled: bool = False,
    ) -> None:
        """Rename and/or move an entry in one step.

        ABOUTME: disabled alone decides the target section
        ABOUTME: The previous name is removed from whichever section held it

        Args:
            name: New (or unchanged) server name
            previous_name: Name before the edit, None for a new entry
            entry: Updated server definition
            disabled: True to store the entry as inactive
        """
        if previous_name and previous_name != name:
            self._document.active.pop(previous_name, None)
            self._document.inactive.pop(previous_name, None)

        self.add_entry(name, entry, "inactive" if disabled else "active")

    def delete_entry(self, name: str, section: Section = "active") -> bool:
        """Remove an entry from a section.

        Returns:
            True if an entry was removed
        """
        entries = self._document.section(section)
        if name not in entries:
            return False
        del entries[name]
        return True

    def move_entry(self, name: str, target_section: Section) -> bool:
        """Move an entry into target_section.

        Returns:
            False if the entry is not currently in the other section
        """
        source = self._document.section(_other_section(target_section))
        if name not in source:
            return False
        self._document.section(target_section)[name] = source.pop(name)
        return True

    def get_entry(self, name: str) -> tuple[ServerEntry, Section] | None:
        """Look up an entry and the section holding it."""
        if name in self._document.active:
            return self._document.active[name], "active"
        if name in self._document.inactive:
            return self._document.inactive[name], "inactive"
        return None

    def has_servers(self) -> bool:
        return bool(self._document.active or self._document.inactive)

    def import_entries(
        self,
        entries: dict[str, ServerEntry],
        section: Section = "active",
        overwrite: bool = False,
    ) -> list[str]:
        """Merge externally sourced entries into a section.

        ABOUTME: Names already in either section are skipped unless overwrite is set
        ABOUTME: Overwritten names move to section, so names stay unique

        Returns:
            Names that were added or replaced
        """
        _other_section(section)
        imported: list[str] = []
        for name, entry in entries.items():
            if not overwrite and self.get_entry(name) is not None:
                logger.info(f"Skipping '{name}', already in the registry")
                continue
            self.add_entry(name, entry, section)
            imported.append(name)
        return imported

    def active_entries(self) -> dict[str, ServerEntry]:
        """Copy of the active section, the only one propagated to clients."""
        return dict(self._document.active)

    def add_change_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        self._listeners = [existing for existing in self._listeners if existing != listener]

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._document)
            except Exception as e:
                logger.warning(f"Registry change listener failed: {e}")

