# Client registrations: which clients take part in sync, and where their files live
import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from mcpstudio.config import PRIMARY_CLIENT_ID, get_clients_path
from mcpstudio.detection import KNOWN_CLIENTS, detect_clients
from mcpstudio.models import ClientRegistration

logger = logging.getLogger(__name__)

Detector = Callable[[], dict[str, str | None]]


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ClientRegistry:
    """Loads, defaults and persists per-client sync settings.

    ABOUTME: Every setter persists immediately
    ABOUTME: Disabling a client also turns its auto-sync off
    """

    def __init__(self, path: Path | None = None, detector: Detector | None = None) -> None:
        self._path = path if path else get_clients_path()
        self._detector = detector if detector else detect_clients
        self._clients: dict[str, ClientRegistration] = {}

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, ClientRegistration]:
        """Load registrations, falling back to detected defaults.

        ABOUTME: Unreadable files are logged and replaced by defaults
        ABOUTME: Known clients missing from the file are added disabled
        """
        data = None
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("root must be an object")
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load client config {self._path}: {e}")
                data = None

        if data is None:
            self._clients = self.create_default_registrations()
            return self.all()

        self._clients = {}
        for client_id, entry in data.items():
            if isinstance(entry, dict):
                self._clients[client_id] = ClientRegistration.from_dict(client_id, entry)

        missing = [client_id for client_id in KNOWN_CLIENTS if client_id not in self._clients]
        if missing:
            detected = self._detector()
            for client_id in missing:
                self._clients[client_id] = ClientRegistration(
                    client_id=client_id, detected_path=detected.get(client_id)
                )

        return self.all()

    def create_default_registrations(self) -> dict[str, ClientRegistration]:
        """One registration per known client, only the primary one enabled."""
        detected = self._detector()
        defaults: dict[str, ClientRegistration] = {}
        for client_id in KNOWN_CLIENTS:
            is_primary = client_id == PRIMARY_CLIENT_ID
            defaults[client_id] = ClientRegistration(
                client_id=client_id,
                enabled=is_primary,
                auto_sync=is_primary,
                detected_path=detected.get(client_id),
            )
        return defaults

    def save(self) -> bool:
        """Persist registrations to disk.

        Returns:
            False if the file could not be written (logged, not raised)
        """
        data = {client_id: reg.to_dict() for client_id, reg in self._clients.items()}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
        except OSError as e:
            logger.error(f"Failed to save client config {self._path}: {e}")
            return False

        logger.debug(f"Saved client configuration to {self._path}")
        return True

    def refresh_detection(self) -> None:
        """Re-run detection, updating detected paths and adding new clients."""
        for client_id, detected_path in self._detector().items():
            registration = self._clients.get(client_id)
            if registration is None:
                self._clients[client_id] = ClientRegistration(
                    client_id=client_id, detected_path=detected_path
                )
            else:
                registration.detected_path = detected_path
        self.save()

    def get(self, client_id: str) -> ClientRegistration | None:
        return self._clients.get(client_id)

    def all(self) -> dict[str, ClientRegistration]:
        """Shallow copy of all registrations."""
        return dict(self._clients)

    def client_ids(self) -> list[str]:
        return list(self._clients)

    def get_client_path(self, client_id: str) -> Path | None:
        """Effective config path: custom if set, else detected."""
        registration = self._clients.get(client_id)
        if registration is None or not registration.effective_path:
            return None
        return Path(registration.effective_path).expanduser()

    def get_restart_command(self, client_id: str) -> str | None:
        """Stored restart command, or the known default for the client."""
        registration = self._clients.get(client_id)
        if registration and registration.restart_command:
            return registration.restart_command
        known = KNOWN_CLIENTS.get(client_id)
        return known.restart_command if known else None

    def set_enabled(self, client_id: str, enabled: bool) -> bool:
        registration = self._clients.get(client_id)
        if registration is None:
            return False
        registration.enabled = enabled
        if not enabled:
            registration.auto_sync = False
        return self.save()

    def set_auto_sync(self, client_id: str, auto_sync: bool) -> bool:
        """Toggle auto-sync.

        ABOUTME: Refused (returns False) when turning it on for a disabled client
        """
        registration = self._clients.get(client_id)
        if registration is None:
            return False
        if auto_sync and not registration.enabled:
            logger.warning(f"Cannot enable auto-sync for disabled client {client_id}")
            return False
        registration.auto_sync = auto_sync
        return self.save()

    def set_custom_path(self, client_id: str, custom_path: str | None) -> bool:
        registration = self._clients.get(client_id)
        if registration is None:
            return False
        registration.custom_path = custom_path or None
        return self.save()

    def set_restart_command(self, client_id: str, restart_command: str | None) -> bool:
        registration = self._clients.get(client_id)
        if registration is None:
            return False
        registration.restart_command = (restart_command or "").strip() or None
        return self.save()

    def record_sync(self, client_id: str) -> None:
        """Stamp last_sync after a successful write."""
        registration = self._clients.get(client_id)
        if registration is not None:
            registration.last_sync = utc_now_iso()
            self.save()

    def enabled_clients(self) -> list[str]:
        return [client_id for client_id, reg in self._clients.items() if reg.enabled]

    def auto_sync_clients(self) -> list[str]:
        return [
            client_id
            for client_id, reg in self._clients.items()
            if reg.enabled and reg.auto_sync
        ]

    def is_auto_sync_enabled(self) -> bool:
        return bool(self.auto_sync_clients())
