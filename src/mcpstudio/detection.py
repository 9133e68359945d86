# Auto-detection of installed MCP clients
from dataclasses import dataclass

from mcpstudio.utils.paths import expand_path


@dataclass(frozen=True)
class KnownClient:
    """A client type mcpstudio knows how to sync.

    ABOUTME: Candidate paths are tried in order, the first existing one wins
    """
    client_id: str
    name: str
    paths: tuple[str, ...]
    format: str
    restart_command: str | None = None


# ABOUTME: Every supported client type, in display order
KNOWN_CLIENTS: dict[str, KnownClient] = {
    "claude": KnownClient(
        client_id="claude",
        name="Claude Desktop",
        paths=(
            "~/Library/Application Support/Claude/claude_desktop_config.json",  # macOS
            "~/.config/Claude/claude_desktop_config.json",  # Linux
            "~/.config/claude-desktop/config.json",
            "%APPDATA%/Claude/claude_desktop_config.json",  # Windows
        ),
        format="json",
        restart_command=(
            "pkill -f 'Claude' && sleep 2 && /Applications/Claude.app/Contents/MacOS/Claude"
        ),
    ),
    "librechat": KnownClient(
        client_id="librechat",
        name="LibreChat",
        paths=(
            "~/src/LibreChat/librechat.yaml",
            "~/LibreChat/librechat.yaml",
            "/opt/LibreChat/librechat.yaml",
        ),
        format="yaml",
    ),
    "codex": KnownClient(
        client_id="codex",
        name="Codex CLI",
        paths=("~/.codex/config.toml",),
        format="toml",
    ),
}


def find_client_path(paths: tuple[str, ...]) -> str | None:
    """Return the first candidate that exists, expanded, or None."""
    for candidate in paths:
        expanded = expand_path(candidate)
        if expanded.exists():
            return str(expanded)
    return None


def detect_clients() -> dict[str, str | None]:
    """Detect installed clients.

    ABOUTME: Maps every known client id to its detected path (or None)
    """
    return {
        client_id: find_client_path(client.paths)
        for client_id, client in KNOWN_CLIENTS.items()
    }


def get_known_client(client_id: str) -> KnownClient | None:
    return KNOWN_CLIENTS.get(client_id)
