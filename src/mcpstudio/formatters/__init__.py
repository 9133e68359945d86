# Formatter registry, keyed by client id
from mcpstudio.models import FormatAdapter
from mcpstudio.formatters.base import clean_server_config, extract_servers, is_managed
from mcpstudio.formatters.claude import ClaudeFormatter
from mcpstudio.formatters.codex import CodexFormatter
from mcpstudio.formatters.librechat import LibreChatFormatter

# Registry of all available formatters
FORMATTERS: dict[str, type[FormatAdapter]] = {
    ClaudeFormatter.client_id: ClaudeFormatter,
    LibreChatFormatter.client_id: LibreChatFormatter,
    CodexFormatter.client_id: CodexFormatter,
}

__all__ = [
    "FormatAdapter",
    "ClaudeFormatter",
    "CodexFormatter",
    "LibreChatFormatter",
    "FORMATTERS",
    "clean_server_config",
    "extract_servers",
    "get_formatter",
    "is_managed",
]


def get_formatter(client_id: str) -> FormatAdapter:
    """Instantiate the formatter for a client.

    Raises:
        ValueError: If no formatter is registered for client_id
    """
    formatter_cls = FORMATTERS.get(client_id)
    if formatter_cls is None:
        raise ValueError(f"No formatter found for client: {client_id}")
    return formatter_cls()
