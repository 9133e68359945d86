# Claude Desktop config formatter
from typing import Any

from mcpstudio.errors import ConfigParseError
from mcpstudio.models import FormatAdapter, MergePolicy, ServerEntry
from mcpstudio.formatters import base


class ClaudeFormatter(FormatAdapter):
    """Formatter for Claude Desktop (claude_desktop_config.json).

    ABOUTME: JSON file, servers under 'mcpServers'
    ABOUTME: Full replace: hand-added servers in that section are dropped on sync
    """

    client_id = "claude"
    merge_policy: MergePolicy = "replace"
    servers_key = "mcpServers"

    def format_servers(self, entries: dict[str, ServerEntry]) -> dict[str, dict[str, Any]]:
        return base.format_servers(entries)

    def merge_mcp_servers(
        self, existing: dict[str, Any], entries: dict[str, ServerEntry]
    ) -> dict[str, Any]:
        """Replace the mcpServers section entirely.

        ABOUTME: Preserves every other top-level Claude setting
        """
        return base.replace_servers(existing, self.servers_key, entries)

    def parse_config(self, text: str) -> dict[str, Any]:
        return base.parse_json(text)

    def stringify_config(self, document: dict[str, Any]) -> str:
        return base.dump_json(document)

    def validate_config(self, text: str) -> bool:
        """Check text is a JSON object with an object-valued mcpServers."""
        try:
            document = self.parse_config(text)
        except ConfigParseError:
            return False
        return base.has_valid_servers(document, self.servers_key)

    def create_default_config(self) -> dict[str, Any]:
        return {"mcpServers": {}}

    def get_file_extension(self) -> str:
        return ".json"
