# Codex CLI config formatter
import json
import logging
from typing import Any

import tomli
import tomli_w

from mcpstudio.errors import ConfigParseError
from mcpstudio.models import FormatAdapter, MergePolicy, ServerEntry
from mcpstudio.formatters import base

logger = logging.getLogger(__name__)


class CodexFormatter(FormatAdapter):
    """Formatter for Codex CLI (~/.codex/config.toml).

    ABOUTME: TOML file, uses snake_case mcp_servers key (not mcpServers)
    ABOUTME: Selective merge, like LibreChat
    """

    client_id = "codex"
    merge_policy: MergePolicy = "selective"
    servers_key = "mcp_servers"

    def format_servers(self, entries: dict[str, ServerEntry]) -> dict[str, dict[str, Any]]:
        return base.format_servers(entries)

    def merge_mcp_servers(
        self, existing: dict[str, Any], entries: dict[str, ServerEntry]
    ) -> dict[str, Any]:
        return base.merge_selective(existing, self.servers_key, entries)

    def parse_config(self, text: str) -> dict[str, Any]:
        if not text or not text.strip():
            return {}

        try:
            return tomli.loads(text)
        except tomli.TOMLDecodeError as e:
            raise ConfigParseError(f"Invalid TOML format: {e}") from e

    def stringify_config(self, document: dict[str, Any]) -> str:
        """Dump TOML via tomli_w.

        ABOUTME: TOML has no null, a document holding None can't be written;
        ABOUTME: JSON is returned instead and fails validation, aborting the sync
        """
        try:
            return tomli_w.dumps(document)
        except (TypeError, ValueError) as e:
            logger.warning(f"TOML serialization failed, writing JSON instead: {e}")
            return json.dumps(document, indent=2, default=str) + "\n"

    def validate_config(self, text: str) -> bool:
        try:
            document = self.parse_config(text)
        except ConfigParseError:
            return False
        return base.has_valid_servers(document, self.servers_key)

    def create_default_config(self) -> dict[str, Any]:
        return {"mcp_servers": {}}

    def get_file_extension(self) -> str:
        return ".toml"
