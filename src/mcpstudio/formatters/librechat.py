# LibreChat config formatter
import json
import logging
from typing import Any

import yaml

from mcpstudio.errors import ConfigParseError
from mcpstudio.models import FormatAdapter, MergePolicy, ServerEntry
from mcpstudio.formatters import base

logger = logging.getLogger(__name__)


class LibreChatFormatter(FormatAdapter):
    """Formatter for LibreChat (librechat.yaml).

    ABOUTME: YAML file with JSON fallback, servers under 'mcpServers'
    ABOUTME: Selective merge: servers without 'managed: true' are left alone
    """

    client_id = "librechat"
    merge_policy: MergePolicy = "selective"
    servers_key = "mcpServers"

    def format_servers(self, entries: dict[str, ServerEntry]) -> dict[str, dict[str, Any]]:
        return base.format_servers(entries)

    def merge_mcp_servers(
        self, existing: dict[str, Any], entries: dict[str, ServerEntry]
    ) -> dict[str, Any]:
        return base.merge_selective(existing, self.servers_key, entries)

    def parse_config(self, text: str) -> dict[str, Any]:
        """Parse YAML, retrying as strict JSON before giving up.

        ABOUTME: Blank or null documents parse to {}

        Raises:
            ConfigParseError: If neither YAML nor JSON yields a mapping
        """
        if not text or not text.strip():
            return {}

        try:
            result = yaml.safe_load(text)
        except yaml.YAMLError as yaml_error:
            try:
                result = json.loads(text)
            except json.JSONDecodeError:
                raise ConfigParseError(f"Invalid YAML format: {yaml_error}") from yaml_error

        if result is None:
            return {}
        if not isinstance(result, dict):
            raise ConfigParseError("Config root must be a mapping")
        return result

    def stringify_config(self, document: dict[str, Any]) -> str:
        """Dump YAML keeping key order and without line wrapping.

        ABOUTME: Falls back to JSON text (still valid YAML) if a value can't be represented
        """
        try:
            return yaml.safe_dump(
                document,
                indent=2,
                width=float("inf"),
                sort_keys=False,
                default_flow_style=False,
                allow_unicode=True,
            )
        except yaml.YAMLError as e:
            logger.warning(f"YAML serialization failed, writing JSON instead: {e}")
            return json.dumps(document, indent=2, default=str) + "\n"

    def validate_config(self, text: str) -> bool:
        try:
            document = self.parse_config(text)
        except ConfigParseError:
            return False
        return base.has_valid_servers(document, self.servers_key)

    def create_default_config(self) -> dict[str, Any]:
        return {
            "version": "1.0.0",
            "cache": True,
            "mcpServers": {},
        }

    def get_file_extension(self) -> str:
        return ".yaml"
