# Formatter base utilities
import copy
import json
import logging
from typing import Any

from mcpstudio.errors import ConfigParseError
from mcpstudio.models import ClientServerEntry, ServerEntry

logger = logging.getLogger(__name__)


def clean_server_config(entry: ServerEntry) -> dict[str, Any]:
    """Reduce a canonical entry to what a client file needs.

    ABOUTME: Keeps command, args and non-empty env, drops metadata and extras
    ABOUTME: Stamps managed=True so a later merge can recognise it
    """
    return ClientServerEntry(
        command=entry.command,
        args=list(entry.args),
        env=dict(entry.env),
        managed=True,
    ).to_dict()


def format_servers(entries: dict[str, ServerEntry]) -> dict[str, dict[str, Any]]:
    """Map every canonical entry through clean_server_config."""
    return {name: clean_server_config(entry) for name, entry in entries.items()}


def is_managed(raw_entry: Any) -> bool:
    """True if a client-file entry was written by mcpstudio."""
    return ClientServerEntry.from_dict(raw_entry).managed


def extract_servers(document: dict[str, Any], servers_key: str) -> dict[str, ServerEntry]:
    """Read the foreign entries of a client document as canonical entries.

    ABOUTME: Entries mcpstudio wrote (managed: true) are skipped
    ABOUTME: Malformed entries are logged and skipped

    Examples:
        >>> extract_servers({"mcpServers": {"legacy": {"command": "x"}}}, "mcpServers")
        {'legacy': ServerEntry(name='legacy', command='x', args=[], env={}, metadata={}, extras={})}
    """
    servers = document.get(servers_key)
    if not isinstance(servers, dict):
        return {}

    entries: dict[str, ServerEntry] = {}
    for name, raw in servers.items():
        if is_managed(raw):
            continue
        if isinstance(raw, dict):
            raw = {key: value for key, value in raw.items() if key != "managed"}
        try:
            entries[str(name)] = ServerEntry.from_dict(str(name), raw)
        except ValueError as e:
            logger.warning(f"Skipping malformed server '{name}': {e}")
    return entries


def replace_servers(
    existing: dict[str, Any],
    servers_key: str,
    entries: dict[str, ServerEntry],
) -> dict[str, Any]:
    """Full-replace merge policy.

    ABOUTME: The whole server section becomes exactly the canonical entries
    ABOUTME: Other top-level keys are preserved, inputs are not mutated
    """
    document = copy.deepcopy(existing) if isinstance(existing, dict) else {}
    document[servers_key] = format_servers(entries)
    return document


def merge_selective(
    existing: dict[str, Any],
    servers_key: str,
    entries: dict[str, ServerEntry],
) -> dict[str, Any]:
    """Selective merge policy.

    ABOUTME: Keeps foreign (unmanaged) entries verbatim, drops managed ones
    ABOUTME: Canonical entries win on name clashes and come after foreign ones,
    ABOUTME: so repeated merges with the same input are byte-identical

    Examples:
        >>> existing = {"mcpServers": {"legacy": {"command": "x"}}}
        >>> search = ServerEntry(name="search", command="npx", args=["-y", "search-tool"])
        >>> merge_selective(existing, "mcpServers", {"search": search})["mcpServers"]
        {'legacy': {'command': 'x'}, 'search': {'command': 'npx', 'args': ['-y', 'search-tool'], 'managed': True}}
    """
    document = copy.deepcopy(existing) if isinstance(existing, dict) else {}
    current = document.get(servers_key)
    if not isinstance(current, dict):
        current = {}

    formatted = format_servers(entries)
    merged: dict[str, Any] = {
        name: server
        for name, server in current.items()
        if not is_managed(server) and name not in formatted
    }
    merged.update(formatted)

    document[servers_key] = merged
    return document


def parse_json(text: str) -> dict[str, Any]:
    """Parse JSON client config text.

    ABOUTME: Blank text parses to an empty document
    ABOUTME: Raises ConfigParseError for invalid JSON or a non-object root
    """
    if not text or not text.strip():
        return {}

    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Invalid JSON format: {e}") from e

    if not isinstance(result, dict):
        raise ConfigParseError("Config root must be an object")
    return result


def dump_json(document: dict[str, Any]) -> str:
    """Serialize a document as 2-space indented JSON with trailing newline."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def has_valid_servers(document: dict[str, Any], servers_key: str) -> bool:
    """The server section, when present, must be a mapping."""
    servers = document.get(servers_key)
    return servers is None or isinstance(servers, dict)
