# CLI interface for mcpstudio
import argparse
import logging
import sys

from mcpstudio import __version__
from mcpstudio.app import Studio
from mcpstudio.detection import KNOWN_CLIENTS
from mcpstudio.models import ServerEntry
from mcpstudio.utils import validate_server

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, DEBUG with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_env_pairs(value: str | None) -> dict[str, str]:
    """Parse comma-separated KEY=VALUE pairs.

    ABOUTME: Pairs without '=' are ignored
    """
    env: dict[str, str] = {}
    if not value:
        return env
    for pair in value.split(","):
        if "=" in pair:
            key, val = pair.split("=", 1)
            env[key.strip()] = val.strip()
    return env


def print_sync_results(results: dict[str, bool | None]) -> int:
    """Print per-client sync results and return the matching exit code."""
    attempted = {client_id: ok for client_id, ok in results.items() if ok is not None}
    for client_id, ok in results.items():
        if ok is None:
            print(f"  {client_id} - skipped (disabled or no auto-sync)")
        elif ok:
            print(f"  {client_id} - synced")
        else:
            print(f"  {client_id} - failed")

    failed = [client_id for client_id, ok in attempted.items() if not ok]
    print()
    print(f"Sync complete: {len(attempted) - len(failed)}/{len(attempted)} clients updated")
    return EXIT_PARTIAL if failed else EXIT_SUCCESS


def cmd_list(studio: Studio, args: argparse.Namespace) -> int:
    """Execute list command.

    ABOUTME: Shows active and inactive servers from the registry
    """
    document = studio.registry.document
    print(f"MCP servers in {studio.registry.path}:")
    print()

    for section, entries in (("active", document.active), ("inactive", document.inactive)):
        for name, entry in entries.items():
            print(f"  {name}" + (" (inactive)" if section == "inactive" else ""))
            print(f"    command: {entry.command}")
            if entry.args:
                print(f"    args: {' '.join(entry.args)}")
            if entry.env:
                print(f"    env: {', '.join(f'{k}={v}' for k, v in entry.env.items())}")
            print()

    print(f"Total: {len(document.active)} active, {len(document.inactive)} inactive")
    return EXIT_SUCCESS


def cmd_add(studio: Studio, args: argparse.Namespace) -> int:
    """Execute add command.

    ABOUTME: Adds or replaces a server, then saves (which triggers auto-sync)
    """
    entry = ServerEntry(
        name=args.name,
        command=args.command,
        args=args.args.split(",") if args.args else [],
        env=parse_env_pairs(args.env),
    )

    has_errors = False
    for error in validate_server(entry):
        if error.severity == "error":
            print(f"  Server '{args.name}': {error.message}")
            has_errors = True
        else:
            print(f"  Warning: {error.message}")
    if has_errors:
        return EXIT_CONFIG_ERROR

    if studio.registry.get_entry(args.name):
        print(f"Warning: Server '{args.name}' already exists. It will be replaced.")

    studio.registry.add_entry(args.name, entry, "inactive" if args.inactive else "active")
    result = studio.registry.save()
    if not result:
        print(f"Error: could not save registry: {result.error}")
        return EXIT_FATAL

    print(f"Server '{args.name}' added to {studio.registry.path}")
    if studio.last_sync_results:
        return print_sync_results(studio.last_sync_results)
    return EXIT_SUCCESS


def cmd_remove(studio: Studio, args: argparse.Namespace) -> int:
    """Execute remove command."""
    found = studio.registry.get_entry(args.name)
    if found is None:
        print(f"Server '{args.name}' not found in registry.")
        return EXIT_CONFIG_ERROR

    _, section = found
    studio.registry.delete_entry(args.name, section)
    result = studio.registry.save()
    if not result:
        print(f"Error: could not save registry: {result.error}")
        return EXIT_FATAL

    print(f"Server '{args.name}' removed.")
    if studio.last_sync_results:
        return print_sync_results(studio.last_sync_results)
    return EXIT_SUCCESS


def cmd_toggle(studio: Studio, args: argparse.Namespace) -> int:
    """Execute enable/disable commands (server state, not client state)."""
    target = "active" if args.cmd == "enable" else "inactive"
    if not studio.registry.move_entry(args.name, target):
        found = studio.registry.get_entry(args.name)
        if found is None:
            print(f"Server '{args.name}' not found in registry.")
            return EXIT_CONFIG_ERROR
        print(f"Server '{args.name}' is already {target}.")
        return EXIT_SUCCESS

    result = studio.registry.save()
    if not result:
        print(f"Error: could not save registry: {result.error}")
        return EXIT_FATAL

    print(f"Server '{args.name}' is now {target}.")
    if studio.last_sync_results:
        return print_sync_results(studio.last_sync_results)
    return EXIT_SUCCESS


def cmd_import(studio: Studio, args: argparse.Namespace) -> int:
    """Execute import command.

    ABOUTME: Copies servers mcpstudio did not write from a client file into the registry
    """
    section = "inactive" if args.inactive else "active"
    try:
        imported = studio.import_client(args.client, section, overwrite=args.overwrite)
    except (OSError, ValueError) as e:
        # ConfigParseError and UnicodeDecodeError are ValueErrors
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    if not imported:
        print(f"No new servers to import from {args.client}.")
        return EXIT_SUCCESS

    print(f"Imported {len(imported)} servers from {args.client}:")
    for name in imported:
        print(f"  - {name}")
    if studio.last_sync_results:
        print()
        return print_sync_results(studio.last_sync_results)
    return EXIT_SUCCESS


def cmd_sync(studio: Studio, args: argparse.Namespace) -> int:
    """Execute sync command.

    ABOUTME: Syncs one client if named, otherwise every auto-sync client
    """
    if args.client:
        if studio.clients.get(args.client) is None:
            print(f"Unknown client: {args.client}")
            return EXIT_CONFIG_ERROR
        ok = studio.sync_one(args.client)
        print(f"  {args.client} - {'synced' if ok else 'failed'}")
        return EXIT_SUCCESS if ok else EXIT_PARTIAL

    print("Syncing to clients...")
    return print_sync_results(studio.sync_all())


def cmd_clients(studio: Studio, args: argparse.Namespace) -> int:
    """Execute clients command: show every registration."""
    for client_id, registration in studio.clients.all().items():
        known = KNOWN_CLIENTS.get(client_id)
        print(f"  {client_id}" + (f" ({known.name})" if known else ""))
        print(f"    enabled: {registration.enabled}")
        print(f"    auto-sync: {registration.auto_sync}")
        print(f"    path: {registration.effective_path or '-'}")
        print(f"    last sync: {registration.last_sync or 'never'}")
        restart_command = studio.clients.get_restart_command(client_id)
        if restart_command:
            print(f"    restart: {restart_command}")
        print()
    return EXIT_SUCCESS


def cmd_client(studio: Studio, args: argparse.Namespace) -> int:
    """Execute client command: change one client's settings."""
    client_id = args.client
    if studio.clients.get(client_id) is None:
        print(f"Unknown client: {client_id}")
        return EXIT_CONFIG_ERROR

    if args.enabled is not None:
        studio.clients.set_enabled(client_id, args.enabled)
    if args.auto_sync is not None and not studio.clients.set_auto_sync(client_id, args.auto_sync):
        print(f"Cannot change auto-sync for {client_id} (is the client enabled?)")
        return EXIT_CONFIG_ERROR
    if args.path is not None:
        if args.path:
            result = studio.sync.test_path(client_id, args.path)
            if not result.success:
                print(f"Warning: {args.path}: {result.message}")
        studio.clients.set_custom_path(client_id, args.path)
    if args.restart_command is not None:
        studio.clients.set_restart_command(client_id, args.restart_command)

    registration = studio.clients.get(client_id)
    print(
        f"{client_id}: enabled={registration.enabled} auto-sync={registration.auto_sync} "
        f"path={registration.effective_path or '-'}"
    )
    return EXIT_SUCCESS


def cmd_test_path(studio: Studio, args: argparse.Namespace) -> int:
    result = studio.sync.test_path(args.client, args.path)
    print(result.message)
    return EXIT_SUCCESS if result.success else EXIT_CONFIG_ERROR


def cmd_backups(studio: Studio, args: argparse.Namespace) -> int:
    """Execute backups command: list a client's backups, newest first."""
    backups = studio.backups.list_backups(args.client)
    if not backups:
        print(f"No backups for {args.client}.")
        return EXIT_SUCCESS

    for info in backups:
        kind = "manual" if info.manual else "auto"
        print(f"  {info.name}  {info.formatted_date}  {info.formatted_size}  [{kind}]")
    return EXIT_SUCCESS


def cmd_backup(studio: Studio, args: argparse.Namespace) -> int:
    """Execute backup command: create a manual backup."""
    try:
        backup_path = studio.manual_backup(args.client)
    except OSError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    print(f"Created {backup_path}")
    return EXIT_SUCCESS


def cmd_restore(studio: Studio, args: argparse.Namespace) -> int:
    if studio.restore(args.client, args.backup):
        print(f"Restored {args.backup} for {args.client}")
        return EXIT_SUCCESS
    print(f"Failed to restore {args.backup} for {args.client}")
    return EXIT_CONFIG_ERROR


def cmd_delete_backup(studio: Studio, args: argparse.Namespace) -> int:
    if studio.backups.delete_backup(args.client, args.backup):
        print(f"Deleted {args.backup}")
        return EXIT_SUCCESS
    print(f"Failed to delete {args.backup}")
    return EXIT_CONFIG_ERROR


COMMANDS = {
    "list": cmd_list,
    "add": cmd_add,
    "remove": cmd_remove,
    "enable": cmd_toggle,
    "disable": cmd_toggle,
    "import": cmd_import,
    "sync": cmd_sync,
    "clients": cmd_clients,
    "client": cmd_client,
    "test-path": cmd_test_path,
    "backups": cmd_backups,
    "backup": cmd_backup,
    "restore": cmd_restore,
    "delete-backup": cmd_delete_backup,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcpstudio",
        description="Manage MCP servers and sync them into client config files"
    )
    parser.add_argument("--version", "-V", action="version", version=f"mcpstudio v{__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="cmd", help="Available commands")

    subparsers.add_parser("list", help="List servers in the registry")

    add_parser = subparsers.add_parser("add", help="Add or replace a server")
    add_parser.add_argument("name", help="Name of the MCP server")
    add_parser.add_argument("--command", required=True, help="Command to run")
    add_parser.add_argument("--args", help="Comma-separated arguments")
    add_parser.add_argument("--env", help="Comma-separated KEY=VALUE environment variables")
    add_parser.add_argument("--inactive", action="store_true", help="Add as inactive")

    for name, help_text in (
        ("remove", "Remove a server from the registry"),
        ("enable", "Move a server to the active section"),
        ("disable", "Move a server to the inactive section"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("name", help="Name of the MCP server")

    import_parser = subparsers.add_parser(
        "import", help="Copy servers from a client config into the registry"
    )
    import_parser.add_argument("client", help="Client id")
    import_parser.add_argument("--inactive", action="store_true", help="Import as inactive")
    import_parser.add_argument(
        "--overwrite", action="store_true", help="Replace registry servers with the same name"
    )

    sync_parser = subparsers.add_parser("sync", help="Sync active servers to clients")
    sync_parser.add_argument("client", nargs="?", help="Sync only this client")

    subparsers.add_parser("clients", help="Show client registrations")

    client_parser = subparsers.add_parser("client", help="Change a client's settings")
    client_parser.add_argument("client", help="Client id")
    client_parser.add_argument("--enable", dest="enabled", action="store_const", const=True)
    client_parser.add_argument("--disable", dest="enabled", action="store_const", const=False)
    client_parser.add_argument("--auto-sync", dest="auto_sync", action="store_const", const=True)
    client_parser.add_argument(
        "--no-auto-sync", dest="auto_sync", action="store_const", const=False
    )
    client_parser.add_argument("--path", help="Custom config file path ('' to clear)")
    client_parser.add_argument("--restart-command", help="Command used to restart the client")

    test_parser = subparsers.add_parser("test-path", help="Check a client config path")
    test_parser.add_argument("client", help="Client id")
    test_parser.add_argument("path", help="Path to test")

    backups_parser = subparsers.add_parser("backups", help="List a client's backups")
    backups_parser.add_argument("client", help="Client id")

    backup_parser = subparsers.add_parser("backup", help="Create a manual backup")
    backup_parser.add_argument("client", help="Client id")

    for name, help_text in (
        ("restore", "Restore a backup over the client's config"),
        ("delete-backup", "Delete a backup"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("client", help="Client id")
        sub.add_argument("backup", help="Backup file name (see 'backups')")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    handler = COMMANDS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return EXIT_SUCCESS

    try:
        studio = Studio()
        studio.load()
        return handler(studio, args)
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
