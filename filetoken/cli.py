#!/usr/bin/env python3
"""
FileToken CLI

Command-line interface for the file registry:
  filetoken hash - Compute a file's content signature
  filetoken register - Register a file under a name and owner
  filetoken id / owner / owner-by-signature / files - Lookups
  filetoken events - List creation events
  filetoken account - Manage local signing accounts
  filetoken serve - Run the HTTP server

Usage:
  filetoken register report.pdf --name "Sales report" --owner alice
  filetoken register --signature <sig> --name "Sales report" --account alice
  filetoken id <sig>
  filetoken files alice
  filetoken --server http://localhost:8545 owner 1
"""

import argparse
import json
import logging
import sys

from .client import RegistryClient
from .config import Settings, load_settings
from .errors import RegistryError
from .hashing import file_signature
from .identity import AccountStore
from .registry import FileRegistry

logger = logging.getLogger(__name__)


def open_backend(args, settings: Settings):
    """A RegistryClient when --server is given, else the local registry."""
    if args.server:
        return RegistryClient(args.server)
    return FileRegistry(settings.registry_dir)


def resolve_owner(args, settings: Settings):
    """
    Owner for a registration: --owner as given, or the --account's
    Account (remote, signs the request) or address (local).
    """
    if args.account:
        account = AccountStore(settings.accounts_dir).get(args.account)
        if account is None:
            raise ValueError(f"Unknown account: {args.account}")
        return account if args.server else account.address
    if args.owner:
        return args.owner
    raise ValueError("One of --owner or --account is required")


def cmd_hash(args, settings: Settings):
    """Print the content signature of a file."""
    print(file_signature(args.file, settings.hash_algorithm))


def cmd_register(args, settings: Settings):
    """Register a file."""
    if args.signature:
        signature = args.signature
    elif args.file:
        signature = file_signature(args.file, settings.hash_algorithm)
    else:
        raise ValueError("Either FILE or --signature is required")

    owner = resolve_owner(args, settings)
    backend = open_backend(args, settings)
    file_id = backend.create(args.name, signature, owner)
    print(f"Registered {args.name!r} as file {file_id}")
    print(f"Signature: {signature}")


def cmd_id(args, settings: Settings):
    print(open_backend(args, settings).lookup_id_by_signature(args.signature))


def cmd_owner(args, settings: Settings):
    print(open_backend(args, settings).lookup_owner(args.id))


def cmd_owner_by_signature(args, settings: Settings):
    print(open_backend(args, settings).lookup_owner_by_signature(args.signature))


def cmd_files(args, settings: Settings):
    ids = open_backend(args, settings).list_ids_by_owner(args.owner)
    if args.json:
        print(json.dumps(ids))
        return
    for file_id in ids:
        print(file_id)


def cmd_events(args, settings: Settings):
    """Print creation notifications as JSON lines."""
    backend = open_backend(args, settings)
    if isinstance(backend, RegistryClient):
        events = backend.events(args.after)
    else:
        events = backend.events_since(args.after)
    for event in events:
        print(json.dumps(event.to_notification()))


def cmd_account_create(args, settings: Settings):
    store = AccountStore(settings.accounts_dir)
    account = store.create(args.username, args.display_name)
    print(f"Created account {account.username}")
    print(f"Address: {account.address}")


def cmd_account_list(args, settings: Settings):
    store = AccountStore(settings.accounts_dir)
    for account in store.list():
        print(f"{account.username}\t{account.address}\t{account.display_name}")


def cmd_serve(args, settings: Settings):
    from .server import serve
    serve(settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filetoken",
        description="FileToken - content signature registry",
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--data-dir", help="Data directory (default: ~/.filetoken)")
    parser.add_argument("--server", help="Registry server URL (default: local registry)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # hash command
    hash_parser = subparsers.add_parser("hash", help="Compute a file's signature")
    hash_parser.add_argument("file", help="File to hash")
    hash_parser.set_defaults(func=cmd_hash)

    # register command
    register_parser = subparsers.add_parser("register", help="Register a file")
    register_parser.add_argument("file", nargs="?", help="File to hash and register")
    register_parser.add_argument("--signature", help="Register a precomputed signature")
    register_parser.add_argument("--name", required=True, help="Display name")
    register_parser.add_argument("--owner", help="Owner identity")
    register_parser.add_argument("--account", help="Local account to register as")
    register_parser.set_defaults(func=cmd_register)

    # lookups
    id_parser = subparsers.add_parser("id", help="Id registered for a signature")
    id_parser.add_argument("signature")
    id_parser.set_defaults(func=cmd_id)

    owner_parser = subparsers.add_parser("owner", help="Owner of a file id")
    owner_parser.add_argument("id", type=int)
    owner_parser.set_defaults(func=cmd_owner)

    owner_sig_parser = subparsers.add_parser("owner-by-signature", help="Owner of a signature")
    owner_sig_parser.add_argument("signature")
    owner_sig_parser.set_defaults(func=cmd_owner_by_signature)

    files_parser = subparsers.add_parser("files", help="Ids registered by an owner")
    files_parser.add_argument("owner")
    files_parser.add_argument("--json", action="store_true", help="Print as a JSON list")
    files_parser.set_defaults(func=cmd_files)

    events_parser = subparsers.add_parser("events", help="List creation events")
    events_parser.add_argument("--after", type=int, default=0,
                               help="Only events for ids greater than this")
    events_parser.set_defaults(func=cmd_events)

    # account commands
    account_parser = subparsers.add_parser("account", help="Manage signing accounts")
    account_sub = account_parser.add_subparsers(dest="account_command")
    account_create = account_sub.add_parser("create", help="Create an account")
    account_create.add_argument("username")
    account_create.add_argument("--display-name")
    account_create.set_defaults(func=cmd_account_create)
    account_list = account_sub.add_parser("list", help="List accounts")
    account_list.set_defaults(func=cmd_account_list)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, help="Port to bind to")
    serve_parser.add_argument("--require-auth", action="store_true", default=None,
                              help="Require signed registration requests")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        settings = load_settings(
            args.config,
            data_dir=args.data_dir,
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
            require_auth=getattr(args, "require_auth", None),
        )

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else settings.log_level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

        args.func(args, settings)
    except RegistryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ValueError, FileNotFoundError, ConnectionError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
