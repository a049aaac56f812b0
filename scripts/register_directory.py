#!/usr/bin/env python3
"""
Register every file in a directory with a registry server.

Files are hashed in sorted order so ids are assigned deterministically.
Files whose content is already registered are reported and skipped.

Usage:
    register_directory.py <dir> --server http://localhost:8545 --owner alice
    register_directory.py <dir> --server http://localhost:8545 --account alice
"""

import argparse
import sys
from pathlib import Path

from filetoken import DuplicateSignature, file_signature, load_settings
from filetoken.client import RegistryClient
from filetoken.identity import AccountStore


def iter_files(root: Path):
    """All regular files under root, sorted by relative path."""
    return sorted(p for p in root.rglob("*") if p.is_file())


def main():
    parser = argparse.ArgumentParser(description="Register a directory of files")
    parser.add_argument("directory", help="Directory to register")
    parser.add_argument("--server", default="http://localhost:8545", help="Registry server URL")
    parser.add_argument("--owner", help="Owner identity (open servers)")
    parser.add_argument("--account", help="Local account to sign with")
    parser.add_argument("--config", help="YAML config file")
    args = parser.parse_args()

    settings = load_settings(args.config)

    if args.account:
        owner = AccountStore(settings.accounts_dir).get(args.account)
        if owner is None:
            print(f"Unknown account: {args.account}", file=sys.stderr)
            sys.exit(1)
    elif args.owner:
        owner = args.owner
    else:
        print("One of --owner or --account is required", file=sys.stderr)
        sys.exit(1)

    root = Path(args.directory)
    client = RegistryClient(args.server)

    registered = 0
    for path in iter_files(root):
        signature = file_signature(path, settings.hash_algorithm)
        name = str(path.relative_to(root))
        try:
            file_id = client.create(name, signature, owner)
        except DuplicateSignature:
            existing = client.lookup_id_by_signature(signature)
            print(f"  {name}: already registered as {existing}")
            continue
        registered += 1
        print(f"  {name}: {file_id}")

    print(f"Registered {registered} files from {root}")


if __name__ == "__main__":
    main()
