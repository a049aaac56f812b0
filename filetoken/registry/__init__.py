# filetoken/registry/__init__.py
"""
FileToken Registry.

The registry binds immutable content signatures to a name and an owner,
assigning each registration the next id in a dense sequence from 1.

Example:
    registry = FileRegistry("/path/to/registry")
    file_id = registry.create("Sales report", file_signature("report.pdf"), "alice")

    registry.lookup_id_by_signature(signature)   # -> file_id
    registry.list_ids_by_owner("alice")          # -> [file_id]
"""

from .registry import FileRegistry, FileRecord, check_id, check_signature

__all__ = ["FileRegistry", "FileRecord", "check_id", "check_signature"]
