# filetoken/registry/registry.py
"""
File registry.

Binds a content signature to a display name and an owner, issuing each
registration a dense, monotonically increasing id starting at 1. The
registry maintains three indices that must agree after every operation:

- records by id
- id by signature (a bijection; enforces signature uniqueness)
- ids by owner (creation order, append-only)

Nothing is ever removed or updated once registered.
"""

import json
import logging
import os
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional

from ..errors import (
    DuplicateSignature,
    IdNotFound,
    InvalidId,
    InvalidSignatureLength,
    RegistryStateError,
    SignatureNotFound,
)
from ..events import EventLog, NewFileEvent, Subscriber
from ..hashing import SIGNATURE_LENGTH

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


def check_signature(signature: str) -> None:
    """Reject anything that is not a 64-character string."""
    if not isinstance(signature, str) or len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureLength(repr(signature))


def check_id(file_id: int) -> None:
    """Reject ids outside the positive range. Id 0 is never assigned."""
    if isinstance(file_id, bool) or not isinstance(file_id, int) or file_id < 1:
        raise InvalidId(repr(file_id))


@dataclass(frozen=True)
class FileRecord:
    """
    A registered file.

    Attributes:
        id: Registry-assigned id (dense, starts at 1)
        name: Display name, free text
        signature: 64-character content signature, unique in the registry
        owner: Identity that registered the file
        created_at: Timestamp of registration
    """
    id: int
    name: str
    signature: str
    owner: Hashable
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "signature": self.signature,
            "owner": self.owner,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            signature=data["signature"],
            owner=data["owner"],
            created_at=data.get("created_at", 0.0),
        )


class FileRegistry:
    """
    The file registry.

    Holds its state in memory. When ``registry_dir`` is given the state is
    loaded from, and saved after every registration to:

        registry_dir/
            registry.json     # next_id, records and the event log

    All operations run under a single re-entrant lock: registrations are
    serialized and readers never see a partially applied registration.
    """

    def __init__(self, registry_dir: Path | str = None):
        """
        Initialize the registry.

        Args:
            registry_dir: Directory for persisted state, or None for a
                purely in-memory registry
        """
        self.registry_dir = Path(registry_dir) if registry_dir is not None else None
        self._lock = threading.RLock()
        self._next_id = 1
        self._records: Dict[int, FileRecord] = {}
        self._id_by_signature: Dict[str, int] = {}
        self._ids_by_owner: Dict[Hashable, List[int]] = {}
        self._events = EventLog()
        self._pending = deque()
        self._delivering = False

        if self.registry_dir is not None:
            self.registry_dir.mkdir(parents=True, exist_ok=True)
            self._load()

    def _index_path(self) -> Path:
        return self.registry_dir / "registry.json"

    def _load(self):
        """Load registry from disk and rebuild the indices."""
        index_path = self._index_path()
        if not index_path.exists():
            return

        with open(index_path) as f:
            data = json.load(f)

        for record_data in sorted(data.get("files", []), key=lambda r: r["id"]):
            record = FileRecord.from_dict(record_data)
            if record.id != self._next_id:
                raise RegistryStateError(f"expected id {self._next_id}, found {record.id}")
            if record.signature in self._id_by_signature:
                raise RegistryStateError(f"signature {record.signature} registered twice")
            self._insert(record)

        if data.get("next_id", self._next_id) != self._next_id:
            raise RegistryStateError(
                f"next_id {data['next_id']} does not match {len(self._records)} records"
            )

        events = EventLog.from_list(data.get("events", []))
        if [e.file_id for e in events] != list(range(1, self._next_id)):
            raise RegistryStateError(
                f"event log does not match {len(self._records)} records"
            )
        self._events = events
        logger.debug(f"Loaded {len(self._records)} files from {index_path}")

    def _save(self):
        """Write the registry to disk atomically (temp file + rename)."""
        if self.registry_dir is None:
            return
        index_path = self._index_path()
        tmp_path = index_path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump(self.snapshot(), f, indent=2)
            os.replace(tmp_path, index_path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise

    def _insert(self, record: FileRecord):
        self._records[record.id] = record
        self._id_by_signature[record.signature] = record.id
        self._ids_by_owner.setdefault(record.owner, []).append(record.id)
        self._next_id = record.id + 1

    def _rollback(self, record: FileRecord, event: NewFileEvent):
        self._events.discard_last(event)
        owner_ids = self._ids_by_owner[record.owner]
        owner_ids.pop()
        if not owner_ids:
            del self._ids_by_owner[record.owner]
        del self._id_by_signature[record.signature]
        del self._records[record.id]
        self._next_id = record.id

    def _deliver(self, event: NewFileEvent):
        """
        Notify subscribers in creation order.

        A subscriber may itself register files; those events are queued
        and delivered by the outermost call once the current event has
        reached every subscriber.
        """
        self._pending.append(event)
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._pending:
                self._events.notify(self._pending.popleft())
        finally:
            self._delivering = False

    def create(self, name: str, signature: str, owner: Hashable) -> int:
        """
        Register a file.

        Args:
            name: Display name (not validated)
            signature: 64-character content signature
            owner: Identity of the caller registering the file

        Returns:
            The id assigned to the new record

        Raises:
            InvalidSignatureLength: signature is not 64 characters
            DuplicateSignature: signature is already registered
            TypeError: owner is not hashable
        """
        check_signature(signature)
        hash(owner)

        with self._lock:
            if signature in self._id_by_signature:
                raise DuplicateSignature(signature)

            record = FileRecord(
                id=self._next_id,
                name=name,
                signature=signature,
                owner=owner,
            )
            event = NewFileEvent(
                file_id=record.id,
                name=name,
                signature=signature,
                owner=owner,
            )

            self._insert(record)
            self._events.append(event)
            try:
                self._save()
            except Exception:
                self._rollback(record, event)
                raise

            self._deliver(event)

        logger.info(f"Registered file {record.id} ({signature[:12]}...) for {owner}")
        return record.id

    def lookup_id_by_signature(self, signature: str) -> int:
        """Get the id registered for a signature."""
        check_signature(signature)
        with self._lock:
            file_id = self._id_by_signature.get(signature)
        if file_id is None:
            raise SignatureNotFound(signature)
        return file_id

    def lookup_owner(self, file_id: int) -> Hashable:
        """Get the owner of a file by id."""
        return self.get(file_id).owner

    def lookup_owner_by_signature(self, signature: str) -> Hashable:
        """Get the owner of the file registered with a signature."""
        check_signature(signature)
        with self._lock:
            file_id = self._id_by_signature.get(signature)
            if file_id is None:
                raise SignatureNotFound(signature)
            return self._records[file_id].owner

    def list_ids_by_owner(self, owner: Hashable) -> List[int]:
        """Ids registered by an owner in creation order (empty if none)."""
        with self._lock:
            return list(self._ids_by_owner.get(owner, []))

    def get(self, file_id: int) -> FileRecord:
        """
        Get a full record by id.

        Raises:
            InvalidId: id is not a positive integer
            IdNotFound: id has not been assigned yet
        """
        check_id(file_id)
        with self._lock:
            if file_id >= self._next_id:
                raise IdNotFound(str(file_id))
            return self._records[file_id]

    def find_by_signature(self, signature: str) -> Optional[FileRecord]:
        """Find a record by signature, or None."""
        check_signature(signature)
        with self._lock:
            file_id = self._id_by_signature.get(signature)
            return self._records[file_id] if file_id is not None else None

    def list(self) -> List[FileRecord]:
        """List all records in id order."""
        with self._lock:
            return [self._records[i] for i in range(1, self._next_id)]

    def subscribe(self, callback: Subscriber) -> None:
        """Receive a NewFileEvent after every successful registration."""
        with self._lock:
            self._events.subscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> bool:
        with self._lock:
            return self._events.unsubscribe(callback)

    def events_since(self, file_id: int = 0) -> List[NewFileEvent]:
        """Creation events for ids greater than ``file_id``, in order."""
        with self._lock:
            return self._events.since(file_id)

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def next_id(self) -> int:
        return self._next_id

    def owners(self) -> List[Hashable]:
        """Owners with at least one registration, in first-seen order."""
        with self._lock:
            return list(self._ids_by_owner)

    def snapshot(self) -> Dict[str, Any]:
        """The full registry state as a JSON-ready document."""
        with self._lock:
            return {
                "version": FORMAT_VERSION,
                "next_id": self._next_id,
                "files": [r.to_dict() for r in self.list()],
                "events": self._events.to_list(),
            }

    def __contains__(self, signature: str) -> bool:
        with self._lock:
            return signature in self._id_by_signature

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self.list())
