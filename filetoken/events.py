# filetoken/events.py
"""
Creation notifications for the file registry.

Every successful registration produces exactly one NewFileEvent. Events are
kept in an append-only log for auditability and pushed to subscribers
(indexers, audit sinks) in creation order.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List

logger = logging.getLogger(__name__)

Subscriber = Callable[["NewFileEvent"], None]


def _generate_id() -> str:
    """Generate unique event ID."""
    return str(uuid.uuid4())


def _now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass(frozen=True)
class NewFileEvent:
    """
    Notification emitted when a file is registered.

    Attributes:
        file_id: Id assigned to the new record
        name: Display name given at registration
        signature: 64-character content signature
        owner: Identity that registered the file
        event_id: Unique identifier of this notification
        published: ISO timestamp
    """
    file_id: int
    name: str
    signature: str
    owner: Hashable
    event_id: str = field(default_factory=_generate_id)
    published: str = field(default_factory=_now)

    def to_notification(self) -> Dict[str, Any]:
        """The public payload: {id, name, signature}."""
        return {
            "id": self.file_id,
            "name": self.name,
            "signature": self.signature,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "event_id": self.event_id,
            "file_id": self.file_id,
            "name": self.name,
            "signature": self.signature,
            "owner": self.owner,
            "published": self.published,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NewFileEvent":
        """Deserialize from storage."""
        return cls(
            file_id=data["file_id"],
            name=data["name"],
            signature=data["signature"],
            owner=data["owner"],
            event_id=data.get("event_id") or _generate_id(),
            published=data.get("published", ""),
        )


class EventLog:
    """
    Append-only log of creation events with push delivery.

    The log does no locking of its own; the owning registry appends and
    notifies while holding its mutation lock, which keeps delivery in
    creation order.
    """

    def __init__(self, events: List[NewFileEvent] = None):
        self._events: List[NewFileEvent] = list(events or [])
        self._subscribers: List[Subscriber] = []

    def append(self, event: NewFileEvent) -> None:
        """Add an event to the log."""
        self._events.append(event)

    def discard_last(self, event: NewFileEvent) -> None:
        """Undo the most recent append (used when a registration rolls back)."""
        if not self._events or self._events[-1] is not event:
            raise ValueError("Only the most recent event can be discarded")
        self._events.pop()

    def list(self) -> List[NewFileEvent]:
        """List all events in creation order."""
        return list(self._events)

    def since(self, file_id: int) -> List[NewFileEvent]:
        """Events for records created after ``file_id``."""
        return [e for e in self._events if e.file_id > file_id]

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback invoked with each new event."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> bool:
        if callback not in self._subscribers:
            return False
        self._subscribers.remove(callback)
        return True

    def notify(self, event: NewFileEvent) -> None:
        """
        Deliver an event to every subscriber.

        The registration the event describes is already committed, so a
        failing subscriber is logged and the remaining ones still run.
        """
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed on file {event.file_id}")

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._events]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "EventLog":
        return cls([NewFileEvent.from_dict(e) for e in data])

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))
