# app/services/change_feed.py
"""
In-process change feed.

Subscribers register a callback for a table plus an equality filter on
row fields (e.g. {"team_id": 3}). Services publish after a successful
commit. Events only say *what* changed; subscribers are expected to
re-fetch a fresh snapshot rather than apply the event as a delta.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass
class ChangeEvent:
    table: str
    event: str
    row: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"table": self.table, "event": self.event, "id": self.row.get("id")}


@dataclass
class _Subscription:
    table: str
    filter: Dict[str, Any]
    on_change: Callable[[ChangeEvent], None]

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        return all(event.row.get(key) == value for key, value in self.filter.items())


class ChangeFeed:
    def __init__(self):
        self._subscriptions: Dict[int, _Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        table: str,
        on_change: Callable[[ChangeEvent], None],
        filter: Optional[Dict[str, Any]] = None,
    ) -> int:
        handle = next(self._ids)
        self._subscriptions[handle] = _Subscription(table, dict(filter or {}), on_change)
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subscriptions.pop(handle, None)

    def publish(self, table: str, event: str, row: Dict[str, Any]) -> int:
        change = ChangeEvent(table=table, event=event, row=row)
        delivered = 0
        for handle, sub in list(self._subscriptions.items()):
            if not sub.matches(change):
                continue
            try:
                sub.on_change(change)
                delivered += 1
            except Exception:
                # One broken subscriber must not block the others
                logger.exception("Change feed subscriber %s failed", handle)
        return delivered

    def __len__(self) -> int:
        return len(self._subscriptions)


change_feed = ChangeFeed()


def publish_row(table: str, event: str, row) -> int:
    """Publish an ORM row, exposing its id and team_id for filtering."""
    return change_feed.publish(
        table,
        event,
        {"id": getattr(row, "id", None), "team_id": getattr(row, "team_id", None)},
    )
