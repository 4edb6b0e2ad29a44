"""
Append-only log store backing the sync log viewer.
"""

from typing import Callable, Iterable, Iterator, List, Optional

from veilsync.models import LogEntry, LogStatus

Listener = Callable[[List[LogEntry]], None]


class LogStore:
    """
    Ordered sequence of LogEntry objects.

    Insertion order is the only ordering guarantee. Entries are never
    edited in place: a status change swaps in a copy at the same position.
    Every mutation notifies subscribers with a snapshot of the contents.
    """

    def __init__(self):
        self._entries: List[LogEntry] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        self._notify()
        return entry

    def add(self, message: str, status: LogStatus) -> LogEntry:
        """Shorthand for appending a fresh entry."""
        return self.append(LogEntry(message=message, status=status))

    def replace_all(self, entries: Iterable[LogEntry]) -> None:
        self._entries = list(entries)
        self._notify()

    def clear(self) -> None:
        self.replace_all([])

    def update_status(self, entry_id: str, status: LogStatus) -> Optional[LogEntry]:
        """Replace the entry with ``entry_id`` by a copy bearing ``status``."""
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                updated = entry.with_status(status)
                self._entries[index] = updated
                self._notify()
                return updated
        return None

    def snapshot(self) -> List[LogEntry]:
        return list(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._entries)
