# src/crimebook_service/store/crime_book.py

"""
In-memory crime book.

Entries live in a list of slots, and an entry's ID is the index of its slot.
Deleting an entry empties its slot instead of removing it, so the IDs of
the other entries never change and a deleted ID is never handed out again
(until the whole book is cleared).
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from src.crimebook_service.errors import EntryNotFound, UnsupportedQuery
from src.crimebook_service.models import CrimeDataEntry, DATA_FIELDS

logger = logging.getLogger(__name__)

# Fields that can be used in a filter query
FILTERABLE_FIELDS = ("IncidentNumber", "OffenseCode", "District", "OffenseCodeGroup")


@dataclass(frozen=True)
class FieldFilter:
    """Match entries whose `field` is exactly `value`."""

    field: str
    value: str

    def __post_init__(self):
        if self.field not in FILTERABLE_FIELDS:
            raise UnsupportedQuery(f"cannot filter on field '{self.field}'")

    def matches(self, entry: CrimeDataEntry) -> bool:
        return entry.get_field(self.field) == self.value


class CrimeBook:
    """Thread-safe in-memory store of crime data entries."""

    def __init__(self) -> None:
        self._entries: List[Optional[CrimeDataEntry]] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of slots, deleted ones included."""
        with self._lock:
            return len(self._entries)

    def add_entry(self, values: Dict[str, str]) -> CrimeDataEntry:
        """
        Append a new entry built from `values` (keyed by JSON field name).
        Missing fields are left empty; an ID in `values` is ignored.
        """
        data = {attr: values.get(json_name, "") for attr, json_name in DATA_FIELDS}
        with self._lock:
            entry = CrimeDataEntry(ID=len(self._entries), **data)
            self._entries.append(entry)
        return entry

    def get_all_entries(self) -> List[CrimeDataEntry]:
        """Every entry that has not been deleted, oldest first."""
        with self._lock:
            return [entry for entry in self._entries if entry is not None]

    def count_entries(self) -> int:
        with self._lock:
            return sum(1 for entry in self._entries if entry is not None)

    def get_entry(self, entry_id: int) -> CrimeDataEntry:
        """
        Raises:
            EntryNotFound: if the ID was never assigned or the entry was deleted.
        """
        with self._lock:
            self._check_range(entry_id)
            entry = self._entries[entry_id]
        if entry is None:
            raise EntryNotFound(f"entry {entry_id} was deleted")
        return entry

    def remove_entry(self, entry_id: int) -> None:
        """Empty the slot for `entry_id`. Removing a deleted entry again is allowed."""
        with self._lock:
            self._check_range(entry_id)
            self._entries[entry_id] = None
        logger.info("Removed crime data entry %s", entry_id)

    def remove_all_entries(self) -> None:
        """Clear the book. The next entry added gets ID 0."""
        with self._lock:
            removed = len(self._entries)
            self._entries = []
        logger.info("Removed all %s crime data entries", removed)

    def filter_entries(self, criteria: FieldFilter) -> List[CrimeDataEntry]:
        with self._lock:
            return [
                entry for entry in self._entries
                if entry is not None and criteria.matches(entry)
            ]

    def _check_range(self, entry_id: int) -> None:
        # Caller holds the lock
        if entry_id < 0 or entry_id >= len(self._entries):
            raise EntryNotFound(f"entry {entry_id} is out of range")
