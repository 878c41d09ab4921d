"""Thread-safe grouping of accepted records by identifier."""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterator, List, Tuple

from models.records import LocationRecord

Groups = Dict[int, List[LocationRecord]]


class Aggregator:
    """Keyed collection mapping record id to its group of records.

    ``record`` may be called from any number of worker threads. Only the
    dictionary insert/append runs under the lock; callers parse beforehand.
    After :meth:`freeze` the collection is read-only for the remaining phases.
    """

    def __init__(self) -> None:
        self._groups: Groups = {}
        self._lock = Lock()
        self._frozen = False

    def record(self, record: LocationRecord) -> None:
        with self._lock:
            if self._frozen:
                raise RuntimeError("Aggregator is frozen; no further records may be added.")
            group = self._groups.get(record.id)
            if group is None:
                self._groups[record.id] = [record]
            else:
                group.append(record)

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def groups(self) -> Iterator[Tuple[int, List[LocationRecord]]]:
        """Iterate over ``(id, records)`` pairs. Only valid once frozen."""
        if not self._frozen:
            raise RuntimeError("Groups can only be read after the aggregator is frozen.")
        return iter(self._groups.items())

    def drain(self) -> Groups:
        """Hand every group over to the caller and empty the collection."""
        with self._lock:
            if not self._frozen:
                raise RuntimeError("Aggregator must be frozen before it is drained.")
            groups, self._groups = self._groups, {}
        return groups

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)
