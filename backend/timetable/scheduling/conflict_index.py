from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Literal

from timetable.core.exceptions import ConflictError
from timetable.scheduling.domain import ScheduleEntry, Slot

logger = logging.getLogger(__name__)

ResourceKind = Literal["teacher", "class_group"]
CellKey = tuple[str, str, str]


class ConflictIndex:
    """In-memory occupancy of teachers and class groups per weekday.

    Each (resource, day) cell keeps the reserved ``[start, end)`` intervals, so
    overlaps are found whether or not the entries line up with the grid. The
    index is a projection of a snapshot and is rebuilt for every operation.
    """

    def __init__(self) -> None:
        self._cells: dict[CellKey, list[tuple[int, int, str]]] = defaultdict(list)
        self._reserved: dict[str, ScheduleEntry] = {}

    @classmethod
    def from_entries(cls, entries: Iterable[ScheduleEntry]) -> "ConflictIndex":
        index = cls()
        for entry in entries:
            for kind, resource_id in index._resources(entry):
                blocker = index._blocker(kind, resource_id, entry.day, entry.start_minutes, entry.end_minutes)
                if blocker is not None:
                    logger.warning(
                        "Persisted entry %s overlaps entry %s for %s %s on %s",
                        entry.id,
                        blocker,
                        kind,
                        resource_id,
                        entry.day,
                    )
            index._occupy(entry)
        return index

    def __len__(self) -> int:
        return len(self._reserved)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._reserved

    @staticmethod
    def _resources(entry: ScheduleEntry) -> tuple[tuple[ResourceKind, str], ...]:
        return (("teacher", entry.teacher_id), ("class_group", entry.class_group_id))

    def _blocker(self, kind: ResourceKind, resource_id: str, day: str, start: int, end: int) -> str | None:
        for other_start, other_end, entry_id in self._cells.get((kind, resource_id, day), ()):
            if other_start < end and start < other_end:
                return entry_id
        return None

    def teacher_blocker(self, teacher_id: str, day: str, start: int, end: int) -> str | None:
        return self._blocker("teacher", teacher_id, day, start, end)

    def class_group_blocker(self, class_group_id: str, day: str, start: int, end: int) -> str | None:
        return self._blocker("class_group", class_group_id, day, start, end)

    def is_teacher_free(self, teacher_id: str, day: str, slot: Slot) -> bool:
        return self.teacher_blocker(teacher_id, day, slot.start, slot.end) is None

    def is_class_group_free(self, class_group_id: str, day: str, slot: Slot) -> bool:
        return self.class_group_blocker(class_group_id, day, slot.start, slot.end) is None

    def _occupy(self, entry: ScheduleEntry) -> None:
        start, end = entry.start_minutes, entry.end_minutes
        for kind, resource_id in self._resources(entry):
            self._cells[(kind, resource_id, entry.day)].append((start, end, entry.id))
        self._reserved[entry.id] = entry

    def reserve(self, entry: ScheduleEntry) -> None:
        """Mark the teacher and class-group cells of ``entry`` as occupied.

        Raises ConflictError naming the occupying entry when either cell is
        already taken; the index is left untouched in that case.
        """
        start, end = entry.start_minutes, entry.end_minutes
        for kind, resource_id in self._resources(entry):
            blocker = self._blocker(kind, resource_id, entry.day, start, end)
            if blocker is not None:
                raise ConflictError(
                    f"{kind.replace('_', ' ').capitalize()} {resource_id} is already booked on "
                    f"{entry.day} {entry.start_time}-{entry.end_time} by entry {blocker}",
                    occupying_entry_id=blocker,
                    details={"resource": kind, "resource_id": resource_id, "day": entry.day},
                )
        self._occupy(entry)

    def release(self, entry: ScheduleEntry) -> None:
        stored = self._reserved.pop(entry.id, None)
        if stored is None:
            return
        for kind, resource_id in self._resources(stored):
            key = (kind, resource_id, stored.day)
            remaining = [item for item in self._cells.get(key, ()) if item[2] != entry.id]
            if remaining:
                self._cells[key] = remaining
            else:
                self._cells.pop(key, None)
