"""Schedule conflict detection.

Two classes conflict when they are taught by the same ustad, share at least
one day, and their time windows overlap as half-open intervals
``[startTime, endTime)``. Times are zero-padded ``HH:MM`` strings, so plain
string comparison orders them correctly.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol


class ScheduledClass(Protocol):
    id: str
    name: str
    ustad_id: str
    schedule: Mapping[str, Any]


@dataclass(frozen=True)
class ScheduleConflict:
    class_id: str
    class_name: str
    conflict_schedule: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "conflict": True,
            "className": self.class_name,
            "conflictSchedule": self.conflict_schedule,
        }


def schedules_overlap(proposed: Mapping[str, Any], existing: Mapping[str, Any]) -> bool:
    """Check whether two schedules share a day and an instant of time."""
    existing_days = set(existing.get("days") or [])
    if not existing_days.intersection(proposed.get("days") or []):
        return False

    existing_start = existing.get("startTime")
    existing_end = existing.get("endTime")
    if not existing_start or not existing_end:
        return False

    return proposed["startTime"] < existing_end and proposed["endTime"] > existing_start


def find_schedule_conflict(
    classes: Iterable[ScheduledClass],
    teacher_id: str,
    schedule: Mapping[str, Any],
    exclude_class_id: str | None = None,
) -> ScheduleConflict | None:
    """Return the first of the teacher's classes that overlaps ``schedule``."""
    for school_class in classes:
        if exclude_class_id and school_class.id == exclude_class_id:
            continue
        if school_class.ustad_id != teacher_id:
            continue
        if schedules_overlap(schedule, school_class.schedule or {}):
            return ScheduleConflict(
                class_id=school_class.id,
                class_name=school_class.name,
                conflict_schedule=dict(school_class.schedule),
            )
    return None
