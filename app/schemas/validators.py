"""Custom validators and types."""

import re
from typing import Annotated, Literal

from pydantic import AfterValidator, Field

DAYS_OF_WEEK = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu")

Weekday = Literal["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu"]

CLASS_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-]+$")
ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}/\d{4}$")
# 24-hour clock, leading zero optional on the hour
TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")

MIN_CLASS_DURATION_MINUTES = 30
MAX_CLASS_DURATION_MINUTES = 6 * 60


def validate_class_name(value: str) -> str:
    """Class names may only hold letters, digits, spaces and dashes."""
    if not CLASS_NAME_PATTERN.match(value):
        raise ValueError(
            "Class name may only contain letters, digits, spaces and dashes"
        )
    return value


def validate_academic_year(value: str) -> str:
    """
    Validate an academic year token.

    Accepts ``YYYY/YYYY``, e.g. ``2024/2025``.
    """
    if not ACADEMIC_YEAR_PATTERN.match(value):
        raise ValueError("Academic year must use the format YYYY/YYYY (e.g., 2024/2025)")
    return value


def validate_time_of_day(value: str) -> str:
    """
    Validate and normalize a time of day.

    Accepts formats:
    - 08:00
    - 8:00

    Returns zero-padded ``HH:MM``, so that times compare correctly as strings.
    """
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Invalid time format (e.g., 08:00)")
    hour, minute = match.groups()
    return f"{int(hour):02d}:{minute}"


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` into minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def unique_ids(values: list[str]) -> list[str]:
    """Drop duplicate ids, keeping the first occurrence."""
    return list(dict.fromkeys(values))


ClassName = Annotated[
    str,
    Field(min_length=3, max_length=50),
    AfterValidator(validate_class_name),
]

AcademicYear = Annotated[
    str,
    Field(min_length=4),
    AfterValidator(validate_academic_year),
]

TimeOfDay = Annotated[
    str,
    Field(min_length=1),
    AfterValidator(validate_time_of_day),
]
