"""Tests for class field validators and schemas."""

import pytest
from pydantic import BaseModel, ValidationError

from app.schemas.school_class import ClassCreate, ClassUpdate, Schedule
from app.schemas.validators import (
    AcademicYear,
    ClassName,
    TimeOfDay,
    time_to_minutes,
    unique_ids,
    validate_time_of_day,
)


class ClassNameModel(BaseModel):
    name: ClassName


class AcademicYearModel(BaseModel):
    year: AcademicYear


class TimeModel(BaseModel):
    time: TimeOfDay


class TestClassNameValidator:
    """Tests for class name validation."""

    @pytest.mark.parametrize("name", ["7-A", "Kelas 7A", "Tahfidz Juz 30", "K" * 50])
    def test_valid_names(self, name: str):
        assert ClassNameModel(name=name).name == name

    @pytest.mark.parametrize("name", ["7A", "K" * 51, "Kelas_7", "Kelas 7A!", "Kelas/7"])
    def test_invalid_names(self, name: str):
        with pytest.raises(ValidationError):
            ClassNameModel(name=name)


class TestAcademicYearValidator:
    def test_valid(self):
        assert AcademicYearModel(year="2024/2025").year == "2024/2025"

    @pytest.mark.parametrize("year", ["2024", "2024-2025", "24/25", "2024/25", "abcd/efgh"])
    def test_invalid(self, year: str):
        with pytest.raises(ValidationError) as exc_info:
            AcademicYearModel(year=year)
        assert "year" in str(exc_info.value)


class TestTimeOfDayValidator:
    """Tests for time of day validation."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("08:00", "08:00"),
            ("8:00", "08:00"),
            ("0:05", "00:05"),
            ("23:59", "23:59"),
            (" 9:30 ", "09:30"),
        ],
    )
    def test_valid_times_are_zero_padded(self, value: str, expected: str):
        assert TimeModel(time=value).time == expected

    @pytest.mark.parametrize("value", ["24:00", "12:60", "8", "08.00", "8:5", "noon"])
    def test_invalid_times(self, value: str):
        with pytest.raises(ValidationError):
            TimeModel(time=value)

    def test_padded_times_sort_as_strings(self):
        assert validate_time_of_day("9:00") < validate_time_of_day("10:00")

    def test_time_to_minutes(self):
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("08:30") == 510


class TestUniqueIds:
    def test_keeps_first_occurrence_order(self):
        assert unique_ids(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestScheduleSchema:
    """Tests for the weekly schedule."""

    def test_valid_schedule(self):
        schedule = Schedule(days=["Senin", "Rabu"], startTime="7:30", endTime="9:00")

        assert schedule.to_document() == {
            "days": ["Senin", "Rabu"],
            "startTime": "07:30",
            "endTime": "09:00",
        }

    def test_accepts_snake_case_names(self):
        schedule = Schedule(days=["Sabtu"], start_time="13:00", end_time="14:00")

        assert schedule.start_time == "13:00"

    def test_six_days_allowed(self):
        days = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu"]

        assert Schedule(days=days, startTime="08:00", endTime="09:00").days == days

    @pytest.mark.parametrize(
        "days, start, end",
        [
            ([], "08:00", "09:00"),
            (["Minggu"], "08:00", "09:00"),
            (["senin"], "08:00", "09:00"),
            (["Senin", "Senin"], "08:00", "09:00"),
            (["Senin"], "09:00", "09:00"),
            (["Senin"], "10:00", "09:00"),
            (["Senin"], "08:00", "08:29"),
            (["Senin"], "08:00", "14:01"),
        ],
    )
    def test_invalid_schedules(self, days: list[str], start: str, end: str):
        with pytest.raises(ValidationError):
            Schedule(days=days, startTime=start, endTime=end)

    @pytest.mark.parametrize("end", ["08:30", "14:00"])
    def test_duration_bounds_are_inclusive(self, end: str):
        assert Schedule(days=["Senin"], startTime="08:00", endTime=end).end_time == end


class TestClassCreateSchema:
    PAYLOAD = {
        "name": "Kelas 7A",
        "academicYear": "2024/2025",
        "ustadId": "u1",
        "schedule": {"days": ["Senin"], "startTime": "08:00", "endTime": "09:00"},
    }

    def test_requires_at_least_one_student(self):
        with pytest.raises(ValidationError):
            ClassCreate.model_validate({**self.PAYLOAD, "studentIds": []})

    def test_student_ids_are_deduplicated(self):
        class_data = ClassCreate.model_validate({**self.PAYLOAD, "studentIds": ["s1", "s2", "s1"]})

        assert class_data.student_ids == ["s1", "s2"]

    def test_at_most_fifty_students(self):
        ids = [f"s{i}" for i in range(50)]

        assert len(ClassCreate.model_validate({**self.PAYLOAD, "studentIds": ids}).student_ids) == 50
        with pytest.raises(ValidationError):
            ClassCreate.model_validate({**self.PAYLOAD, "studentIds": [*ids, "s50"]})

    def test_requires_teacher(self):
        with pytest.raises(ValidationError):
            ClassCreate.model_validate({**self.PAYLOAD, "ustadId": "", "studentIds": ["s1"]})


class TestClassUpdateSchema:
    def test_everything_is_optional(self):
        assert ClassUpdate.model_validate({}).model_dump(exclude_unset=True) == {}

    def test_partial_keeps_only_sent_fields(self):
        update = ClassUpdate.model_validate({"name": "Kelas 8B"})

        assert update.model_dump(by_alias=True, exclude_unset=True) == {"name": "Kelas 8B"}

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            ClassUpdate.model_validate({"status": "archived"})
