"""Tests for the create-class wizard."""

import asyncio
from typing import Any

import httpx
import pytest
from httpx import AsyncClient

from app.client import ApiError, ClassesClient
from app.models.user import User
from app.schemas.school_class import ClassCreate, Schedule
from app.wizard.debounce import ConflictPrecheck, Debouncer
from app.wizard.orchestrator import INCOMPLETE_MESSAGE, ClassWizard, WizardStep

MONDAY_MORNING = {"days": ["Senin"], "start_time": "08:00", "end_time": "09:00"}


@pytest.fixture
def api(client: AsyncClient, admin_token: str) -> ClassesClient:
    return ClassesClient(client, token=admin_token)


@pytest.fixture
def wizard(api: ClassesClient) -> ClassWizard:
    return ClassWizard(api.create_class)


def fill_details(wizard: ClassWizard, ustad_id: str, **overrides: Any) -> None:
    details = {
        "name": "Kelas 7A",
        "academic_year": "2024/2025",
        "ustad_id": ustad_id,
        "schedule": MONDAY_MORNING,
    }
    details.update(overrides)
    wizard.update_details(**details)


class TestDebouncer:
    async def test_only_last_call_runs(self):
        calls: list[int] = []
        debouncer = Debouncer(0.01)

        async def record(value: int) -> int:
            calls.append(value)
            return value

        for value in (1, 2, 3):
            debouncer.call(lambda value=value: record(value))

        assert await debouncer.wait() == 3
        assert calls == [3]

    async def test_cancelled_call_yields_none(self):
        debouncer = Debouncer(10)

        async def never() -> str:
            return "ran"

        debouncer.call(never)
        assert debouncer.pending

        debouncer.cancel()

        assert await debouncer.wait() is None
        assert not debouncer.pending

    async def test_wait_without_calls(self):
        assert await Debouncer(0.01).wait() is None


class TestConflictPrecheck:
    async def test_reports_conflict(
        self, api: ClassesClient, ustad_user: User, students: list[User]
    ):
        schedule = Schedule.model_validate(MONDAY_MORNING)
        await api.create_class(
            ClassCreate(
                name="Kelas 7A",
                academic_year="2024/2025",
                ustad_id=ustad_user.id,
                schedule=schedule,
                student_ids=[students[0].id],
            )
        )
        results = []
        precheck = ConflictPrecheck(api, delay=0.01, on_result=results.append)

        precheck.schedule(ustad_user.id, schedule)
        result = await precheck.wait()

        assert result.conflict is True
        assert result.class_name == "Kelas 7A"
        assert precheck.has_conflict
        assert results == [result]

    async def test_no_conflict(self, api: ClassesClient, ustad_user: User):
        precheck = ConflictPrecheck(api, delay=0.01)

        precheck.schedule(ustad_user.id, Schedule.model_validate(MONDAY_MORNING))
        result = await precheck.wait()

        assert result.conflict is False
        assert not precheck.has_conflict

    async def test_api_error_clears_result(self, client: AsyncClient, ustad_user: User):
        precheck = ConflictPrecheck(ClassesClient(client), delay=0.01)

        precheck.schedule(ustad_user.id, Schedule.model_validate(MONDAY_MORNING))

        assert await precheck.wait() is None
        assert not precheck.checking

    async def test_network_failure_clears_result(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        results = []
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(refuse), base_url="http://test"
        ) as http:
            precheck = ConflictPrecheck(
                ClassesClient(http, token="t"), delay=0.01, on_result=results.append
            )

            precheck.schedule("u1", Schedule.model_validate(MONDAY_MORNING))

            assert await precheck.wait() is None
        assert not precheck.has_conflict
        assert not precheck.checking
        assert results == [None]


class TestNavigation:
    async def test_initial_state(self, wizard: ClassWizard):
        assert wizard.current_step == WizardStep.DETAILS
        assert wizard.step_status(WizardStep.DETAILS) == "active"
        assert wizard.step_status(WizardStep.ENROLLMENT) == "pending"
        assert not wizard.is_step_valid(WizardStep.CONFIRMATION)
        assert not wizard.has_unsaved_changes

    async def test_cannot_advance_with_invalid_details(self, wizard: ClassWizard):
        wizard.update_details(name="7A")

        assert not wizard.next_step()
        assert wizard.current_step == WizardStep.DETAILS

    async def test_walk_through_steps(
        self, wizard: ClassWizard, ustad_user: User, students: list[User]
    ):
        fill_details(wizard, ustad_user.id)
        assert wizard.is_step_valid(WizardStep.DETAILS)
        assert wizard.next_step()
        assert wizard.current_step == WizardStep.ENROLLMENT
        assert wizard.step_status(WizardStep.DETAILS) == "completed"

        assert not wizard.next_step()
        assert not wizard.can_enter(WizardStep.CONFIRMATION)

        wizard.update_selection([students[0].id])
        assert wizard.is_step_valid(WizardStep.CONFIRMATION)
        assert wizard.next_step()
        assert wizard.current_step == WizardStep.CONFIRMATION
        assert not wizard.next_step()

        assert wizard.previous_step()
        assert wizard.current_step == WizardStep.ENROLLMENT

    async def test_previous_from_first_step(self, wizard: ClassWizard):
        assert not wizard.previous_step()

    async def test_go_to_step(self, wizard: ClassWizard, ustad_user: User):
        assert not wizard.go_to_step(WizardStep.ENROLLMENT)

        fill_details(wizard, ustad_user.id)

        assert wizard.go_to_step(WizardStep.ENROLLMENT)
        assert not wizard.go_to_step(WizardStep.CONFIRMATION)
        assert wizard.go_to_step(WizardStep.DETAILS)

    async def test_visited_step_stays_reachable(
        self, wizard: ClassWizard, ustad_user: User
    ):
        fill_details(wizard, ustad_user.id)
        wizard.next_step()
        wizard.previous_step()

        wizard.update_details(name="")

        assert wizard.can_enter(WizardStep.ENROLLMENT)

    async def test_next_step_cannot_reach_confirmation_with_invalid_details(
        self, wizard: ClassWizard, ustad_user: User
    ):
        fill_details(wizard, ustad_user.id)
        wizard.next_step()
        wizard.update_selection(["s1"])
        wizard.previous_step()
        wizard.update_details(name="")

        assert wizard.go_to_step(WizardStep.ENROLLMENT)
        assert not wizard.next_step()
        assert wizard.current_step == WizardStep.ENROLLMENT

    async def test_confirmation_validity_is_derived(self, wizard: ClassWizard):
        with pytest.raises(ValueError):
            wizard.on_validation_change(WizardStep.CONFIRMATION, True)

    async def test_schedule_edits_are_merged(self, wizard: ClassWizard, ustad_user: User):
        fill_details(wizard, ustad_user.id)

        wizard.update_details(schedule={"end_time": "10:00"})

        assert wizard.payload["schedule"] == {
            "days": ["Senin"],
            "start_time": "08:00",
            "end_time": "10:00",
        }
        assert wizard.is_step_valid(WizardStep.DETAILS)

    async def test_deselecting_everyone_invalidates_enrollment(
        self, wizard: ClassWizard, students: list[User]
    ):
        wizard.update_selection([students[0].id])
        wizard.update_selection([])

        assert not wizard.is_step_valid(WizardStep.ENROLLMENT)


class TestSubmit:
    async def test_incomplete_payload(self, wizard: ClassWizard, ustad_user: User):
        fill_details(wizard, ustad_user.id)

        assert await wizard.submit() is None
        assert wizard.error == INCOMPLETE_MESSAGE

    async def test_success_resets_wizard(
        self,
        api: ClassesClient,
        ustad_user: User,
        students: list[User],
    ):
        created: list[dict] = []
        wizard = ClassWizard(api.create_class, on_success=created.append)
        fill_details(wizard, ustad_user.id)
        wizard.update_selection([s.id for s in students])
        wizard.go_to_step(WizardStep.CONFIRMATION)

        result = await wizard.submit()

        assert result["message"] == "Class created successfully"
        assert result["classData"]["studentCount"] == 3
        assert created == [result]
        assert wizard.current_step == WizardStep.DETAILS
        assert wizard.payload["name"] == ""
        assert not wizard.is_submitting
        assert wizard.error is None

    async def test_server_rejection_keeps_payload(
        self,
        api: ClassesClient,
        wizard: ClassWizard,
        ustad_user: User,
        students: list[User],
    ):
        await api.create_class(
            ClassCreate(
                name="Kelas 7A",
                academic_year="2024/2025",
                ustad_id=ustad_user.id,
                schedule=Schedule.model_validate(MONDAY_MORNING),
                student_ids=[students[0].id],
            )
        )
        fill_details(
            wizard,
            ustad_user.id,
            name="Kelas 7B",
            schedule={**MONDAY_MORNING, "start_time": "08:30", "end_time": "09:30"},
        )
        wizard.update_selection([students[1].id])

        assert await wizard.submit() is None
        assert wizard.error == "Schedule conflicts with another class"
        assert wizard.payload["name"] == "Kelas 7B"
        assert not wizard.is_submitting

    async def test_network_failure(self, ustad_user: User):
        async def unreachable(class_data: ClassCreate) -> dict:
            raise httpx.ConnectError("connection refused")

        wizard = ClassWizard(unreachable)
        fill_details(wizard, ustad_user.id)
        wizard.update_selection(["s1"])

        assert await wizard.submit() is None
        assert wizard.error == "Failed to create class"
        assert wizard.payload["student_ids"] == ["s1"]

    async def test_double_submit_sends_once(self, ustad_user: User):
        calls: list[ClassCreate] = []
        release = asyncio.Event()

        async def slow_submit(class_data: ClassCreate) -> dict:
            calls.append(class_data)
            await release.wait()
            return {"classId": "c1"}

        wizard = ClassWizard(slow_submit)
        fill_details(wizard, ustad_user.id)
        wizard.update_selection(["s1"])

        first = asyncio.create_task(wizard.submit())
        await asyncio.sleep(0)
        assert wizard.is_submitting
        assert not wizard.can_submit

        assert await wizard.submit() is None
        release.set()

        assert await first == {"classId": "c1"}
        assert len(calls) == 1

    async def test_api_error_message_is_surfaced(self, ustad_user: User):
        async def reject(class_data: ClassCreate) -> dict:
            raise ApiError(409, "A class with the same name, academic year and teacher already exists")

        wizard = ClassWizard(reject)
        fill_details(wizard, ustad_user.id)
        wizard.update_selection(["s1"])

        await wizard.submit()

        assert wizard.error.startswith("A class with the same name")


class TestConflictWarning:
    async def test_details_edit_triggers_precheck(
        self, api: ClassesClient, ustad_user: User, students: list[User]
    ):
        await api.create_class(
            ClassCreate(
                name="Kelas 7A",
                academic_year="2024/2025",
                ustad_id=ustad_user.id,
                schedule=Schedule.model_validate(MONDAY_MORNING),
                student_ids=[students[0].id],
            )
        )
        precheck = ConflictPrecheck(api, delay=0.01)
        wizard = ClassWizard(api.create_class, precheck=precheck)

        fill_details(wizard, ustad_user.id, name="Kelas 7B")
        await precheck.wait()

        warning = wizard.conflict_warning
        assert warning["conflict"] is True
        assert warning["className"] == "Kelas 7A"

        # Moving off the clashing slot clears the warning
        wizard.update_details(schedule={"days": ["Selasa"]})
        await precheck.wait()

        assert wizard.conflict_warning is None

    async def test_name_edit_does_not_recheck(self, api: ClassesClient, ustad_user: User):
        precheck = ConflictPrecheck(api, delay=0.01)
        wizard = ClassWizard(api.create_class, precheck=precheck)

        wizard.update_details(name="Kelas 7A")

        assert await precheck.wait() is None
        assert wizard.conflict_warning is None


class TestExitGuard:
    async def test_clean_wizard_closes_immediately(self, api: ClassesClient):
        closed: list[bool] = []
        wizard = ClassWizard(api.create_class, on_close=lambda: closed.append(True))

        assert wizard.request_exit()
        assert closed == [True]

    async def test_unsaved_changes_need_confirmation(self, api: ClassesClient):
        closed: list[bool] = []
        wizard = ClassWizard(api.create_class, on_close=lambda: closed.append(True))
        wizard.update_details(name="Kelas 7A")

        assert not wizard.request_exit()
        assert wizard.exit_pending
        assert closed == []

        wizard.cancel_exit()
        assert not wizard.exit_pending
        assert wizard.payload["name"] == "Kelas 7A"

        wizard.request_exit()
        wizard.confirm_exit()

        assert closed == [True]
        assert wizard.payload["name"] == ""
