"""Create-class wizard: Details -> Enrollment -> Confirmation.

The wizard gathers one payload across three steps and submits it with a
single create request. Each step reports its data and its validity upward;
the confirmation step is valid exactly when the two steps before it are.
"""

import copy
import logging
from collections.abc import Awaitable, Callable
from enum import IntEnum
from typing import Any

import httpx
from pydantic import ValidationError

from app.client import ApiError
from app.schemas.school_class import ClassCreate, ClassDetails, Schedule
from app.wizard.debounce import ConflictPrecheck

logger = logging.getLogger(__name__)

Submitter = Callable[[ClassCreate], Awaitable[dict[str, Any]]]

INCOMPLETE_MESSAGE = "Please complete all required fields"


class WizardStep(IntEnum):
    DETAILS = 0
    ENROLLMENT = 1
    CONFIRMATION = 2


def empty_payload() -> dict[str, Any]:
    return {
        "name": "",
        "academic_year": "",
        "ustad_id": "",
        "schedule": {"days": [], "start_time": "", "end_time": ""},
        "student_ids": [],
    }


def validate_details(payload: dict[str, Any]) -> bool:
    """Validity of the details step, recomputed on every edit."""
    try:
        ClassDetails.model_validate(payload)
    except ValidationError:
        return False
    return True


class ClassWizard:
    def __init__(
        self,
        submitter: Submitter,
        *,
        precheck: ConflictPrecheck | None = None,
        on_success: Callable[[dict[str, Any]], None] | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._submitter = submitter
        self._precheck = precheck
        self._on_success = on_success
        self._on_close = on_close
        self.reset()

    def reset(self) -> None:
        """Back to an empty first step."""
        self.current_step = WizardStep.DETAILS
        self.payload = empty_payload()
        self._validity = {WizardStep.DETAILS: False, WizardStep.ENROLLMENT: False}
        self._visited = {WizardStep.DETAILS}
        self.is_submitting = False
        self.error: str | None = None
        self.exit_pending = False
        if self._precheck:
            self._precheck.clear()

    # Step callbacks

    def on_data_change(self, partial: dict[str, Any]) -> None:
        """Merge a step's partial form state into the payload."""
        for key, value in partial.items():
            if key == "schedule" and isinstance(value, dict):
                self.payload["schedule"] = {**self.payload["schedule"], **value}
            else:
                self.payload[key] = copy.deepcopy(value)

    def on_validation_change(self, step: WizardStep, valid: bool) -> None:
        if step == WizardStep.CONFIRMATION:
            raise ValueError("Confirmation validity is derived from the other steps")
        self._validity[step] = valid

    def update_details(self, **fields: Any) -> None:
        """Details step edit: merge, re-validate and kick the schedule pre-check."""
        self.on_data_change(fields)
        self.on_validation_change(WizardStep.DETAILS, validate_details(self.payload))
        if self._precheck and fields.keys() & {"ustad_id", "schedule"}:
            self._schedule_precheck()

    def update_selection(self, student_ids: list[str]) -> None:
        """Enrollment step edit. Plug into ``EnrollmentSelector(on_selection_change=...)``."""
        self.on_data_change({"student_ids": list(student_ids)})
        self.on_validation_change(WizardStep.ENROLLMENT, bool(student_ids))

    def _schedule_precheck(self) -> None:
        ustad_id = self.payload["ustad_id"]
        try:
            schedule = Schedule.model_validate(self.payload["schedule"])
        except ValidationError:
            self._precheck.clear()
            return
        if ustad_id:
            self._precheck.schedule(ustad_id, schedule)

    # Validity

    def is_step_valid(self, step: WizardStep) -> bool:
        if step == WizardStep.CONFIRMATION:
            return self._validity[WizardStep.DETAILS] and self._validity[WizardStep.ENROLLMENT]
        return self._validity[step]

    def step_status(self, step: WizardStep) -> str:
        if step == self.current_step:
            return "active"
        return "completed" if self.is_step_valid(step) else "pending"

    @property
    def conflict_warning(self) -> dict[str, Any] | None:
        """Advisory result of the last schedule pre-check, if it found a clash."""
        if self._precheck and self._precheck.has_conflict:
            return self._precheck.result.model_dump(by_alias=True)
        return None

    # Navigation

    def can_enter(self, step: WizardStep) -> bool:
        if step <= self.current_step:
            return True
        if step == WizardStep.CONFIRMATION:
            return self.is_step_valid(WizardStep.CONFIRMATION)
        return self.is_step_valid(WizardStep(step - 1)) or step in self._visited

    def go_to_step(self, step: WizardStep) -> bool:
        """Explicit click on a step in the progress indicator."""
        if not self.can_enter(step):
            return False
        self.current_step = WizardStep(step)
        self._visited.add(self.current_step)
        return True

    def next_step(self) -> bool:
        if self.current_step == WizardStep.CONFIRMATION or not self.is_step_valid(self.current_step):
            return False
        target = WizardStep(self.current_step + 1)
        if not self.can_enter(target):
            return False
        self.current_step = target
        self._visited.add(self.current_step)
        return True

    def previous_step(self) -> bool:
        if self.current_step == WizardStep.DETAILS:
            return False
        self.current_step = WizardStep(self.current_step - 1)
        return True

    # Submission

    @property
    def can_submit(self) -> bool:
        return (
            self.is_step_valid(WizardStep.DETAILS)
            and self.is_step_valid(WizardStep.ENROLLMENT)
            and bool(self.payload["student_ids"])
            and not self.is_submitting
        )

    async def submit(self) -> dict[str, Any] | None:
        """
        Validate the whole payload once more and send it.

        On success the wizard resets and the server's response is returned.
        On failure the payload is kept and ``error`` holds the message.
        """
        if self.is_submitting:
            return None
        if not self.can_submit:
            self.error = INCOMPLETE_MESSAGE
            return None

        try:
            class_data = ClassCreate.model_validate(self.payload)
        except ValidationError:
            self.error = INCOMPLETE_MESSAGE
            return None

        self.is_submitting = True
        self.error = None
        try:
            result = await self._submitter(class_data)
        except ApiError as exc:
            logger.warning("Create class failed (%s): %s", exc.status_code, exc.message)
            self.error = exc.message
            return None
        except httpx.HTTPError as exc:
            logger.warning("Create class request failed: %s", exc)
            self.error = "Failed to create class"
            return None
        finally:
            self.is_submitting = False

        self.reset()
        if self._on_success:
            self._on_success(result)
        return result

    # Exit guard

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(
            self.payload["name"]
            or self.payload["academic_year"]
            or self.payload["student_ids"]
        )

    def request_exit(self) -> bool:
        """Close the wizard, unless there is data to lose. Returns True if closed."""
        if self.has_unsaved_changes:
            self.exit_pending = True
            return False
        self._close()
        return True

    def confirm_exit(self) -> None:
        self._close()

    def cancel_exit(self) -> None:
        self.exit_pending = False

    def _close(self) -> None:
        self.reset()
        if self._on_close:
            self._on_close()
