"""Student selection for the class wizard."""

from collections.abc import Callable
from typing import Literal

from app.client import ClassesClient
from app.core.config import settings
from app.schemas.student import Pagination, Student, StudentFilters

SelectMode = Literal["visible", "filtered"]


class EnrollmentSelector:
    """
    A filtered, paginated view over santri plus a selection that survives
    paging and filtering.

    ``select_all_visible`` adds the current page to the selection.
    ``select_all_filtered`` re-runs the filters without pagination and
    replaces the selection with the result.
    """

    def __init__(
        self,
        client: ClassesClient,
        *,
        limit: int = settings.STUDENT_LIST_DEFAULT_LIMIT,
        selected_ids: list[str] | None = None,
        on_selection_change: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._client = client
        self._on_selection_change = on_selection_change
        self._selected: dict[str, None] = dict.fromkeys(selected_ids or [])

        self.filters = StudentFilters()
        self.page = 1
        self.limit = limit
        self.students: list[Student] = []
        self.total = 0
        self.pagination: Pagination | None = None
        self.entry_years: list[str] = []
        self.available_statuses: list[str] = []
        self.select_mode: SelectMode | None = None

    # Listing

    async def refresh(self) -> None:
        """Fetch the current page for the current filters."""
        response = await self._client.list_students(
            self.filters, page=self.page, limit=self.limit
        )
        self.students = response.students
        self.total = response.total
        self.pagination = response.pagination
        self.entry_years = response.filters.entry_years
        self.available_statuses = response.filters.available_statuses

    async def set_filters(self, **changes: str | None) -> None:
        """Change filters and go back to the first page."""
        self.filters = self.filters.model_copy(update=changes)
        self.page = 1
        await self.refresh()

    async def set_page(self, page: int) -> None:
        self.page = page
        await self.refresh()

    @property
    def visible_ids(self) -> list[str]:
        return [student.id for student in self.students]

    # Selection

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selected)

    @property
    def is_valid(self) -> bool:
        return bool(self._selected)

    def is_selected(self, student_id: str) -> bool:
        return student_id in self._selected

    @property
    def all_visible_selected(self) -> bool:
        return bool(self.students) and all(self.is_selected(sid) for sid in self.visible_ids)

    @property
    def all_filtered_selected(self) -> bool:
        return self.select_mode == "filtered" and len(self._selected) >= self.total

    def _replace(self, student_ids: list[str]) -> None:
        self._selected = dict.fromkeys(student_ids)
        if self._on_selection_change:
            self._on_selection_change(self.selected_ids)

    def toggle(self, student_id: str, checked: bool) -> None:
        if checked:
            self._replace([*self._selected, student_id])
        else:
            self._replace([sid for sid in self._selected if sid != student_id])

    def select_all_visible(self) -> None:
        self._replace([*self._selected, *self.visible_ids])
        self.select_mode = "visible"

    async def select_all_filtered(self) -> None:
        student_ids = await self._client.list_student_ids(self.filters)
        self._replace(student_ids)
        self.select_mode = "filtered"

    def deselect_visible(self) -> None:
        visible = set(self.visible_ids)
        self._replace([sid for sid in self._selected if sid not in visible])

    def clear(self) -> None:
        self._replace([])
        self.select_mode = None
