"""Async HTTP client for the classes API, used by the class wizard."""

from typing import Any

import httpx

from app.core.config import settings
from app.schemas.school_class import ClassCreate, ConflictCheckResponse, Schedule
from app.schemas.student import StudentFilters, StudentListResponse


class ApiError(Exception):
    """A non-2xx response. ``message`` is the server's ``error`` string."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: list[dict[str, Any]] | None = None,
        conflict: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details or []
        self.conflict = conflict


class ClassesClient:
    """Thin wrapper over an ``httpx.AsyncClient`` pointed at the API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str | None = None,
        prefix: str = settings.API_V1_PREFIX,
    ) -> None:
        self._http = http
        self._prefix = prefix.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._http.request(
            method, f"{self._prefix}{path}", headers=self._headers, **kwargs
        )
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            raise ApiError(
                response.status_code,
                body.get("error") or response.reason_phrase,
                details=body.get("details"),
                conflict=body.get("conflict"),
            )
        return body

    @staticmethod
    def _filter_params(filters: StudentFilters) -> dict[str, str]:
        return filters.model_dump(by_alias=True, exclude_none=True)

    async def create_class(self, class_data: ClassCreate) -> dict[str, Any]:
        """POST /classes. Returns ``{message, classId, classData}``."""
        return await self._request(
            "POST", "/classes", json=class_data.model_dump(by_alias=True)
        )

    async def list_students(
        self,
        filters: StudentFilters,
        *,
        page: int = 1,
        limit: int = settings.STUDENT_LIST_DEFAULT_LIMIT,
    ) -> StudentListResponse:
        params = {**self._filter_params(filters), "page": page, "limit": limit}
        body = await self._request("GET", "/santri", params=params)
        return StudentListResponse.model_validate(body)

    async def list_student_ids(self, filters: StudentFilters) -> list[str]:
        """Every id matching ``filters``, unpaginated."""
        body = await self._request("GET", "/santri/ids", params=self._filter_params(filters))
        return list(body["studentIds"])

    async def check_conflict(
        self,
        ustad_id: str,
        schedule: Schedule,
        exclude_class_id: str | None = None,
    ) -> ConflictCheckResponse:
        payload = {"ustadId": ustad_id, "schedule": schedule.model_dump(by_alias=True)}
        if exclude_class_id:
            payload["excludeClassId"] = exclude_class_id
        body = await self._request("POST", "/classes/check-conflict", json=payload)
        return ConflictCheckResponse.model_validate(body)
