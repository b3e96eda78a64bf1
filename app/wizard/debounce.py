"""Debounced advisory schedule check.

While the admin edits the teacher or the schedule, the wizard asks the
server whether the draft collides with another class. Every edit restarts
the delay, so only the last state is checked. The answer is advisory; the
create request re-runs the check on the server.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from app.client import ApiError, ClassesClient
from app.core.config import settings
from app.schemas.school_class import ConflictCheckResponse, Schedule

logger = logging.getLogger(__name__)


class Debouncer:
    """Run only the last of a burst of calls, ``delay`` seconds after it."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, func: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Cancel the pending call, if any, and schedule ``func``."""
        self.cancel()
        self._task = asyncio.create_task(self._run(func))
        return self._task

    async def _run(self, func: Callable[[], Awaitable[Any]]) -> Any:
        await asyncio.sleep(self.delay)
        return await func()

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()

    async def wait(self) -> Any:
        """Wait for the last scheduled call; None if it was cancelled."""
        if self._task is None:
            return None
        try:
            return await self._task
        except asyncio.CancelledError:
            return None


class ConflictPrecheck:
    """Debounced ``POST /classes/check-conflict``."""

    def __init__(
        self,
        client: ClassesClient,
        delay: float = settings.CONFLICT_PRECHECK_DELAY_SECONDS,
        on_result: Callable[[ConflictCheckResponse | None], None] | None = None,
    ) -> None:
        self._client = client
        self._debouncer = Debouncer(delay)
        self._on_result = on_result
        self.result: ConflictCheckResponse | None = None
        self.checking = False

    @property
    def has_conflict(self) -> bool:
        return bool(self.result and self.result.conflict)

    def schedule(
        self,
        ustad_id: str,
        schedule: Schedule,
        exclude_class_id: str | None = None,
    ) -> asyncio.Task:
        return self._debouncer.call(lambda: self._check(ustad_id, schedule, exclude_class_id))

    async def _check(
        self,
        ustad_id: str,
        schedule: Schedule,
        exclude_class_id: str | None,
    ) -> ConflictCheckResponse | None:
        self.checking = True
        try:
            self.result = await self._client.check_conflict(ustad_id, schedule, exclude_class_id)
        except ApiError as exc:
            logger.warning("Schedule pre-check failed: %s", exc.message)
            self.result = None
        except httpx.HTTPError as exc:
            logger.warning("Schedule pre-check request failed: %s", exc)
            self.result = None
        finally:
            self.checking = False

        if self._on_result:
            self._on_result(self.result)
        return self.result

    def cancel(self) -> None:
        self._debouncer.cancel()

    def clear(self) -> None:
        self.cancel()
        self.result = None

    async def wait(self) -> ConflictCheckResponse | None:
        await self._debouncer.wait()
        return self.result
