"""Eligible project listing with per-project photo fan-out."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from pydantic import ValidationError

from tender_board.adapters.project_api_client import ProjectApiClient
from tender_board.domain.errors import ApiError, DecodeError, TransportError
from tender_board.domain.outcomes import (
    AggregatorState,
    Failure,
    FetchOutcome,
    LegState,
    LegSummary,
    PhotoLeg,
    Success,
)
from tender_board.domain.projects import EligibleProject, PhotoRecord, ProjectPhoto
from tender_board.services.photos import PhotoCollection

SENTINEL_PROJECT_ID = 0

_logger = logging.getLogger(__name__)


@dataclass
class RefreshCycle:
    """Handle on one refresh: its projects and in-flight photo legs."""

    generation: int
    projects: list[EligibleProject]
    legs: list[PhotoLeg]
    list_error: ApiError | None = None
    tasks: list["asyncio.Task[None]"] = field(default_factory=list)

    async def settle(self) -> list[PhotoLeg]:
        """Wait until every leg has succeeded or failed."""
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        return self.legs

    def summary(self) -> LegSummary:
        """Summarize leg outcomes so far."""
        return LegSummary.from_legs(self.legs)


@dataclass
class EligibleProjectAggregator:
    """Fetches eligible projects and merges each project's photos as they arrive.

    Every refresh bumps ``generation``. A photo leg merges its batch into
    ``photos`` only when the generation it was started under is still the
    current one, so overlapping refreshes never leave stale photos behind.
    """

    client: ProjectApiClient
    photos: PhotoCollection = field(default_factory=PhotoCollection)
    leg_timeout_seconds: float | None = None
    retry_attempts: int = 0
    retry_delay_seconds: float = 0.3
    projects: list[EligibleProject] = field(default_factory=list, init=False)
    state: AggregatorState = field(default=AggregatorState.IDLE, init=False)
    generation: int = field(default=0, init=False)
    list_error: ApiError | None = field(default=None, init=False)
    my_projects_error: ApiError | None = field(default=None, init=False)
    _legs: list[PhotoLeg] = field(default_factory=list, init=False, repr=False)
    _tasks: set["asyncio.Task[None]"] = field(
        default_factory=set, init=False, repr=False
    )

    async def fetch_list(self) -> list[EligibleProject]:
        """Fetch eligible projects; a failure yields [] and sets ``list_error``."""
        projects, self.list_error = await self._fetch_projects(
            self.client.list_eligible_projects, label="eligible projects"
        )
        return projects

    async def fetch_my_projects(self) -> list[EligibleProject]:
        """Fetch the customer's own projects; errors go to ``my_projects_error``."""
        projects, self.my_projects_error = await self._fetch_projects(
            self.client.list_my_projects, label="my projects"
        )
        return projects

    async def fetch_photos_for(
        self, projects: Sequence[EligibleProject]
    ) -> AsyncIterator[tuple[int, ProjectPhoto]]:
        """Yield (project id, photo) pairs in leg completion order.

        Nothing is requested until iteration starts; then every leg is
        started at once.
        """
        legs = [
            asyncio.ensure_future(self._run_leg(project_id))
            for project_id in _leg_project_ids(projects)
        ]
        for next_leg in asyncio.as_completed(legs):
            project_id, outcome = await next_leg
            if isinstance(outcome, Success):
                for photo in outcome.value:
                    yield project_id, photo

    async def refresh(self) -> RefreshCycle:
        """Start a new cycle: list projects, reset photos, fan out photo legs.

        Returns once the legs are started; await ``RefreshCycle.settle`` for a
        stable snapshot.
        """
        self.generation += 1
        generation = self.generation
        self.state = AggregatorState.LISTING
        projects, list_error = await self._fetch_projects(
            self.client.list_eligible_projects, label="eligible projects"
        )
        if generation != self.generation:
            _logger.info("Refresh %s superseded while listing", generation)
            return RefreshCycle(
                generation=generation,
                projects=projects,
                legs=[],
                list_error=list_error,
            )

        self.list_error = list_error

        self.projects = projects
        self.photos.clear()
        self._legs = [
            PhotoLeg(project_id=project_id, generation=generation)
            for project_id in _leg_project_ids(projects)
        ]
        cycle = RefreshCycle(
            generation=generation,
            projects=projects,
            legs=list(self._legs),
            list_error=list_error,
        )
        if not self._legs:
            self.state = AggregatorState.SETTLED
            return cycle

        self.state = AggregatorState.FANNING_OUT
        for leg in self._legs:
            task = asyncio.create_task(self._run_and_merge(leg))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            cycle.tasks.append(task)
        _logger.info(
            "Refresh %s: %s projects, %s photo lookups started",
            generation,
            len(projects),
            len(cycle.legs),
        )
        return cycle

    async def _fetch_projects(
        self,
        loader: Callable[[], Awaitable[list[dict[str, object]]]],
        *,
        label: str,
    ) -> tuple[list[EligibleProject], ApiError | None]:
        """Load and decode a project list, returning the error instead of raising."""
        try:
            rows = await loader()
            projects = _decode_projects(rows)
        except ApiError as exc:
            _logger.warning("Fetching %s failed: %s", label, exc)
            return [], exc
        return projects, None

    async def _run_and_merge(self, leg: PhotoLeg) -> None:
        """Run one leg and merge its batch if its cycle is still current."""
        _, outcome = await self._run_leg(leg.project_id)
        leg.resolve(outcome)
        if leg.generation != self.generation:
            _logger.info(
                "Discarding stale photo lookup: project_id=%s generation=%s",
                leg.project_id,
                leg.generation,
            )
            return
        if isinstance(outcome, Success):
            self.photos.extend(outcome.value)
        if all(current.state is not LegState.PENDING for current in self._legs):
            self.state = AggregatorState.SETTLED
            summary = LegSummary.from_legs(self._legs)
            _logger.info(
                "Refresh %s settled: %s/%s photo lookups failed",
                leg.generation,
                summary.failed,
                summary.total,
            )

    async def _run_leg(self, project_id: int) -> tuple[int, FetchOutcome]:
        """Fetch and decode one project's photos; every failure becomes a Failure."""
        try:
            rows = await self._call_with_retry(
                lambda: self._get_photos(project_id),
                action=f"get_photo:{project_id}",
            )
            photos = _decode_photos(project_id, rows)
        except ApiError as exc:
            _logger.warning(
                "Photo lookup failed: project_id=%s error=%s", project_id, exc
            )
            return project_id, Failure(cause=exc)
        except Exception as exc:
            _logger.exception("Photo lookup crashed: project_id=%s", project_id)
            cause = ApiError(f"Unexpected error in photo lookup: {exc!r}")
            cause.__cause__ = exc
            return project_id, Failure(cause=cause)
        return project_id, Success(value=photos)

    async def _get_photos(self, project_id: int) -> list[dict[str, object]]:
        try:
            return await asyncio.wait_for(
                self.client.get_photos(project_id), timeout=self.leg_timeout_seconds
            )
        except TimeoutError as exc:
            raise TransportError(
                f"Photo lookup timed out after {self.leg_timeout_seconds}s"
            ) from exc

    async def _call_with_retry(
        self,
        func: Callable[[], Awaitable[list[dict[str, object]]]],
        *,
        action: str,
    ) -> list[dict[str, object]]:
        """Call an async function, retrying API errors a bounded number of times."""
        attempt = 0
        while True:
            try:
                return await func()
            except ApiError as exc:
                attempt += 1
                if attempt > self.retry_attempts:
                    raise
                _logger.debug(
                    "%s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                await asyncio.sleep(self.retry_delay_seconds)


def _leg_project_ids(projects: Sequence[EligibleProject]) -> list[int]:
    """Project ids that need a photo lookup; the sentinel id 0 is skipped."""
    ids: list[int] = []
    for project in projects:
        if project.id == SENTINEL_PROJECT_ID:
            _logger.debug("Skipping photo lookup for sentinel project")
            continue
        ids.append(project.id)
    return ids


def _decode_projects(rows: list[dict[str, object]]) -> list[EligibleProject]:
    try:
        return [EligibleProject.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise DecodeError("Unexpected project payload") from exc


def _decode_photos(
    project_id: int, rows: list[dict[str, object]]
) -> list[ProjectPhoto]:
    """Decode photo rows, keeping only those that belong to the project."""
    try:
        photos = [PhotoRecord.model_validate(row).to_photo() for row in rows]
    except ValidationError as exc:
        raise DecodeError(f"Unexpected photo payload for project {project_id}") from exc
    owned = [photo for photo in photos if photo.project_id == project_id]
    if len(owned) != len(photos):
        _logger.warning(
            "Dropped %s photos not owned by project_id=%s",
            len(photos) - len(owned),
            project_id,
        )
    return owned
