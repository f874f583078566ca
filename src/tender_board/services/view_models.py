"""Presentation state for the home page and the new project form."""

import logging
from dataclasses import dataclass, field

from tender_board.adapters.account_client import IdentityProvider
from tender_board.adapters.project_api_client import ProjectApiClient
from tender_board.domain.errors import ApiError
from tender_board.domain.outcomes import SubmitAck, SubmitResult
from tender_board.domain.projects import (
    Account,
    Activity,
    Attachment,
    EligibleProject,
    ProjectDraft,
    ProjectPhoto,
)
from tender_board.services.aggregation import EligibleProjectAggregator, RefreshCycle
from tender_board.services.submission import ProjectSubmitter

_logger = logging.getLogger(__name__)


@dataclass
class HomeViewModel:
    """Eligible projects, their photos and the signed-in account."""

    identity_provider: IdentityProvider
    aggregator: EligibleProjectAggregator
    account: Account | None = field(default=None, init=False)
    is_authenticated: bool = field(default=False, init=False)

    @property
    def projects(self) -> list[EligibleProject]:
        return self.aggregator.projects

    @property
    def photos(self) -> list[ProjectPhoto]:
        return self.aggregator.photos.snapshot()

    def photos_for(self, project_id: int) -> list[ProjectPhoto]:
        """Return the photos to render under one project."""
        return self.aggregator.photos.for_project(project_id)

    async def load(self) -> RefreshCycle:
        """Resolve the account, then start a project refresh."""
        await self.load_account()
        return await self.refresh()

    async def load_account(self) -> None:
        """Resolve the account; also called after a successful sign-in."""
        try:
            self.account = await self.identity_provider.identity()
        except ApiError as exc:
            _logger.warning("Account lookup failed: %s", exc)
            self.account = None
        self.is_authenticated = self.identity_provider.is_authenticated

    async def refresh(self) -> RefreshCycle:
        """Start a new listing and photo fan-out cycle."""
        return await self.aggregator.refresh()


@dataclass
class ProjectFormViewModel:
    """Fields of the new project form and the outcome of its last submission."""

    submitter: ProjectSubmitter
    client: ProjectApiClient
    title: str = ""
    description: str = ""
    activity_ids: list[int] = field(default_factory=list)
    attachment: Attachment | None = None
    activities: list[Activity] = field(default_factory=list, init=False)
    submission_result: SubmitResult | None = field(default=None, init=False)
    submitting: bool = field(default=False, init=False)

    @property
    def submitted(self) -> bool:
        return isinstance(self.submission_result, SubmitAck)

    def define_file_to_upload(self, attachment: Attachment | None) -> None:
        """Select the file to send with the next submission."""
        self.attachment = attachment

    async def load_activities(self) -> list[Activity]:
        """Load the selectable activities; failures leave the list empty."""
        try:
            rows = await self.client.list_activities()
            self.activities = [Activity.model_validate(row) for row in rows]
        except (ApiError, ValueError) as exc:
            _logger.warning("Loading activities failed: %s", exc)
            self.activities = []
        return self.activities

    def to_draft(self) -> ProjectDraft:
        """Snapshot the current form fields."""
        return ProjectDraft(
            title=self.title,
            description=self.description,
            activity_ids=tuple(self.activity_ids),
            attachment=self.attachment,
        )

    async def save(self) -> SubmitResult | None:
        """Submit the form; returns None if a submission is already in flight."""
        if self.submitting:
            _logger.info("Ignoring save while a submission is in flight")
            return None
        draft = self.to_draft()
        self.submitting = True
        try:
            self.submission_result = await self.submitter.submit(draft)
        finally:
            self.submitting = False
        return self.submission_result
