"""Dependency container wiring for the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from tender_board.adapters.account_client import HttpxAccountClient, IdentityProvider
from tender_board.adapters.project_api_client import (
    HttpxProjectApiClient,
    ProjectApiClient,
)
from tender_board.config import Settings
from tender_board.services.aggregation import EligibleProjectAggregator
from tender_board.services.submission import ProjectSubmitter
from tender_board.services.view_models import HomeViewModel, ProjectFormViewModel


@dataclass
class AppContainer:
    """Holds client-wide dependencies."""

    settings: Settings
    project_client: ProjectApiClient
    identity_provider: IdentityProvider
    aggregator: EligibleProjectAggregator
    submitter: ProjectSubmitter
    home: HomeViewModel
    project_form: ProjectFormViewModel
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    project_client = HttpxProjectApiClient.create(
        base_url=resolved_settings.api_base_url,
        auth_token=resolved_settings.auth_token,
        timeout=resolved_settings.request_timeout_seconds,
        eligible_projects_path=resolved_settings.eligible_projects_path,
    )
    identity_provider = HttpxAccountClient(http_client=project_client.http_client)
    aggregator = EligibleProjectAggregator(
        client=project_client,
        leg_timeout_seconds=resolved_settings.photo_leg_timeout_seconds,
        retry_attempts=resolved_settings.photo_leg_retry_attempts,
        retry_delay_seconds=resolved_settings.photo_leg_retry_delay_seconds,
    )
    submitter = ProjectSubmitter(project_client)
    home = HomeViewModel(identity_provider=identity_provider, aggregator=aggregator)
    project_form = ProjectFormViewModel(submitter=submitter, client=project_client)

    async def close_resources() -> None:
        await project_client.close()

    return AppContainer(
        settings=resolved_settings,
        project_client=project_client,
        identity_provider=identity_provider,
        aggregator=aggregator,
        submitter=submitter,
        home=home,
        project_form=project_form,
        close_resources=close_resources,
    )
