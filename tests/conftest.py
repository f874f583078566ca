"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from tender_board.adapters.account_client import IdentityProvider
from tender_board.adapters.project_api_client import ProjectApiClient
from tender_board.config import Settings
from tender_board.domain.errors import ApiError, ServerError
from tender_board.domain.projects import Account


def photo_row(project_id: int, link: str) -> dict[str, object]:
    """Photo row shaped like the get-photo endpoint's response."""
    return {"projectPIC": {"id": project_id}, "link": link}


@dataclass
class FakeProjectApiClient(ProjectApiClient):
    """Fake project board client with scripted responses."""

    eligible_projects: list[dict[str, object]] = field(
        default_factory=lambda: [
            {"id": 1, "title": "Roof repair", "city": "Lyon"},
            {"id": 0},
            {"id": 2, "title": "Kitchen", "city": "Paris"},
        ]
    )
    my_projects: list[dict[str, object]] = field(default_factory=list)
    activities: list[dict[str, object]] = field(
        default_factory=lambda: [
            {"id": 3, "name": "Plumbing"},
            {"id": 5, "name": "Roofing"},
        ]
    )
    photos: dict[int, list[dict[str, object]]] = field(default_factory=dict)
    failing_ids: set[int] = field(default_factory=set)
    crashing_ids: set[int] = field(default_factory=set)
    failures_before_success: dict[int, int] = field(default_factory=dict)
    gates: dict[int, asyncio.Event] = field(default_factory=dict)
    list_error: ApiError | None = None
    my_projects_error: ApiError | None = None
    create_response: tuple[int, object] = (201, {"id": 42})
    create_error: ApiError | None = None
    create_gate: asyncio.Event | None = None
    photo_calls: list[int] = field(default_factory=list)
    list_calls: int = 0
    create_calls: list[tuple[list[tuple[str, str]], list[object]]] = field(
        default_factory=list
    )

    async def create_project(self, fields, files):  # type: ignore[no-untyped-def]
        self.create_calls.append((fields, files))
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.create_error is not None:
            raise self.create_error
        return self.create_response

    async def list_eligible_projects(self) -> list[dict[str, object]]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.eligible_projects)

    async def list_my_projects(self) -> list[dict[str, object]]:
        if self.my_projects_error is not None:
            raise self.my_projects_error
        return list(self.my_projects)

    async def list_activities(self) -> list[dict[str, object]]:
        return list(self.activities)

    async def get_photos(self, project_id: int) -> list[dict[str, object]]:
        self.photo_calls.append(project_id)
        gate = self.gates.get(project_id)
        if gate is not None:
            await gate.wait()
        if project_id in self.crashing_ids:
            raise RuntimeError(f"photo backend crashed for {project_id}")
        if project_id in self.failing_ids:
            raise ServerError(500, {"detail": "photo lookup failed"})
        remaining = self.failures_before_success.get(project_id, 0)
        if remaining:
            self.failures_before_success[project_id] = remaining - 1
            raise ServerError(503, None)
        return list(self.photos.get(project_id, []))


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Fake identity provider returning a fixed account."""

    account: Account | None = field(
        default_factory=lambda: Account(login="provider", firstName="Ana")
    )
    error: ApiError | None = None
    is_authenticated: bool = False
    calls: int = 0

    async def identity(self) -> Account | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        self.is_authenticated = self.account is not None
        return self.account


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url="http://board.test")


@pytest.fixture
def project_client() -> FakeProjectApiClient:
    return FakeProjectApiClient(
        photos={
            1: [photo_row(1, "/a.png")],
            2: [photo_row(2, "/b.png"), photo_row(2, "/c.png")],
        }
    )


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()
