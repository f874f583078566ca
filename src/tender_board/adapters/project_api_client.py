"""Project board REST API client."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx

from tender_board.domain.errors import DecodeError, ServerError, TransportError

CREATE_PROJECT_PATH = "/api/create-new-project"
GET_PHOTO_PATH = "/api/get-photo"
ACTIVITIES_PATH = "/api/activities"
MY_PROJECTS_PATH = "/api/myProjects"


class ProjectApiClient(Protocol):
    """Interface for project board API interactions."""

    async def create_project(
        self,
        fields: list[tuple[str, str]],
        files: list[tuple[str, tuple[str | None, bytes, str | None]]],
    ) -> tuple[int, object]:
        """Post a multipart project creation request and return status and body."""

    async def list_eligible_projects(self) -> list[dict[str, object]]:
        """Return the raw eligible project list."""

    async def list_my_projects(self) -> list[dict[str, object]]:
        """Return the raw project list of the signed-in customer."""

    async def list_activities(self) -> list[dict[str, object]]:
        """Return the raw activity catalog."""

    async def get_photos(self, project_id: int) -> list[dict[str, object]]:
        """Return the raw photo rows of a project."""


@dataclass
class HttpxProjectApiClient(ProjectApiClient):
    """HTTPX-backed project board client."""

    http_client: httpx.AsyncClient
    eligible_projects_path: str = "/api/eligibleProjects"

    @classmethod
    def create(
        cls,
        base_url: str,
        auth_token: str | None = None,
        timeout: float | None = None,
        eligible_projects_path: str = "/api/eligibleProjects",
    ) -> "HttpxProjectApiClient":
        """Create a project board client with a managed httpx session."""
        return cls(
            http_client=build_http_client(base_url, auth_token, timeout),
            eligible_projects_path=eligible_projects_path,
        )

    async def create_project(
        self,
        fields: list[tuple[str, str]],
        files: list[tuple[str, tuple[str | None, bytes, str | None]]],
    ) -> tuple[int, object]:
        """Post the project form; the multipart boundary is left to httpx."""
        response = await _send(
            self.http_client,
            "POST",
            CREATE_PROJECT_PATH,
            data=_multidict(fields),
            files=files,
            headers={"Accept": "*/*"},
        )
        return response.status_code, _body(response)

    async def list_eligible_projects(self) -> list[dict[str, object]]:
        """Fetch projects matching the provider's activities."""
        response = await _send(self.http_client, "GET", self.eligible_projects_path)
        return _json_list(response)

    async def list_my_projects(self) -> list[dict[str, object]]:
        """Fetch projects created by the signed-in customer."""
        response = await _send(self.http_client, "GET", MY_PROJECTS_PATH)
        return _json_list(response)

    async def list_activities(self) -> list[dict[str, object]]:
        """Fetch the activity catalog."""
        response = await _send(self.http_client, "GET", ACTIVITIES_PATH)
        return _json_list(response)

    async def get_photos(self, project_id: int) -> list[dict[str, object]]:
        """Fetch photo rows for a project, posted as a multipart form."""
        response = await _send(
            self.http_client,
            "POST",
            GET_PHOTO_PATH,
            files=[("idProject", (None, str(project_id).encode(), None))],
        )
        return _json_list(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def build_http_client(
    base_url: str, auth_token: str | None = None, timeout: float | None = None
) -> httpx.AsyncClient:
    """Build the shared httpx session; a None timeout waits indefinitely."""
    headers: dict[str, str] = {}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)


async def _send(
    http_client: httpx.AsyncClient, method: str, path: str, **kwargs: object
) -> httpx.Response:
    """Send a request and translate failures into API errors."""
    try:
        response = await http_client.request(method, path, **kwargs)
    except httpx.DecodingError as exc:
        raise DecodeError(f"Undecodable body from {method} {path}: {exc}") from exc
    except httpx.RequestError as exc:
        raise TransportError(f"{method} {path} failed: {exc}") from exc
    if not response.is_success:
        raise ServerError(response.status_code, _body(response))
    return response


def _body(response: httpx.Response) -> object:
    """Return the JSON body when there is one, else the raw text."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def _json_list(response: httpx.Response) -> list[dict[str, object]]:
    """Decode a JSON array of objects or raise DecodeError."""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Invalid JSON from {response.request.url}") from exc
    if not isinstance(payload, list) or not all(
        isinstance(item, dict) for item in payload
    ):
        raise DecodeError(f"Expected a JSON array from {response.request.url}")
    return payload


def _multidict(fields: list[tuple[str, str]]) -> dict[str, list[str]]:
    """Group repeated form fields so httpx emits one part per value."""
    grouped: dict[str, list[str]] = {}
    for name, value in fields:
        grouped.setdefault(name, []).append(value)
    return grouped

