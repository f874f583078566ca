"""Tests for project submission."""

import asyncio

import httpx

from tender_board.adapters.project_api_client import HttpxProjectApiClient
from tender_board.domain.errors import DecodeError, ServerError, TransportError
from tender_board.domain.outcomes import SubmitAck, SubmitError
from tender_board.domain.projects import Attachment, ProjectDraft
from tender_board.services.submission import ProjectSubmitter, encode_draft

from tests.conftest import FakeProjectApiClient

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"


def _http_submitter(
    handler,  # type: ignore[no-untyped-def]
) -> ProjectSubmitter:
    async_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://board.test"
    )
    return ProjectSubmitter(HttpxProjectApiClient(http_client=async_client))


def test_encode_draft_sends_one_part_per_activity() -> None:
    draft = ProjectDraft(
        title="Roof",
        description="Leaking roof",
        activity_ids=(3, 3, 5),
        attachment=Attachment("roof.png", PNG_BYTES, "image/png"),
    )

    fields, files = encode_draft(draft)

    assert fields == [
        ("activities", "3"),
        ("activities", "3"),
        ("activities", "5"),
        ("description", "Leaking roof"),
        ("title", "Roof"),
    ]
    assert files == [("images", ("roof.png", PNG_BYTES, "image/png"))]


def test_encode_empty_draft_keeps_every_field() -> None:
    fields, files = encode_draft(ProjectDraft(title="", description=""))

    assert fields == [("activities", ""), ("description", ""), ("title", "")]
    assert files == [("images", ("", b"", "application/octet-stream"))]


def test_submit_returns_ack_with_body() -> None:
    client = FakeProjectApiClient()
    submitter = ProjectSubmitter(client)

    result = asyncio.run(submitter.submit(ProjectDraft(title="A", description="B")))

    assert result == SubmitAck(status_code=201, body={"id": 42})
    assert len(client.create_calls) == 1


def test_submit_twice_sends_two_requests() -> None:
    client = FakeProjectApiClient()
    submitter = ProjectSubmitter(client)
    draft = ProjectDraft(title="A", description="B", activity_ids=(1,))

    asyncio.run(submitter.submit(draft))
    asyncio.run(submitter.submit(draft))

    assert len(client.create_calls) == 2


def test_submit_posts_multipart_form() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json={"id": 7, "title": "Roof"})

    submitter = _http_submitter(handler)
    draft = ProjectDraft(
        title="Roof",
        description="Leaking roof",
        activity_ids=(3, 5),
        attachment=Attachment("roof.png", PNG_BYTES, "image/png"),
    )

    result = asyncio.run(submitter.submit(draft))

    assert isinstance(result, SubmitAck)
    assert result.body == {"id": 7, "title": "Roof"}
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/create-new-project"
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert request.headers["accept"] == "*/*"
    body = request.content
    assert body.count(b'name="activities"') == 2
    assert b'filename="roof.png"' in body
    assert PNG_BYTES in body
    assert b"Leaking roof" in body


def test_empty_draft_with_server_error_yields_submit_error() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(500, json={"title": "Internal Server Error"})

    submitter = _http_submitter(handler)
    draft = ProjectDraft(title="", description="", activity_ids=(), attachment=None)

    result = asyncio.run(submitter.submit(draft))

    assert isinstance(result, SubmitError)
    assert isinstance(result.cause, ServerError)
    assert result.cause.status_code == 500
    assert result.payload == {"title": "Internal Server Error"}
    assert len(requests) == 1
    body = requests[0].content
    for name in (b"images", b"activities", b"description", b"title"):
        assert body.count(b'name="' + name + b'"') == 1


def test_transport_failure_yields_submit_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    submitter = _http_submitter(handler)

    result = asyncio.run(submitter.submit(ProjectDraft(title="A", description="B")))

    assert isinstance(result, SubmitError)
    assert isinstance(result.cause, TransportError)
    assert result.payload is None


def test_undecodable_response_body_yields_submit_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            201, headers={"Content-Encoding": "gzip"}, content=b"not-gzip"
        )

    submitter = _http_submitter(handler)

    result = asyncio.run(submitter.submit(ProjectDraft(title="A", description="B")))

    assert isinstance(result, SubmitError)
    assert isinstance(result.cause, DecodeError)
