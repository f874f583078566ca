"""Project creation requests."""

import logging
from dataclasses import dataclass

from tender_board.adapters.project_api_client import ProjectApiClient
from tender_board.domain.errors import ApiError, ServerError
from tender_board.domain.outcomes import SubmitAck, SubmitError, SubmitResult
from tender_board.domain.projects import ProjectDraft

_logger = logging.getLogger(__name__)

FileParts = list[tuple[str, tuple[str | None, bytes, str | None]]]


@dataclass
class ProjectSubmitter:
    """Posts project drafts as multipart forms, once per call."""

    client: ProjectApiClient

    async def submit(self, draft: ProjectDraft) -> SubmitResult:
        """Send the draft and report the outcome of the single round trip."""
        fields, files = encode_draft(draft)
        try:
            status_code, body = await self.client.create_project(fields, files)
        except ApiError as exc:
            payload = exc.payload if isinstance(exc, ServerError) else None
            _logger.warning("Project submission failed: %s", exc)
            return SubmitError(cause=exc, payload=payload)
        _logger.info("Project submitted: status=%s", status_code)
        return SubmitAck(status_code=status_code, body=body)


def encode_draft(draft: ProjectDraft) -> tuple[list[tuple[str, str]], FileParts]:
    """Build the multipart fields for a draft.

    Activities are sent as one ``activities`` part per id. An empty selection
    still sends a single empty part, and a missing attachment an empty
    ``images`` part, so the server always receives all four fields.
    """
    fields: list[tuple[str, str]] = [
        ("activities", str(activity_id)) for activity_id in draft.activity_ids
    ]
    if not fields:
        fields.append(("activities", ""))
    fields.append(("description", draft.description))
    fields.append(("title", draft.title))

    attachment = draft.attachment
    if attachment is None:
        files: FileParts = [("images", ("", b"", "application/octet-stream"))]
    else:
        files = [
            (
                "images",
                (attachment.filename, attachment.content, attachment.content_type),
            )
        ]
    return fields, files
