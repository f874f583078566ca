"""Domain models for projects, photos and accounts."""

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Attachment:
    """Binary file attached to a project draft."""

    filename: str
    content: bytes
    content_type: str

    @classmethod
    def from_path(cls, path: Path | str) -> "Attachment":
        """Read a file from disk and infer its image content type."""
        file_path = Path(path)
        content = file_path.read_bytes()
        return cls(
            filename=file_path.name,
            content=content,
            content_type=detect_content_type(content),
        )


@dataclass(frozen=True)
class ProjectDraft:
    """Snapshot of the project form handed to the submitter."""

    title: str
    description: str
    activity_ids: tuple[int, ...] = ()
    attachment: Attachment | None = None


class EligibleProject(BaseModel):
    """Project returned by the eligible projects listing.

    Only ``id`` is interpreted; every other display field is kept as sent.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int


class Activity(BaseModel):
    """Selectable activity for a new project."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int


class Account(BaseModel):
    """Account of the authenticated user."""

    model_config = ConfigDict(extra="allow", frozen=True)

    login: str


class _PhotoOwner(BaseModel):
    id: int


class PhotoRecord(BaseModel):
    """Photo row as returned by the get-photo endpoint."""

    project_pic: _PhotoOwner = Field(alias="projectPIC")
    link: str

    def to_photo(self) -> "ProjectPhoto":
        """Map the wire record onto the display model."""
        return ProjectPhoto(project_id=self.project_pic.id, link=self.link)


@dataclass(frozen=True)
class ProjectPhoto:
    """Photo link attached to a project."""

    project_id: int
    link: str


def detect_content_type(content: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if content.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if content[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"
