"""Aggregator-owned photo collection."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from tender_board.domain.projects import ProjectPhoto


@dataclass
class PhotoCollection:
    """Unordered, append-only multiset of project photos."""

    _photos: list[ProjectPhoto] = field(default_factory=list)

    def extend(self, photos: Iterable[ProjectPhoto]) -> None:
        """Merge a batch of photos."""
        self._photos.extend(photos)

    def clear(self) -> None:
        """Drop every photo; only done when a new refresh cycle starts."""
        self._photos.clear()

    def for_project(self, project_id: int) -> list[ProjectPhoto]:
        """Return the photos of one project."""
        return [photo for photo in self._photos if photo.project_id == project_id]

    def snapshot(self) -> list[ProjectPhoto]:
        """Return a copy of the current contents."""
        return list(self._photos)

    def __iter__(self) -> Iterator[ProjectPhoto]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._photos)
