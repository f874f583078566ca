"""Result types for submissions and photo fan-out legs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from tender_board.domain.errors import ApiError
from tender_board.domain.projects import ProjectPhoto

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying its payload."""

    value: T


@dataclass(frozen=True)
class Failure:
    """Failed outcome carrying its cause."""

    cause: ApiError


FetchOutcome = Success[list[ProjectPhoto]] | Failure


@dataclass(frozen=True)
class SubmitAck:
    """Server acknowledged a project submission."""

    status_code: int
    body: object


@dataclass(frozen=True)
class SubmitError:
    """Project submission failed; payload is whatever the server sent, if anything."""

    cause: ApiError
    payload: object = None


SubmitResult = SubmitAck | SubmitError


class LegState(str, Enum):
    """Lifecycle of a single photo lookup."""

    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class AggregatorState(str, Enum):
    """Lifecycle of the eligible project aggregator."""

    IDLE = "IDLE"
    LISTING = "LISTING"
    FANNING_OUT = "FANNING_OUT"
    SETTLED = "SETTLED"


@dataclass
class PhotoLeg:
    """One project's photo lookup within a refresh cycle."""

    project_id: int
    generation: int
    state: LegState = LegState.PENDING
    outcome: FetchOutcome | None = None

    def resolve(self, outcome: FetchOutcome) -> None:
        """Move the leg to its terminal state."""
        self.outcome = outcome
        if isinstance(outcome, Success):
            self.state = LegState.SUCCEEDED
        else:
            self.state = LegState.FAILED


@dataclass(frozen=True)
class LegSummary:
    """Counts of leg outcomes for one refresh cycle."""

    total: int
    succeeded: int
    failed: int
    failed_project_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_legs(cls, legs: list[PhotoLeg]) -> "LegSummary":
        """Summarize the terminal states of the given legs."""
        failed_ids = [leg.project_id for leg in legs if leg.state is LegState.FAILED]
        succeeded = sum(1 for leg in legs if leg.state is LegState.SUCCEEDED)
        return cls(
            total=len(legs),
            succeeded=succeeded,
            failed=len(failed_ids),
            failed_project_ids=failed_ids,
        )
