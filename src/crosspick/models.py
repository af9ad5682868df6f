"""Data model for a single cherry-pick run.

A run reads one merged pull request (``PullRequest``), works out how it was
merged (``MergeStrategy``) and which commits to replay, then produces one
``BackportAttempt`` per target branch. The attempts are folded into a
``RunOutcome`` at the very end.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class MergeStrategy(str, Enum):
    """How the source pull request was integrated into its base branch."""

    MERGE_COMMIT = "merge-commit"
    SQUASHED = "squashed"
    REBASED = "rebased"
    UNKNOWN = "unknown"


class MergeCommitPolicy(str, Enum):
    """What to do when the pull request's commits contain merge commits."""

    FAIL = "fail"
    SKIP = "skip"

    @classmethod
    def parse(cls, value: str) -> "MergeCommitPolicy":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Expected 'merge_commits' to be either 'fail' or 'skip', but was '{value}'"
            )


class AttemptStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PullRequest:
    """Read-only snapshot of the source pull request.

    Attributes:
        number: Pull request number in the source repository.
        title: Pull request title.
        body: Pull request description (may be empty).
        author: Login of the pull request author.
        head_ref: Name of the head (source) branch.
        head_sha: Commit the head branch pointed to.
        base_ref: Name of the base branch the pull request targeted.
        base_sha: Commit the base branch pointed to.
        commit_count: Number of commits the host reports for the pull request.
        merge_commit_sha: Merge, squash or rebase tip commit; None until merged.
        merged: Merge status as reported in the pull request payload.
        merged_by: Login of whoever merged the pull request, if known.
        requested_reviewers: Logins of reviewers requested on the pull request.
        labels: Names of the labels on the pull request.
    """

    number: int
    title: str
    body: str
    author: str
    head_ref: str
    head_sha: str
    base_ref: str
    base_sha: str
    commit_count: int
    merge_commit_sha: Optional[str] = None
    merged: bool = False
    merged_by: Optional[str] = None
    requested_reviewers: Tuple[str, ...] = ()
    labels: Tuple[str, ...] = ()

    def has_label(self, name: str) -> bool:
        return name in self.labels


@dataclass(frozen=True)
class CreatedPullRequest:
    """Result of asking the host to open a pull request.

    ``number`` is only set when the host accepted the request.
    """

    status: int
    number: Optional[int] = None
    data: Optional[dict] = None

    @property
    def ok(self) -> bool:
        return self.status == 201 and self.number is not None


@dataclass(frozen=True)
class BackportAttempt:
    """Working state for one target branch."""

    target: str
    branch: str
    status: AttemptStatus = AttemptStatus.PENDING
    reason: Optional[str] = None
    created_pull_number: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AttemptStatus.SUCCEEDED

    def succeed(self, created_pull_number: int) -> "BackportAttempt":
        return BackportAttempt(
            target=self.target,
            branch=self.branch,
            status=AttemptStatus.SUCCEEDED,
            created_pull_number=created_pull_number,
        )

    def fail(self, reason: str) -> "BackportAttempt":
        return BackportAttempt(
            target=self.target,
            branch=self.branch,
            status=AttemptStatus.FAILED,
            reason=reason,
        )


@dataclass
class RunOutcome:
    """Per-target results of one run plus an optional global failure."""

    results: Dict[str, bool] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def from_attempts(cls, attempts: List[BackportAttempt]) -> "RunOutcome":
        outcome = cls()
        for attempt in attempts:
            outcome.record(attempt.target, attempt.succeeded)
        return outcome

    @classmethod
    def failed(cls, error: str) -> "RunOutcome":
        return cls(error=error)

    def record(self, target: str, success: bool):
        # A target that failed once stays failed.
        self.results[target] = self.results.get(target, True) and success

    @property
    def was_successful(self) -> bool:
        return self.error is None and all(self.results.values())

    def by_target_lines(self) -> List[str]:
        return [
            f"{target}={'true' if success else 'false'}"
            for target, success in self.results.items()
        ]
