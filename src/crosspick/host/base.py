"""Boundary between crosspick and the repository host's API.

The orchestrator and the merge-strategy resolver only talk to the host through
``HostClient``, which keeps them independent of the transport and easy to test
against an in-memory implementation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Set

from ..models import CreatedPullRequest, PullRequest


class HostClient(ABC):
    """Abstract repository host (source repository bound at construction)."""

    @abstractmethod
    def get_pull_request(self, number: int) -> PullRequest:
        """Fetch a snapshot of the pull request with the given number."""
        pass

    @abstractmethod
    def is_merged(self, pull: PullRequest) -> bool:
        pass

    @abstractmethod
    def list_commits(self, pull: PullRequest) -> List[str]:
        """Return the pull request's commit hashes in listed (oldest first) order."""
        pass

    @abstractmethod
    def get_merge_commit_sha(self, pull: PullRequest) -> Optional[str]:
        pass

    @abstractmethod
    def get_commit_parents(self, sha: str) -> List[str]:
        """Return the parent hashes of a commit in the source repository."""
        pass

    @abstractmethod
    def list_pull_requests_for_commit(self, sha: str) -> Set[int]:
        """Return the numbers of the pull requests associated with a commit."""
        pass

    @abstractmethod
    def create_comment(self, owner: str, repo: str, issue_number: int, body: str):
        pass

    @abstractmethod
    def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
        allow_maintainer_edits: bool = True,
    ) -> CreatedPullRequest:
        """Open a pull request. A rejection is reported through the status."""
        pass

    @abstractmethod
    def request_reviewers(
        self, owner: str, repo: str, pull_number: int, reviewers: Sequence[str]
    ) -> int:
        """Request reviews and return the response status."""
        pass
