"""Pytest configuration and fixtures for crosspick tests."""

from typing import Dict, List, Optional, Sequence, Set

import pytest

from crosspick.config import CrosspickConfig
from crosspick.errors import CommandFailed, RefNotFound
from crosspick.host import HostClient
from crosspick.models import CreatedPullRequest, PullRequest


class FakeHost(HostClient):
    """In-memory HostClient that records everything posted to it."""

    def __init__(self, pull: PullRequest, commits: List[str]):
        self.pull = pull
        self.commits = commits
        self.merged = True
        self.parents: Dict[str, List[str]] = {}
        self.associations: Dict[str, Set[int]] = {}
        self.create_status = 201
        self.created_number = 1001
        self.reviewer_status = 201
        self.comments: List[tuple] = []
        self.created: List[dict] = []
        self.reviewer_requests: List[tuple] = []

    def get_pull_request(self, number: int) -> PullRequest:
        assert number == self.pull.number
        return self.pull

    def is_merged(self, pull: PullRequest) -> bool:
        return self.merged

    def list_commits(self, pull: PullRequest) -> List[str]:
        return list(self.commits)

    def get_merge_commit_sha(self, pull: PullRequest) -> Optional[str]:
        return pull.merge_commit_sha

    def get_commit_parents(self, sha: str) -> List[str]:
        return self.parents.get(sha, [])

    def list_pull_requests_for_commit(self, sha: str) -> Set[int]:
        return self.associations.get(sha, set())

    def create_comment(self, owner: str, repo: str, issue_number: int, body: str):
        self.comments.append((owner, repo, issue_number, body))

    def create_pull_request(
        self, owner, repo, title, body, head, base, allow_maintainer_edits=True
    ) -> CreatedPullRequest:
        self.created.append(
            dict(owner=owner, repo=repo, title=title, body=body, head=head, base=base)
        )
        if self.create_status != 201:
            return CreatedPullRequest(status=self.create_status, data={"message": "nope"})
        return CreatedPullRequest(status=201, number=self.created_number)

    def request_reviewers(
        self, owner: str, repo: str, pull_number: int, reviewers: Sequence[str]
    ) -> int:
        self.reviewer_requests.append((owner, repo, pull_number, list(reviewers)))
        return self.reviewer_status


class FakeDriver:
    """Records VCS calls; failures are configured per operation."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.merge_commits: List[str] = []
        self.range_commits: List[str] = []
        self.missing_refs: Set[str] = set()
        self.failing_refs: Set[str] = set()
        self.fail: Set[str] = set()
        self.push_status = 0

    def fetch(self, ref: str, depth: int, remote: str = "origin"):
        self.calls.append(("fetch", ref, depth, remote))
        if ref in self.missing_refs:
            raise RefNotFound(ref)
        if "fetch" in self.fail or ref in self.failing_refs:
            raise CommandFailed(f"git fetch {remote} {ref}", 1)

    def add_remote(self, upstream_repo: str, name: str = "upstream"):
        self.calls.append(("add_remote", upstream_repo, name))
        if "add_remote" in self.fail:
            raise CommandFailed(f"git remote add {name}", 3)

    def checkout_new_branch(self, branch: str, start: str, remote: str = "origin"):
        self.calls.append(("checkout_new_branch", branch, start, remote))
        if "checkout_new_branch" in self.fail:
            raise CommandFailed(f"git switch -c {branch}", 128)

    def cherry_pick(self, commit_shas):
        self.calls.append(("cherry_pick", list(commit_shas)))
        if "cherry_pick" in self.fail:
            raise CommandFailed("git cherry-pick -x", 1)

    def push(self, branch: str, remote: str = "origin") -> int:
        self.calls.append(("push", branch, remote))
        return self.push_status

    def list_merge_commits(self, revision_range: str) -> List[str]:
        self.calls.append(("list_merge_commits", revision_range))
        return list(self.merge_commits)

    def list_commits_in_range(self, revision_range: str) -> List[str]:
        self.calls.append(("list_commits_in_range", revision_range))
        return list(self.range_commits)

    def called(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


MERGE_SHA = "m" * 40


@pytest.fixture
def pull() -> PullRequest:
    return PullRequest(
        number=42,
        title="Fix the widget",
        body="Fixes #7",
        author="octocat",
        head_ref="fix-widget",
        head_sha="h" * 40,
        base_ref="master",
        base_sha="b" * 40,
        commit_count=3,
        merge_commit_sha=MERGE_SHA,
        merged=True,
        merged_by="merger",
        requested_reviewers=("alice", "merger"),
        labels=("cherry-pick to remote",),
    )


@pytest.fixture
def pull_commits() -> List[str]:
    return ["c1" * 20, "c2" * 20, "c3" * 20]


@pytest.fixture
def host(pull, pull_commits) -> FakeHost:
    fake = FakeHost(pull, pull_commits)
    # Two-parent merge commit by default
    fake.parents[MERGE_SHA] = ["b" * 40, pull_commits[-1]]
    return fake


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def config() -> CrosspickConfig:
    return CrosspickConfig(upstream_repo="upstream-org/widgets", branch_map={"master": "main"})
