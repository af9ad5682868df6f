import github
from github import GithubException
from github import PullRequest as GithubPullRequest
from github import Repository as GithubRepository
import logging
from typing import Dict, List, Optional, Sequence, Set

from ..errors import HostApiError
from ..models import CreatedPullRequest, PullRequest
from .base import HostClient

log = logging.getLogger(__name__)


def pull_request_from_github(pr: GithubPullRequest.PullRequest) -> PullRequest:
    return PullRequest(
        number=pr.number,
        title=pr.title or "",
        body=pr.body or "",
        author=pr.user.login if pr.user else "",
        head_ref=pr.head.ref,
        head_sha=pr.head.sha,
        base_ref=pr.base.ref,
        base_sha=pr.base.sha,
        commit_count=pr.commits,
        merge_commit_sha=pr.merge_commit_sha,
        merged=bool(pr.merged),
        merged_by=pr.merged_by.login if pr.merged_by else None,
        requested_reviewers=tuple(r.login for r in pr.requested_reviewers),
        labels=tuple(label.name for label in pr.labels),
    )


class GithubHost(HostClient):
    """HostClient backed by PyGithub, bound to the source repository."""

    def __init__(self, gh: github.Github, source_repo: str):
        self.gh = gh
        self.source_repo_str = source_repo
        self._source: Optional[GithubRepository.Repository] = None
        self._pulls: Dict[int, GithubPullRequest.PullRequest] = {}

    @classmethod
    def from_token(cls, token: str, source_repo: str) -> "GithubHost":
        return cls(github.Github(auth=github.Auth.Token(token)), source_repo)

    def _source_repo(self) -> GithubRepository.Repository:
        if self._source is None:
            self._source = self._call(
                "Loading repository", self.gh.get_repo, self.source_repo_str
            )
        return self._source

    def _pull(self, number: int) -> GithubPullRequest.PullRequest:
        if number not in self._pulls:
            self._pulls[number] = self._call(
                f"Loading pull request #{number}", self._source_repo().get_pull, number
            )
        return self._pulls[number]

    def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except GithubException as e:
            log.error(f"{operation} failed: {e.status} {e.data}")
            raise HostApiError(operation, e.status)

    def get_pull_request(self, number: int) -> PullRequest:
        log.info(f"Retrieve pull request data for #{number}")
        return pull_request_from_github(self._pull(number))

    def is_merged(self, pull: PullRequest) -> bool:
        log.info(f"Check whether pull request #{pull.number} is merged")
        return self._call(
            f"Checking merge state of #{pull.number}", self._pull(pull.number).is_merged
        )

    def list_commits(self, pull: PullRequest) -> List[str]:
        log.info(f"Retrieving the commits from pull request #{pull.number}")

        def collect():
            return [commit.sha for commit in self._pull(pull.number).get_commits()]

        return self._call(f"Listing commits of #{pull.number}", collect)

    def get_merge_commit_sha(self, pull: PullRequest) -> Optional[str]:
        return pull.merge_commit_sha

    def get_commit_parents(self, sha: str) -> List[str]:
        commit = self._call(
            f"Loading commit {sha}", self._source_repo().get_commit, sha
        )
        return [parent.sha for parent in commit.parents]

    def list_pull_requests_for_commit(self, sha: str) -> Set[int]:
        def collect():
            return {pr.number for pr in self._source_repo().get_commit(sha).get_pulls()}

        return self._call(f"Listing pull requests for {sha}", collect)

    def create_comment(self, owner: str, repo: str, issue_number: int, body: str):
        log.info(f"Create comment: {body}")

        def post():
            issue = self.gh.get_repo(f"{owner}/{repo}").get_issue(issue_number)
            return issue.create_comment(body)

        return self._call(f"Commenting on #{issue_number}", post)

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
        log.info(f"Create PR: {body}")
        try:
            pr = self.gh.get_repo(f"{owner}/{repo}").create_pull(
                title=title,
                body=body,
                head=head,
                base=base,
                maintainer_can_modify=allow_maintainer_edits,
            )
        except GithubException as e:
            return CreatedPullRequest(status=e.status, data=e.data)
        return CreatedPullRequest(status=201, number=pr.number)

    def request_reviewers(
        self, owner: str, repo: str, pull_number: int, reviewers: Sequence[str]
    ) -> int:
        log.info(f"Request reviewers: {', '.join(reviewers)}")
        try:
            pr = self.gh.get_repo(f"{owner}/{repo}").get_pull(pull_number)
            pr.create_review_request(reviewers=list(reviewers))
        except GithubException as e:
            log.error(f"Requesting reviewers failed: {e.status} {e.data}")
            return e.status
        return 201
