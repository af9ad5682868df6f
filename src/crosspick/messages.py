"""Comments posted back on the source pull request."""

from enum import IntEnum
from typing import Sequence

from .errors import CrosspickError
from .git_driver import public_clone_url
from .utils.branch_names import OPERATION_VERB, UPSTREAM_REMOTE
from .utils.templates import render_template


class FailureReason(IntEnum):
    # Codes match the published reason table; 2, 5 and 6 are not raised by
    # the in-place checkout flow but keep their numbers reserved.

    UNKNOWN = 1
    WORKTREE = 2
    CREATE_BRANCH = 3
    CHERRY_PICK = 4
    MISSING_COMMITS = 5
    MISSING_COMMITS_AFTER_FETCH = 6


REASONS = {
    FailureReason.UNKNOWN: "due to an unknown script error",
    FailureReason.WORKTREE: "because it was unable to create/access the git worktree directory",
    FailureReason.CREATE_BRANCH: "because it was unable to create a new branch",
    FailureReason.CHERRY_PICK: "because it was unable to cherry-pick the commit(s)",
    FailureReason.MISSING_COMMITS: "because 1 or more of the commits are not available",
    FailureReason.MISSING_COMMITS_AFTER_FETCH: "because 1 or more of the commits are not available",
}


def _render(name: str, **context) -> str:
    return render_template("markdown", name, verb=OPERATION_VERB, **context)


def not_merged() -> str:
    return _render("not_merged")


def merge_commits_present(merge_commits: Sequence[str]) -> str:
    return _render("merge_commits_present", merge_commits=list(merge_commits))


def no_commits() -> str:
    return _render("no_commits")


def fetch_target_failure(target: str, upstream_repo: str) -> str:
    return _render("fetch_target_failure", target=target, upstream_repo=upstream_repo)


def script_failure(
    target: str,
    reason: FailureReason,
    base_sha: str,
    head_sha: str,
    branch: str,
    upstream_repo: str,
    remote: str = UPSTREAM_REMOTE,
) -> str:
    """Describe a failed git step together with a recipe to finish by hand.

    The recipe only ever uses the public clone URL.
    """
    return _render(
        "script_failure",
        target=target,
        reason=REASONS.get(reason, REASONS[FailureReason.UNKNOWN]),
        code=int(reason),
        base_sha=base_sha,
        head_sha=head_sha,
        branch=branch,
        remote=remote,
        clone_url=public_clone_url(upstream_repo),
    )


def push_failure(branch: str, status: int, remote: str = UPSTREAM_REMOTE) -> str:
    return _render("push_failure", branch=branch, status=status, remote=remote)


def create_pr_failure(status: int) -> str:
    return _render("create_pr_failure", status=status)


def target_failure(target: str, error: CrosspickError) -> str:
    return _render("target_failure", target=target, kind=error.kind.value)


def success(target: str, upstream_repo: str, pull_number: int) -> str:
    return _render(
        "success", target=target, upstream_repo=upstream_repo, pull_number=pull_number
    )
