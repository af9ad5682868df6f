"""Merge-strategy detection and commit selection.

GitHub integrates a pull request in one of three ways, and each leaves a
different trace behind:

- merge commit: ``merge_commit_sha`` has two parents; the pull request's own
  commits are reachable and can be replayed as listed.
- squash: ``merge_commit_sha`` is a brand new single-parent commit that no
  commit of the pull request points to.
- rebase: ``merge_commit_sha`` is the tip of the rebased commits, so both it
  and its first parent are associated with the pull request.

The squash/rebase distinction is a heuristic. A rebased pull request whose
parent commit also belongs to another pull request can be misreported.
"""

import logging
from typing import Callable, List, Optional

from .git_driver import GitDriver
from .host import HostClient
from .models import MergeStrategy, PullRequest

log = logging.getLogger(__name__)

# Pinning fetched commits under this remote keeps them from being pruned
PINNED_REMOTE = "origin"


def classify_merge_commit(
    merge_commit_sha: Optional[str],
    parent_count: int,
    is_associated: Callable[[], bool],
) -> MergeStrategy:
    """Classify a merge from the merge commit's shape.

    Args:
        merge_commit_sha: The pull request's merge commit, None if unknown.
        parent_count: Number of parents of the merge commit.
        is_associated: Returns whether both the merge commit and its first
            parent belong to the pull request. Only called for single-parent
            merge commits.
    """
    if not merge_commit_sha or parent_count == 0:
        return MergeStrategy.UNKNOWN
    if parent_count > 1:
        return MergeStrategy.MERGE_COMMIT
    if is_associated():
        return MergeStrategy.REBASED
    return MergeStrategy.SQUASHED


class MergeStrategyResolver:
    def __init__(self, host: HostClient, driver: GitDriver):
        self.host = host
        self.driver = driver

    def _is_associated(self, sha: str, pull: PullRequest) -> bool:
        return pull.number in self.host.list_pull_requests_for_commit(sha)

    def classify(self, pull: PullRequest) -> MergeStrategy:
        merge_commit_sha = self.host.get_merge_commit_sha(pull)
        if not merge_commit_sha:
            log.info("No merge commit found, likely not merged yet.")
            return MergeStrategy.UNKNOWN

        parents = self.host.get_commit_parents(merge_commit_sha)

        def both_associated() -> bool:
            return self._is_associated(parents[0], pull) and self._is_associated(
                merge_commit_sha, pull
            )

        strategy = classify_merge_commit(merge_commit_sha, len(parents), both_associated)
        log.info(f"Pull request #{pull.number} was merged as: {strategy.value}")
        return strategy

    def _pin(self, sha: str, depth: int):
        self.driver.fetch(f"+{sha}:refs/remotes/{PINNED_REMOTE}/{sha}", depth)

    def select_commits(
        self, pull: PullRequest, strategy: MergeStrategy, pull_commits: List[str]
    ) -> List[str]:
        """Return the commits that make up the pull request, oldest first.

        Args:
            pull: The merged pull request.
            strategy: Result of classify().
            pull_commits: The pull request's own commit list from the host.
        """
        merge_commit_sha = self.host.get_merge_commit_sha(pull)

        match strategy:
            case MergeStrategy.SQUASHED:
                # The squashed commit and its parent
                self._pin(merge_commit_sha, depth=2)
                return [merge_commit_sha]
            case MergeStrategy.REBASED:
                # +1 in case this concerns a shallowly cloned repo
                self._pin(merge_commit_sha, depth=pull.commit_count + 1)
                commits = self.driver.list_commits_in_range(
                    f"{merge_commit_sha}~{pull.commit_count}..{merge_commit_sha}"
                )
                if len(commits) != pull.commit_count:
                    log.warning(
                        f"Expected {pull.commit_count} rebased commits, found {len(commits)}"
                    )
                return commits
            case MergeStrategy.MERGE_COMMIT:
                return list(pull_commits)
            case MergeStrategy.UNKNOWN:
                log.info(
                    "Could not detect merge strategy. Using commits from the pull request."
                )
                return list(pull_commits)
