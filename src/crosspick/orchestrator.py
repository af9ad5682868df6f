"""The cherry-pick run.

One run handles one merged pull request:

1. load the pull request (a missing trigger label or an unmerged pull request
   ends the run without attempting anything),
2. resolve the target branches through the branch map,
3. fetch the pull request's history and select the commits to replay,
4. for each target, sequentially: add the upstream remote, fetch the target,
   create the working branch, cherry-pick, push, open the pull request,
   request reviewers and report back,
5. fold the per-target attempts into a RunOutcome.

Failures of a single target are reported on the source pull request and
recorded in the outcome; they never stop other targets. Anything else is
caught once in ``CherryPickRun.run`` and turns into a failed run.
"""

import json
import logging
from typing import List, Optional

from . import messages
from .config import CrosspickConfig
from .errors import CommandFailed, CrosspickError, HostApiError, PolicyViolation, RefNotFound
from .git_driver import GitDriver, commit_range
from .host import HostClient
from .merge_strategy import MergeStrategyResolver
from .messages import FailureReason
from .models import BackportAttempt, MergeCommitPolicy, PullRequest, RunOutcome
from .utils import placeholders
from .utils.branch_names import UPSTREAM_REMOTE, working_branch_name

log = logging.getLogger(__name__)

TARGET_FETCH_DEPTH = 1


class CherryPickRun:
    """Drives one run for a pull request of the source repository.

    Attributes:
        host: Repository host client bound to the source repository.
        driver: VCS driver operating on the local checkout.
        config: Run configuration (upstream repository, policies, templates).
        owner: Owner of the source repository.
        repo: Name of the source repository.
    """

    def __init__(
        self,
        host: HostClient,
        driver: GitDriver,
        config: CrosspickConfig,
        owner: str,
        repo: str,
        resolver: Optional[MergeStrategyResolver] = None,
    ):
        self.host = host
        self.driver = driver
        self.config = config
        self.owner = owner
        self.repo = repo
        self.resolver = resolver or MergeStrategyResolver(host, driver)

    def run(self, pull_number: int) -> RunOutcome:
        try:
            return self._run(pull_number)
        except Exception as e:
            log.exception(f"Cherry-pick of #{pull_number} failed unexpectedly")
            return RunOutcome.failed(
                str(e) or "An unexpected error occurred. Please check the logs for details"
            )

    def _run(self, pull_number: int) -> RunOutcome:
        pull = self.host.get_pull_request(pull_number)

        trigger_label = self.config.trigger_label
        if trigger_label and not pull.has_label(trigger_label):
            log.info(f"Pull request #{pull.number} has no matching label")
            return RunOutcome()

        if not self.host.is_merged(pull):
            log.info(f"Pull request #{pull.number} is not merged, nothing to do")
            self._comment(pull, messages.not_merged())
            return RunOutcome()

        targets = self.resolve_targets(pull)
        log.info(f"Target branches: {', '.join(targets)}")

        log.info(f"Fetching all the commits from the pull request: {pull.commit_count + 1}")
        # +1 in case this concerns a shallowly cloned repo
        self.driver.fetch(f"refs/pull/{pull.number}/head", depth=pull.commit_count + 1)

        pull_commits = self.host.list_commits(pull)
        strategy = self.resolver.classify(pull)
        selected = self.resolver.select_commits(pull, strategy, pull_commits)
        log.info(f"Found commits to cherry-pick: {', '.join(selected)}")

        try:
            selected = self.apply_merge_commit_policy(pull_commits, selected)
        except PolicyViolation as e:
            log.error(e.message)
            self._comment(pull, e.message)
            return RunOutcome(results={target: False for target in targets})

        log.info(f"Will cherry-pick the following commits: {', '.join(selected)}")

        attempts = [self.process_target(pull, selected, target) for target in targets]
        return RunOutcome.from_attempts(attempts)

    def resolve_targets(self, pull: PullRequest) -> List[str]:
        """Return the upstream branches to cherry-pick to, without duplicates."""
        names = [pull.base_ref, *self.config.target_branches]

        pattern = self.config.label_pattern
        if pattern is not None:
            for label in pull.labels:
                match = pattern.search(label)
                if match:
                    names.append(match.group(1))

        targets = []
        for name in names:
            target = self.config.resolve_branch(name)
            if target not in targets:
                targets.append(target)
        return targets

    def apply_merge_commit_policy(
        self, pull_commits: List[str], selected: List[str]
    ) -> List[str]:
        """Check the pull request for merge commits and apply the configured policy.

        Raises:
            PolicyViolation: If merge commits are present and the policy is
                'fail', or if no commits are left to cherry-pick.
        """
        log.info("Checking the merged pull request for merge commits")
        merge_commits = []
        if pull_commits:
            merge_commits = self.driver.list_merge_commits(commit_range(pull_commits))
        log.info(f"Encountered {len(merge_commits) or 'no'} merge commits")

        if merge_commits:
            match self.config.merge_commits:
                case MergeCommitPolicy.FAIL:
                    raise PolicyViolation(messages.merge_commits_present(merge_commits))
                case MergeCommitPolicy.SKIP:
                    log.info(f"Skipping merge commits: {', '.join(merge_commits)}")
                    skipped = set(merge_commits)
                    selected = [sha for sha in selected if sha not in skipped]

        if not selected:
            raise PolicyViolation(messages.no_commits())
        return selected

    def process_target(
        self, pull: PullRequest, commits: List[str], target: str
    ) -> BackportAttempt:
        """Cherry-pick commits onto one target and open a pull request for it."""
        attempt = BackportAttempt(
            target=target, branch=working_branch_name(pull.number, target)
        )
        log.info(f"Cherry-picking to target branch '{target}' on remote '{UPSTREAM_REMOTE}'")

        try:
            attempt = self._attempt(pull, commits, attempt)
        except CrosspickError as e:
            log.error(f"Cherry-pick to '{target}' failed: {e}")
            attempt = attempt.fail(messages.target_failure(target, e))

        if attempt.succeeded:
            body = messages.success(
                target, self.config.upstream_repo, attempt.created_pull_number
            )
        else:
            log.error(attempt.reason)
            body = attempt.reason

        try:
            self._comment(pull, body)
        except CrosspickError as e:
            log.error(f"Could not report the result for '{target}': {e}")
            if attempt.succeeded:
                attempt = attempt.fail(messages.target_failure(target, e))
        return attempt

    def _attempt(
        self, pull: PullRequest, commits: List[str], attempt: BackportAttempt
    ) -> BackportAttempt:
        target = attempt.target
        branch = attempt.branch
        upstream_repo = self.config.upstream_repo

        try:
            self.driver.add_remote(upstream_repo, UPSTREAM_REMOTE)
        except CommandFailed as e:
            log.warning(f"{e.message}; assuming remote '{UPSTREAM_REMOTE}' already exists")

        try:
            self.driver.fetch(target, depth=TARGET_FETCH_DEPTH, remote=UPSTREAM_REMOTE)
        except RefNotFound:
            return attempt.fail(messages.fetch_target_failure(target, upstream_repo))
        except CommandFailed:
            return attempt.fail(self._script_failure(pull, attempt, FailureReason.UNKNOWN))

        log.info(f"Start cherry-pick to {branch}")
        try:
            self.driver.checkout_new_branch(branch, target, UPSTREAM_REMOTE)
        except CommandFailed:
            return attempt.fail(
                self._script_failure(pull, attempt, FailureReason.CREATE_BRANCH)
            )

        try:
            self.driver.cherry_pick(commits)
        except CommandFailed:
            return attempt.fail(
                self._script_failure(pull, attempt, FailureReason.CHERRY_PICK)
            )

        log.info(f"Push branch {branch} to remote {UPSTREAM_REMOTE}")
        status = self.driver.push(branch, UPSTREAM_REMOTE)
        if status != 0:
            return attempt.fail(messages.push_failure(branch, status))

        upstream_owner, upstream_name = self.config.upstream_owner_and_name
        log.info(f"Create PR for {branch}")
        created = self.host.create_pull_request(
            upstream_owner,
            upstream_name,
            title=placeholders.render(
                self.config.pull.title, pull, target, self.owner, self.repo
            ),
            body=placeholders.render(
                self.config.pull.description, pull, target, self.owner, self.repo
            ),
            head=branch,
            base=target,
            allow_maintainer_edits=True,
        )
        if not created.ok:
            log.error(json.dumps({"status": created.status, "data": created.data}, default=str))
            return attempt.fail(messages.create_pr_failure(created.status))

        self._request_reviewers(pull, upstream_owner, upstream_name, created.number)
        return attempt.succeed(created.number)

    def _script_failure(
        self, pull: PullRequest, attempt: BackportAttempt, reason: FailureReason
    ) -> str:
        return messages.script_failure(
            attempt.target,
            reason,
            base_sha=pull.base_sha,
            head_sha=pull.head_sha,
            branch=attempt.branch,
            upstream_repo=self.config.upstream_repo,
        )

    def _request_reviewers(
        self, pull: PullRequest, owner: str, repo: str, pull_number: int
    ):
        # The merger plus everyone who was asked to review the source pull request
        reviewers = []
        for login in (pull.merged_by, *pull.requested_reviewers):
            if login and login not in reviewers:
                reviewers.append(login)
        if not reviewers:
            return

        log.info(f"Setting reviewers for the new PR: {', '.join(reviewers)}")
        try:
            status = self.host.request_reviewers(owner, repo, pull_number, reviewers)
        except HostApiError as e:
            log.error(f"Could not request reviewers: {e}")
            return
        if status not in (200, 201):
            log.error(f"Requesting reviewers was rejected with status {status}")

    def _comment(self, pull: PullRequest, body: str):
        self.host.create_comment(self.owner, self.repo, pull.number, body)
