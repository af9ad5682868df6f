"""Thin, typed wrapper around the git command line.

Every public method runs exactly one git command (cherry-pick may add an abort)
in the working tree of the wrapped GitPython ``Repo``. Commands block, never
retry and never run concurrently: the checkout is a single shared resource.
"""

from git import Repo
import logging
from typing import List, Optional, Sequence, Tuple

from .errors import CommandFailed, RefNotFound

log = logging.getLogger(__name__)

# git exits with 128 when fetch cannot find the remote ref
REF_NOT_FOUND_STATUS = 128

BOT_IDENTITY = {
    "GIT_COMMITTER_NAME": "github-actions[bot]",
    "GIT_COMMITTER_EMAIL": "github-actions[bot]@users.noreply.github.com",
}

REDACTED = "*****"


def public_clone_url(upstream_repo: str, host: str = "github.com") -> str:
    return f"https://{host}/{upstream_repo}"


def commit_range(commit_shas: Sequence[str]) -> str:
    """Range covering an ordered (oldest first) list of commits, e.g. 'a^..c'."""
    return f"{commit_shas[0]}^..{commit_shas[-1]}"


class GitDriver:
    """Runs the git operations needed to replay commits onto a target branch.

    The auth token is kept private to the driver: it is only ever placed in the
    URL handed to ``git remote add`` and is scrubbed from anything logged or
    raised.
    """

    def __init__(self, repo: Repo, token: Optional[str] = None, host: str = "github.com"):
        self.repo = repo
        self._token = token
        self._host = host
        # Committer identity for commits git creates (cherry-pick keeps the author)
        self.repo.git.update_environment(**BOT_IDENTITY)

    def _redact(self, text: str) -> str:
        if self._token and text:
            return text.replace(self._token, REDACTED)
        return text

    def _git(self, args: List[str], display: Optional[str] = None) -> Tuple[int, str]:
        """Run git with args and return (status, stdout).

        Args:
            args: Arguments after 'git'.
            display: Command text to log instead of args (used when args carry
                the credential).
        """
        shown = display or self._redact(" ".join(args))
        log.info(f"git {shown}")
        status, stdout, stderr = self.repo.git.execute(
            ["git", *args],
            with_extended_output=True,
            with_exceptions=False,
        )
        if stderr:
            log.warning(self._redact(stderr))
        return status, stdout

    def fetch(self, ref: str, depth: int, remote: str = "origin"):
        """Fetch a ref from a remote.

        Raises:
            RefNotFound: When the remote doesn't have the ref.
            CommandFailed: For any other non-zero exit status.
        """
        status, _ = self._git(["fetch", f"--depth={depth}", remote, ref])
        if status == REF_NOT_FOUND_STATUS:
            raise RefNotFound(ref)
        if status != 0:
            raise CommandFailed(f"git fetch {remote} {ref}", status)

    def add_remote(self, upstream_repo: str, name: str = "upstream"):
        """Add the upstream repository as a remote, authenticated with the token.

        Raises:
            CommandFailed: If the remote already exists or can't be added. The
                message only contains the public URL.
        """
        display = f"remote add {name} {public_clone_url(upstream_repo, self._host)}"
        if self._token:
            url = f"https://x-access-token:{self._token}@{self._host}/{upstream_repo}"
        else:
            url = public_clone_url(upstream_repo, self._host)

        status, _ = self._git(["remote", "add", name, url], display=display)
        if status != 0:
            raise CommandFailed(f"git {display}", status)

    def checkout_new_branch(self, branch: str, start: str, remote: str = "origin"):
        """Create and switch to branch, starting at remote/start.

        Raises:
            CommandFailed: If the branch exists or the start point is missing.
        """
        start_point = f"{remote}/{start}"
        status, _ = self._git(["switch", "-c", branch, start_point])
        if status != 0:
            raise CommandFailed(f"git switch -c {branch} {start_point}", status)

    def cherry_pick(self, commit_shas: Sequence[str]):
        """Cherry-pick commits in order, recording their origin (-x).

        On failure the cherry-pick is aborted so the working tree is clean.

        Raises:
            CommandFailed: If any commit fails to apply.
        """
        status, _ = self._git(["cherry-pick", "-x", *commit_shas])
        if status != 0:
            abort_status, _ = self._git(["cherry-pick", "--abort"])
            if abort_status != 0:
                log.warning(f"git cherry-pick --abort exited with {abort_status}")
            raise CommandFailed(f"git cherry-pick -x {' '.join(commit_shas)}", status)

    def push(self, branch: str, remote: str = "origin") -> int:
        """Push branch and set its upstream. Returns git's exit status."""
        status, _ = self._git(["push", "--set-upstream", remote, branch])
        return status

    def list_merge_commits(self, revision_range: str) -> List[str]:
        """Return every commit in revision_range that has more than one parent.

        Raises:
            CommandFailed: If the range can't be listed.
        """
        return self._rev_list(["--merges", revision_range])

    def list_commits_in_range(self, revision_range: str) -> List[str]:
        """Return the commits in revision_range, oldest first.

        Raises:
            CommandFailed: If the range can't be listed.
        """
        return self._rev_list(["--reverse", revision_range])

    def _rev_list(self, args: List[str]) -> List[str]:
        status, stdout = self._git(["rev-list", *args])
        if status != 0:
            raise CommandFailed(f"git rev-list {' '.join(args)}", status)
        return [sha.strip() for sha in stdout.splitlines() if sha.strip()]
