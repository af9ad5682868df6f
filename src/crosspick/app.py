import git
import json
import os
import subprocess
from pathlib import Path
from typing import Optional

from .config import CrosspickConfig
from .git_driver import GitDriver
from .host import GithubHost, HostClient
from .orchestrator import CherryPickRun


def gh_auth_token() -> Optional[str]:
    token = os.getenv("GITHUB_TOKEN")
    if token:
        return token
    token = os.getenv("GH_TOKEN")
    if token:
        return token

    try:
        token = subprocess.check_output(
            ["gh", "auth", "token"], text=True, stderr=subprocess.DEVNULL
        ).strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        token = None

    return token or None


def pull_number_from_event(event_path: str) -> int:
    """Read the pull request number from a workflow event payload.

    Raises:
        ValueError: If the payload carries no pull request or issue number.
    """
    with open(Path(event_path), "r", encoding="utf-8") as f:
        payload = json.load(f)

    for key in ("pull_request", "issue"):
        number = (payload.get(key) or {}).get("number")
        if number is not None:
            return int(number)
    if payload.get("number") is not None:
        return int(payload["number"])

    raise ValueError(f"No pull request number found in event payload {event_path}")


def split_repo(repo_str: str) -> tuple[str, str]:
    owner, _, name = repo_str.partition("/")
    if not owner or not name or "/" in name:
        raise ValueError(f"Repository '{repo_str}' must be in owner/repo form")
    return owner, name


class AppContext:
    def __init__(self):
        self.config: CrosspickConfig = CrosspickConfig()
        self.token: Optional[str] = None
        self.gh_repo_str: Optional[str] = None
        self._repo: Optional[git.Repo] = None
        self._host: Optional[HostClient] = None

    def get_repo(self) -> git.Repo:
        if self._repo is None:
            self._repo = git.Repo(self.config.workspace)
        return self._repo

    def get_token(self) -> str:
        if self.token is None:
            self.token = gh_auth_token()
        if not self.token:
            raise Exception("GitHub token not found. Please set GITHUB_TOKEN or GH_TOKEN.")
        return self.token

    def get_host(self) -> HostClient:
        if self._host is None:
            if self.gh_repo_str is None:
                raise Exception("GitHub repository not set. Please provide --repo option.")
            self._host = GithubHost.from_token(self.get_token(), self.gh_repo_str)
        return self._host

    def get_driver(self) -> GitDriver:
        return GitDriver(self.get_repo(), token=self.get_token())

    def create_run(self) -> CherryPickRun:
        owner, name = split_repo(self.gh_repo_str)
        return CherryPickRun(
            self.get_host(), self.get_driver(), self.config, owner=owner, repo=name
        )
