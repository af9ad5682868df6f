"""Repository host clients.

Example usage:
    from crosspick.host import GithubHost

    host = GithubHost.from_token(token, "acme/widgets")
    pull = host.get_pull_request(42)
"""

from .base import HostClient
from .github_host import GithubHost, pull_request_from_github

__all__ = [
    "HostClient",
    "GithubHost",
    "pull_request_from_github",
]
