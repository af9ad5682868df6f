import re
from ..models import PullRequest


# Matches ${token_name}
TOKEN_PATTERN = re.compile(r"\$\{(\w+)\}")

# Matches #123 and owner/repo#123
ISSUE_REF_PATTERN = re.compile(r"(?<![\w/#])(?:[\w.-]+/[\w.-]+)?#\d+")


def find_issue_refs(body: str) -> str:
    """Return every issue reference in body, in order, separated by spaces."""
    if not body:
        return ""
    return " ".join(ISSUE_REF_PATTERN.findall(body))


def render(
    template: str,
    pull: PullRequest,
    target_branch: str,
    owner: str = "",
    repo: str = "",
) -> str:
    """Replace the ${...} placeholders in a pull request title/body template.

    Supported tokens:
    - ${pull_author} - Login of the source pull request author
    - ${pull_number} - Number of the source pull request
    - ${pull_title} - Title of the source pull request
    - ${pull_description} - Body of the source pull request
    - ${target_branch} - The upstream branch being cherry-picked to
    - ${owner} - Owner of the source repository
    - ${repo} - Name of the source repository
    - ${issue_refs} - Issue references found in the source pull request body

    Unknown tokens are kept as-is. Inserted values are never substituted again.
    """
    values = {
        "pull_author": pull.author,
        "pull_number": str(pull.number),
        "pull_title": pull.title,
        "pull_description": pull.body or "",
        "target_branch": target_branch,
        "owner": owner,
        "repo": repo,
        "issue_refs": find_issue_refs(pull.body),
    }

    def replace_token(match: re.Match) -> str:
        token = match.group(1)
        if token in values:
            return values[token]
        return match.group(0)

    return TOKEN_PATTERN.sub(replace_token, template)
