UPSTREAM_REMOTE = "upstream"
OPERATION_VERB = "cherry-pick"


def working_branch_name(
    pull_number: int,
    target: str,
    remote: str = UPSTREAM_REMOTE,
    verb: str = OPERATION_VERB,
) -> str:
    """Build the name of the branch a target's commits are replayed onto.

    The name depends only on its inputs so that re-running for the same pull
    request and target reuses it.

    Example: working_branch_name(42, "main") -> "cherry-pick-42-to-main-to-upstream"
    """
    return f"{verb}-{pull_number}-to-{target}-to-{remote}"
