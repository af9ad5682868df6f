import click
import logging
from typing import Optional

from rich.console import Console
from rich.table import Table

from ..app import AppContext, pull_number_from_event
from ..config import compile_label_pattern, parse_branch_map, parse_target_branches
from ..models import MergeCommitPolicy, RunOutcome
from ..utils.output import write_outputs

log = logging.getLogger(__name__)


def print_summary(outcome: RunOutcome, console: Optional[Console] = None):
    console = console or Console()
    if outcome.error is not None:
        console.print(f"[bold red]Run failed:[/bold red] {outcome.error}")
        return
    if not outcome.results:
        console.print("No targets were attempted.")
        return

    table = Table(title="Cherry-pick results")
    table.add_column("Target")
    table.add_column("Result")
    for target, success in outcome.results.items():
        table.add_row(target, "[green]ok[/green]" if success else "[red]failed[/red]")
    console.print(table)


@click.command()
@click.pass_obj
@click.option(
    "--token",
    "token",
    type=str,
    envvar=["INPUT_TOKEN", "GITHUB_TOKEN", "GH_TOKEN"],
    show_envvar=False,
    help="Token used for the GitHub API and for pushing to the upstream repository.",
)
@click.option(
    "--workspace",
    "workspace",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    envvar=["INPUT_GITHUB_WORKSPACE", "GITHUB_WORKSPACE"],
    help="Path to the git repository checkout.",
)
@click.option(
    "--pull-number",
    "pull_number",
    type=int,
    required=False,
    help="The merged pull request to cherry-pick. Read from the event payload if omitted.",
)
@click.option(
    "--event-path",
    "event_path",
    type=click.Path(exists=True, dir_okay=False),
    envvar="GITHUB_EVENT_PATH",
    help="Workflow event payload to read the pull request number from.",
)
@click.option(
    "--upstream-repo",
    "upstream_repo",
    type=str,
    envvar="INPUT_UPSTREAM_REPO",
    help="The repository to cherry-pick to, in owner/repo form.",
)
@click.option(
    "--merge-commits",
    "merge_commits",
    type=click.Choice([p.value for p in MergeCommitPolicy]),
    envvar="INPUT_MERGE_COMMITS",
    help="Fail on merge commits in the pull request, or skip them.",
)
@click.option(
    "--trigger-label",
    "trigger_label",
    type=str,
    envvar="INPUT_TRIGGER_LABEL",
    help="Only cherry-pick pull requests carrying this label.",
)
@click.option(
    "--branch-map",
    "branch_map",
    type=str,
    envvar="INPUT_BRANCH_MAP",
    help="JSON mapping of source branches to upstream branches.",
)
@click.option(
    "--target-branches",
    "target_branches",
    type=str,
    envvar="INPUT_TARGET_BRANCHES",
    help="Additional target branches, separated by commas or whitespace.",
)
@click.option(
    "--label-pattern",
    "label_pattern",
    type=str,
    envvar="INPUT_LABEL_PATTERN",
    help="Regex with a capture group that turns labels into target branches.",
)
@click.option(
    "--pull-title",
    "pull_title",
    type=str,
    envvar="INPUT_PULL_TITLE",
    help="Title template for the created pull requests.",
)
@click.option(
    "--pull-description",
    "pull_description",
    type=str,
    envvar="INPUT_PULL_DESCRIPTION",
    help="Body template for the created pull requests.",
)
def run(
    app: AppContext,
    token: Optional[str],
    workspace: Optional[str],
    pull_number: Optional[int],
    event_path: Optional[str],
    upstream_repo: Optional[str],
    merge_commits: Optional[str],
    trigger_label: Optional[str],
    branch_map: Optional[str],
    target_branches: Optional[str],
    label_pattern: Optional[str],
    pull_title: Optional[str],
    pull_description: Optional[str],
):
    """Cherry-pick a merged pull request to the upstream repository."""
    try:
        app.config = app.config.with_overrides(
            workspace=workspace,
            upstream_repo=upstream_repo,
            merge_commits=MergeCommitPolicy(merge_commits) if merge_commits else None,
            trigger_label=trigger_label,
            branch_map=parse_branch_map(branch_map) if branch_map else None,
            target_branches=(
                parse_target_branches(target_branches) if target_branches else None
            ),
            label_pattern=compile_label_pattern(label_pattern),
            pull_title=pull_title,
            pull_description=pull_description,
        )
        app.config.validate()
    except ValueError as e:
        raise click.ClickException(str(e))

    if app.gh_repo_str is None:
        raise click.ClickException(
            "GitHub repository not set. Use --repo or set GITHUB_REPOSITORY environment variable."
        )

    if pull_number is None:
        if event_path is None:
            raise click.ClickException(
                "No pull request given. Use --pull-number or set GITHUB_EVENT_PATH."
            )
        try:
            pull_number = pull_number_from_event(event_path)
        except ValueError as e:
            raise click.ClickException(str(e))

    if token:
        app.token = token

    try:
        cherry_pick_run = app.create_run()
    except Exception as e:
        raise click.ClickException(str(e))

    outcome = cherry_pick_run.run(pull_number)

    write_outputs(outcome)
    print_summary(outcome)

    if outcome.error is not None:
        raise SystemExit(1)
