import click
from typing import Optional

from ..app import AppContext
from ..merge_strategy import MergeStrategyResolver


@click.command()
@click.pass_obj
@click.option(
    "--pull-number",
    "pull_number",
    type=int,
    required=True,
    help="The merged pull request to inspect.",
)
@click.option(
    "--workspace",
    "workspace",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    default=None,
    help="Path to the git repository checkout.",
)
def classify(app: AppContext, pull_number: int, workspace: Optional[str]):
    """Show how a pull request was merged and which commits would be picked.

    Nothing is pushed or commented; commits may be fetched into the checkout.
    """
    if app.gh_repo_str is None:
        raise click.ClickException(
            "GitHub repository not set. Use --repo or set GITHUB_REPOSITORY environment variable."
        )
    if workspace is not None:
        app.config = app.config.with_overrides(workspace=workspace)

    try:
        host = app.get_host()
        resolver = MergeStrategyResolver(host, app.get_driver())
        pull = host.get_pull_request(pull_number)
        if not host.is_merged(pull):
            click.echo(f"Pull request #{pull.number} is not merged.")
            return

        strategy = resolver.classify(pull)
        commits = resolver.select_commits(pull, strategy, host.list_commits(pull))
    except Exception as e:
        raise click.ClickException(str(e))

    click.echo(f"Pull request : #{pull.number} {pull.title}")
    click.echo(f"Base branch  : {pull.base_ref}")
    click.echo(f"Merge commit : {pull.merge_commit_sha}")
    click.echo(f"Strategy     : {strategy.value}")
    click.echo(f"Commits ({len(commits)}):")
    for sha in commits:
        click.echo(f"  {sha}")
