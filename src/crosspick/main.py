import click
import yaml
import logging
from typing import Optional

from .app import AppContext
from .config import load_config
from .version import __version__

LOG_FORMAT = "[%(levelname)s] %(message)s"

from dotenv import load_dotenv

load_dotenv()


def register_commands(cli):
    from .commands.run import run

    cli.add_command(run)

    from .commands.classify import classify

    cli.add_command(classify)


@click.group()
@click.version_option(__version__, prog_name="crosspick")
@click.pass_obj
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="CROSSPICK_CONFIG",
    help="Path to the config file (default: .crosspick.yaml if present).",
)
@click.option(
    "--repo",
    "repo",
    type=str,
    required=False,
    envvar=["GH_REPO", "GITHUB_REPOSITORY"],
    help="The source repository (owner/repo) of the pull request.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def cli(app: AppContext, config_path: Optional[str], repo: Optional[str], verbose: bool):
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        app.config = load_config(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))

    app.gh_repo_str = repo


def main():
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
    )
    register_commands(cli)
    cli(obj=AppContext())


if __name__ == "__main__":
    main()
