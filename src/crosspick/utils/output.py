"""Machine-readable outputs of a run.

Two outputs are produced, mirroring the action's declared outputs:

- was_successful: 'true' when every target succeeded, otherwise 'false'.
- was_successful_by_target: one 'target=true|false' line per target.
"""

from enum import Enum
import os
from pathlib import Path
from typing import Dict, Optional
import uuid

import click

from ..models import RunOutcome


class Output(str, Enum):
    WAS_SUCCESSFUL = "was_successful"
    WAS_SUCCESSFUL_BY_TARGET = "was_successful_by_target"


def outcome_to_outputs(outcome: RunOutcome) -> Dict[str, str]:
    by_target = "".join(f"{line}\n" for line in outcome.by_target_lines())
    return {
        Output.WAS_SUCCESSFUL.value: "true" if outcome.was_successful else "false",
        Output.WAS_SUCCESSFUL_BY_TARGET.value: by_target,
    }


def format_output(name: str, value: str) -> str:
    """Format one output in the GITHUB_OUTPUT file syntax.

    Multi-line values use the heredoc form with a random delimiter.
    """
    if "\n" not in value:
        return f"{name}={value}\n"

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if not value.endswith("\n"):
        value += "\n"
    return f"{name}<<{delimiter}\n{value}{delimiter}\n"


def write_outputs(outcome: RunOutcome, output_path: Optional[str] = None):
    """Write the run outputs to output_path, or echo them when it is unset.

    Args:
        outcome: The finished run.
        output_path: Path of the GITHUB_OUTPUT file. Defaults to the
            GITHUB_OUTPUT environment variable.
    """
    if output_path is None:
        output_path = os.getenv("GITHUB_OUTPUT")

    outputs = outcome_to_outputs(outcome)

    if not output_path:
        for name, value in outputs.items():
            click.echo(format_output(name, value), nl=False)
        return

    with open(Path(output_path), "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(format_output(name, value))
