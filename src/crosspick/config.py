"""Configuration file support for crosspick.

This module handles loading and parsing the .crosspick.yaml configuration file.
Every value can also be given on the command line (or through the matching
action input environment variable), which takes precedence over the file.

Example:

    upstream_repo: acme/widgets
    merge_commits: skip
    trigger_label: cherry-pick to remote
    branch_map:
      master: main
    pull:
      title: "[cherry-pick ${target_branch}] ${pull_title}"
      description: |
        cherry-pick of #${pull_number} to `${target_branch}`.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, List
import logging
import re
import yaml

from .models import MergeCommitPolicy

log = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = ".crosspick.yaml"

DEFAULT_PULL_TITLE = "[cherry-pick ${target_branch}] ${pull_title}"
DEFAULT_PULL_DESCRIPTION = (
    "# Description\ncherry-pick of #${pull_number} to `${target_branch}`."
)

UPSTREAM_REPO_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")


def parse_branch_map(value: Optional[str]) -> Dict[str, str]:
    """Parse a serialized branch alias table.

    Accepts JSON (the action input format) or any YAML mapping.

    Raises:
        ValueError: If the value is not a mapping.
    """
    if value is None or not value.strip():
        return {}

    try:
        data = yaml.safe_load(value)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid branch map: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Branch map must be a mapping of source to upstream branch names")

    return {str(k): str(v) for k, v in data.items()}


def parse_target_branches(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [name for name in re.split(r"[,\s]+", value) if name]


def compile_label_pattern(value: Optional[str]) -> Optional[re.Pattern]:
    if not value:
        return None
    try:
        pattern = re.compile(value)
    except re.error as e:
        raise ValueError(f"Invalid label pattern '{value}': {e}")
    if pattern.groups < 1:
        raise ValueError(
            f"Label pattern '{value}' must contain a capture group for the target branch"
        )
    return pattern


@dataclass
class PullConfig:
    """Templates for the pull requests opened on the upstream repository.

    Attributes:
        title: Title template (see utils.placeholders for the tokens).
        description: Body template.
    """

    title: str = DEFAULT_PULL_TITLE
    description: str = DEFAULT_PULL_DESCRIPTION

    @classmethod
    def from_dict(cls, data: dict) -> "PullConfig":
        return cls(
            title=data.get("title", cls.title),
            description=data.get("description", cls.description),
        )


@dataclass
class CrosspickConfig:
    """Configuration settings for a crosspick run.

    Attributes:
        upstream_repo: Repository to cherry-pick to, in owner/repo form.
        merge_commits: Policy for merge commits found in the pull request.
        trigger_label: Label required on the pull request, if set.
        branch_map: Aliases from source branch names to upstream branch names.
        target_branches: Extra target branches for every run.
        label_pattern: Regex whose capture group turns labels into targets.
        pull: Title and body templates for created pull requests.
        workspace: Path of the local checkout.
    """

    upstream_repo: Optional[str] = None
    merge_commits: MergeCommitPolicy = MergeCommitPolicy.FAIL
    trigger_label: Optional[str] = None
    branch_map: Dict[str, str] = field(default_factory=dict)
    target_branches: List[str] = field(default_factory=list)
    label_pattern: Optional[re.Pattern] = None
    pull: PullConfig = field(default_factory=PullConfig)
    workspace: str = "."

    @property
    def upstream_owner_and_name(self) -> tuple[str, str]:
        owner, name = self.upstream_repo.split("/")
        return owner, name

    def resolve_branch(self, branch: str) -> str:
        """Map a source branch name through the alias table."""
        return self.branch_map.get(branch, branch)

    def validate(self):
        """Check settings that have no usable default.

        Raises:
            ValueError: If the upstream repository is missing or malformed.
        """
        if not self.upstream_repo:
            raise ValueError("No upstream repository configured. Use owner/repo form.")
        if not UPSTREAM_REPO_PATTERN.match(self.upstream_repo):
            raise ValueError(
                f"Upstream repository '{self.upstream_repo}' must be in owner/repo form"
            )

    def with_overrides(self, **overrides) -> "CrosspickConfig":
        """Return a copy where every override that is not None wins."""
        values = {k: v for k, v in overrides.items() if v is not None}
        pull_title = values.pop("pull_title", None)
        pull_description = values.pop("pull_description", None)

        config = replace(self, **values)
        if pull_title is not None or pull_description is not None:
            config.pull = PullConfig(
                title=pull_title if pull_title is not None else self.pull.title,
                description=(
                    pull_description
                    if pull_description is not None
                    else self.pull.description
                ),
            )
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "CrosspickConfig":
        """Create a CrosspickConfig from a dictionary.

        Raises:
            ValueError: If a value has the wrong shape.
        """
        branch_map = data.get("branch_map") or {}
        if isinstance(branch_map, str):
            branch_map = parse_branch_map(branch_map)
        elif not isinstance(branch_map, dict):
            raise ValueError("branch_map must be a mapping")

        target_branches = data.get("target_branches") or []
        if isinstance(target_branches, str):
            target_branches = parse_target_branches(target_branches)

        pull_data = data.get("pull", {})
        pull_config = PullConfig.from_dict(pull_data) if pull_data else PullConfig()

        return cls(
            upstream_repo=data.get("upstream_repo"),
            merge_commits=MergeCommitPolicy.parse(
                data.get("merge_commits", MergeCommitPolicy.FAIL.value)
            ),
            trigger_label=data.get("trigger_label"),
            branch_map={str(k): str(v) for k, v in branch_map.items()},
            target_branches=[str(b) for b in target_branches],
            label_pattern=compile_label_pattern(data.get("label_pattern")),
            pull=pull_config,
            workspace=data.get("workspace", cls.workspace),
        )


def load_config(config_path: Optional[str] = None) -> CrosspickConfig:
    """Load configuration from a YAML file.

    If config_path is explicitly provided and the file doesn't exist, raises an error.
    If config_path is None and the default .crosspick.yaml doesn't exist, returns default config.

    Raises:
        FileNotFoundError: If config_path is explicitly provided but file doesn't exist.
        yaml.YAMLError: If the config file contains invalid YAML.
        ValueError: If the config file contains invalid values.
    """
    explicit_path = config_path is not None
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_PATH)

    if not path.exists():
        if explicit_path:
            raise FileNotFoundError(f"Config file not found: {path}")
        return CrosspickConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    # Handle empty file or file with only comments
    if data is None:
        return CrosspickConfig()

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a YAML mapping (dictionary)")

    log.debug(f"Loaded configuration from {path}")
    return CrosspickConfig.from_dict(data)
