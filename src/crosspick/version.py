"""Version handling for crosspick.

The version comes from package metadata (set at install time by setuptools-scm).
As a fallback for development without installation, it uses git describe directly.
"""

import subprocess
from importlib.metadata import version, PackageNotFoundError


def get_version() -> str:
    """Get the crosspick version.

    Returns:
        Version string, e.g., "0.1.0", "0.1.0.dev5+g1234abc", or "unknown" if
        version cannot be determined.
    """
    try:
        return version("crosspick")
    except PackageNotFoundError:
        return _get_version_from_git()


def _get_version_from_git() -> str:
    try:
        result = subprocess.run(
            ["git", "describe", "--tags", "--dirty", "--always"],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"


__version__ = get_version()
