"""Template loading and rendering utilities for crosspick.

This module provides functions to load and render the Jinja2 templates
shipped in the crosspick.templates package.
"""

from typing import Any, Optional
from jinja2 import Environment, PackageLoader


def _create_jinja_env() -> Environment:
    """Create and configure the Jinja2 environment.

    Returns:
        Configured Jinja2 Environment with custom filters.
    """
    env = Environment(
        loader=PackageLoader("crosspick", "templates"),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )

    env.filters["short_sha"] = lambda sha: sha[:11] if sha else ""

    return env


# Global Jinja2 environment (lazy initialization)
_jinja_env: Optional[Environment] = None


def get_jinja_env() -> Environment:
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = _create_jinja_env()
    return _jinja_env


def render_template(format: str, name: str, **context: Any) -> str:
    """Render a template with the given context.

    Args:
        format: The output format directory (e.g. 'markdown').
        name: The template name (without .jinja2 extension).
        **context: Template context variables.

    Returns:
        The rendered template string, without surrounding whitespace.

    Raises:
        TemplateNotFound: If the template file doesn't exist.
    """
    template = get_jinja_env().get_template(f"{format}/{name}.jinja2")
    return template.render(**context).strip()
