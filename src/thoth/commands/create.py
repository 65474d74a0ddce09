"""Implementation for the ``thoth create`` command.

``thoth create`` scaffolds a new analytics project: directory layout,
git repository, DVC tracking, Docker configuration, dependency lock, and
report template.
"""

from __future__ import annotations

from pathlib import Path

from .. import config, scaffold


def _flag(args: object, name: str, default: bool) -> bool:
    value = getattr(args, name, None)
    if value is None:
        return default
    return bool(value)


def create_project(args: object) -> Path:
    """Create an analytics project using config defaults for unset flags.

    Args:
        args: CLI argument object with ``path`` and optional ``git_init``,
            ``use_dvc``, ``use_docker``, ``use_lock``, and ``python_version``.

    Returns:
        The created project directory.

    Example:
        $ thoth create ~/analyses/churn --no-docker
    """
    settings = config.load_config()
    defaults = settings.project
    return scaffold.create_analytics_project(
        Path(str(getattr(args, "path"))),
        git_init=_flag(args, "git_init", defaults.git_init),
        use_dvc=_flag(args, "use_dvc", defaults.use_dvc),
        use_docker=_flag(args, "use_docker", defaults.use_docker),
        use_lock=_flag(args, "use_lock", defaults.use_lock),
        python_version=getattr(args, "python_version", None) or defaults.python_version,
        tools=settings.tools,
    )
