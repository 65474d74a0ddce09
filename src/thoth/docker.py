"""Docker configuration and image builds for analytics projects."""

import sys
from pathlib import Path

from . import exec as exec_util
from . import log, paths, templates
from .tools import require_tool


def current_python_version() -> str:
    """Return ``major.minor`` of the running interpreter."""
    return f"{sys.version_info.major}.{sys.version_info.minor}"


def render_dockerfile(python_version: str | None = None) -> str:
    """Render the project Dockerfile.

    Example:
        >>> render_dockerfile("3.12").splitlines()[0]
        'FROM python:3.12-slim'
    """
    return templates.render_template(
        "Dockerfile.tmpl", python_version=python_version or current_python_version()
    )


def setup_docker(project_dir: Path, *, python_version: str | None = None) -> Path:
    """Write ``docker/Dockerfile`` and ``docker/docker-compose.yml``.

    The Dockerfile installs the project's ``requirements.txt``; a warning is
    logged when that file is not there yet.

    Returns:
        The docker directory.
    """
    docker_dir = project_dir / paths.DOCKER_DIR
    paths.ensure_dir(docker_dir)
    version = python_version or current_python_version()
    (docker_dir / "Dockerfile").write_text(
        render_dockerfile(version), encoding="utf-8"
    )
    (docker_dir / "docker-compose.yml").write_text(
        templates.read_template("docker-compose.yml"), encoding="utf-8"
    )
    log.success(f"Docker configuration created with Python {version}")
    if not (project_dir / "requirements.txt").exists():
        log.warning("No requirements.txt in the project root; docker build needs one")
    return docker_dir


def docker_build(
    tag: str,
    *,
    context: str | Path = ".",
    dockerfile: str | Path = paths.DOCKER_DIR / "Dockerfile",
    cwd: Path | None = None,
    docker_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Build the project image with ``docker build``."""
    executable = require_tool("docker", docker_path)
    argv = [executable, "build", "-t", tag, "-f", str(dockerfile), str(context)]
    result = exec_util.run_tool(
        argv,
        failure=f"Failed to build Docker image: {tag}",
        label="Docker",
        cwd=cwd,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success(f"Built Docker image: {tag}")
    return True
