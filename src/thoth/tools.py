"""Availability checks for the external tools Thoth wraps."""

from __future__ import annotations

import shutil
from pathlib import Path

from .errors import ToolMissingError

TOOL_LABELS = {
    "git": "Git",
    "dvc": "DVC",
    "docker": "Docker",
}

INSTALL_HINTS = {
    "git": "https://git-scm.com/downloads",
    "dvc": "https://dvc.org/doc/install",
    "docker": "https://docs.docker.com/get-docker/",
}


def resolve_executable(tool: str, path: str | None = None) -> str:
    """Return the executable to invoke for ``tool``.

    Example:
        >>> resolve_executable("git")
        'git'
        >>> resolve_executable("git", " /usr/bin/git ")
        '/usr/bin/git'
    """
    resolved = path.strip() if isinstance(path, str) else ""
    return resolved or tool


def check_command(name: str) -> bool:
    """Return whether ``name`` resolves to an executable.

    Args:
        name: Command name on ``PATH`` or a filesystem path.

    Returns:
        ``True`` when the executable is available.
    """
    if not name:
        return False
    if shutil.which(name) is not None:
        return True
    candidate = Path(name).expanduser()
    return candidate.is_file() and shutil.which(str(candidate)) is not None


def require_tool(tool: str, path: str | None = None) -> str:
    """Ensure a wrapped tool is installed and return its executable.

    Raises:
        ToolMissingError: When the executable cannot be found.
    """
    executable = resolve_executable(tool, path)
    if check_command(executable):
        return executable
    label = TOOL_LABELS.get(tool, tool)
    hint = INSTALL_HINTS.get(tool)
    message = f"{label} is not installed."
    if hint:
        message = f"{message} Please install it first: {hint}"
    raise ToolMissingError(tool, message, recovery_hint=hint)


def check_system_requirements(
    *,
    git_init: bool = True,
    use_dvc: bool = True,
    use_docker: bool = True,
    git_path: str | None = None,
    dvc_path: str | None = None,
    docker_path: str | None = None,
) -> None:
    """Fail fast when a tool needed by the requested scaffold is missing."""
    if git_init:
        require_tool("git", git_path)
    if use_dvc:
        require_tool("dvc", dvc_path)
    if use_docker:
        require_tool("docker", docker_path)
