"""Create standardized analytics projects.

The scaffold runs a fixed sequence: version control, data tracking,
containerization, dependency lock, docs. Each external step is best
effort; a failing command is reported as a warning and the sequence moves
on. Nothing is rolled back.
"""

from __future__ import annotations

import sys
from pathlib import Path

from . import dvc, docker, git, log, paths, templates
from . import exec as exec_util
from .errors import ValidationFailedError
from .models import ToolsSection
from .tools import check_system_requirements


def write_gitignore(project_dir: Path) -> Path:
    target = project_dir / ".gitignore"
    target.write_text(templates.read_template("gitignore"), encoding="utf-8")
    return target


def write_readme(project_dir: Path) -> Path:
    target = project_dir / "README.md"
    target.write_text(
        templates.render_template("README.md.tmpl", project_name=project_dir.name),
        encoding="utf-8",
    )
    return target


def setup_quarto_template(project_dir: Path) -> Path:
    reports_dir = project_dir / paths.REPORTS_DIR
    paths.ensure_dir(reports_dir)
    target = reports_dir / "template.qmd"
    target.write_text(templates.read_template("report.qmd"), encoding="utf-8")
    return target


def write_requirements(project_dir: Path) -> Path:
    target = project_dir / "requirements.txt"
    if not target.exists():
        target.write_text(templates.read_template("requirements.txt"), encoding="utf-8")
    return target


def lock_dependencies(
    project_dir: Path,
    *,
    python: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Freeze the interpreter's installed packages into ``requirements.lock``.

    Args:
        project_dir: Project root.
        python: Interpreter to freeze; defaults to the running one.

    Returns:
        ``True`` when the lock file was written.
    """
    interpreter = python or sys.executable
    result = exec_util.run_tool(
        [interpreter, "-m", "pip", "freeze"],
        failure="Failed to freeze dependencies",
        label="pip",
        cwd=project_dir,
        runner=runner,
    )
    if result is None or not result.ok:
        return False
    lines = [line for line in result.lines() if not line.startswith("-e ")]
    content = "\n".join(lines)
    (project_dir / "requirements.lock").write_text(
        f"{content}\n" if content else "", encoding="utf-8"
    )
    log.success(f"Locked {len(lines)} dependencies in requirements.lock")
    return True


def _dir_is_empty(path: Path) -> bool:
    return next(path.iterdir(), None) is None


def _ensure_empty_dir(path: Path) -> None:
    if path.exists():
        if not path.is_dir():
            raise ValidationFailedError(f"path exists and is not a directory: {path}")
        if not _dir_is_empty(path):
            raise ValidationFailedError(
                f"path is not empty: {path}",
                recovery_hint="choose a new directory for the project",
            )
        return
    paths.ensure_dir(path)


class _Committer:
    """Stage and commit scaffold steps when version control is enabled."""

    def __init__(
        self,
        project_dir: Path,
        *,
        enabled: bool,
        git_path: str | None,
        runner: exec_util.CommandRunner | None,
    ) -> None:
        self.project_dir = project_dir
        self.enabled = enabled
        self.git_path = git_path
        self.runner = runner

    def __call__(self, targets: str | list[str], message: str) -> None:
        if not self.enabled:
            return
        added = git.git_add(
            targets, cwd=self.project_dir, git_path=self.git_path, runner=self.runner
        )
        if not added:
            return
        git.git_commit(
            message, cwd=self.project_dir, git_path=self.git_path, runner=self.runner
        )


def create_analytics_project(
    path: str | Path,
    *,
    git_init: bool = True,
    use_dvc: bool = True,
    use_docker: bool = True,
    use_lock: bool = True,
    python_version: str | None = None,
    tools: ToolsSection | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> Path:
    """Create a new analytics project.

    Args:
        path: Project directory; must be absent or empty.
        git_init: Initialize git and commit each step.
        use_dvc: Initialize DVC data tracking.
        use_docker: Write Docker configuration.
        use_lock: Write ``requirements.txt`` and freeze ``requirements.lock``.
        python_version: Python version for the Docker base image.
        tools: Executable overrides for git/dvc/docker/python.
        runner: Command runner override.

    Returns:
        The resolved project directory.

    Raises:
        ToolMissingError: A tool needed by the requested steps is missing.
        ValidationFailedError: The target directory is not usable.

    Example:
        $ thoth create churn-analysis --no-docker
    """
    tools = tools or ToolsSection()
    check_system_requirements(
        git_init=git_init,
        use_dvc=use_dvc,
        use_docker=use_docker,
        git_path=tools.git,
        dvc_path=tools.dvc,
        docker_path=tools.docker,
    )

    project_dir = Path(path).expanduser().resolve()
    _ensure_empty_dir(project_dir)
    for directory in paths.PROJECT_DIRS:
        paths.ensure_dir(project_dir / directory)
    log.info(f"Creating analytics project at {project_dir}")

    commit = _Committer(
        project_dir,
        enabled=git_init,
        git_path=tools.git,
        runner=runner,
    )

    if git_init:
        initialized = git.git_init_repo(
            cwd=project_dir, git_path=tools.git, runner=runner
        )
        write_gitignore(project_dir)
        if not initialized:
            commit.enabled = False
            log.warning("Continuing without version control")
        commit(".gitignore", "Initial commit with .gitignore")

    if use_dvc:
        if dvc.dvc_init(cwd=project_dir, dvc_path=tools.dvc, runner=runner):
            commit(".dvc", "Initialize DVC")
        dvc.setup_dvc_tracking(
            project_dir,
            git_path=tools.git,
            runner=runner,
        )
    else:
        keep_files = paths.gitkeep_paths(project_dir)
        for keep in keep_files:
            keep.touch()
        commit(
            [str(keep.relative_to(project_dir)) for keep in keep_files],
            "Add .gitkeep files to data directories",
        )

    if use_docker or use_lock:
        write_requirements(project_dir)

    if use_docker:
        docker.setup_docker(project_dir, python_version=python_version)
        commit([str(paths.DOCKER_DIR), "requirements.txt"], "Add Docker configuration")

    if use_lock:
        # requirements.txt is already committed with the Docker step
        targets = [] if use_docker else ["requirements.txt"]
        if lock_dependencies(project_dir, python=tools.python, runner=runner):
            targets.append("requirements.lock")
        if targets:
            commit(targets, "Initialize dependency lock")

    write_readme(project_dir)
    commit("README.md", "Add README")

    setup_quarto_template(project_dir)
    commit(str(paths.REPORTS_DIR), "Add Quarto template")

    log.success(f"Analytics project successfully created at {project_dir}")
    return project_dir
