"""Git helper functions used by Thoth."""

from pathlib import Path
from typing import Iterable

from . import exec as exec_util
from . import log
from .io import say
from .tools import require_tool


def _as_list(values: str | Path | Iterable[str | Path] | None) -> list[str]:
    if values is None:
        return []
    if isinstance(values, (str, Path)):
        return [str(values)]
    return [str(value) for value in values]


def git_command(args: list[str], *, git_path: str | None = None) -> list[str]:
    """Build a git command using an optional executable path.

    Example:
        >>> git_command(["status"])
        ['git', 'status']
        >>> git_command(["status"], git_path="/usr/bin/git")
        ['/usr/bin/git', 'status']
    """
    resolved = git_path.strip() if isinstance(git_path, str) else ""
    if not resolved:
        resolved = "git"
    return [resolved, *args]


def _run_git(
    args: list[str],
    *,
    failure: str,
    cwd: Path | None,
    git_path: str | None,
    runner: exec_util.CommandRunner | None,
) -> exec_util.CommandResult | None:
    executable = require_tool("git", git_path)
    return exec_util.run_tool(
        git_command(args, git_path=executable),
        failure=failure,
        label="Git",
        cwd=cwd,
        runner=runner,
    )


def _print_lines(lines: list[str]) -> None:
    say("\n".join(lines))


def git_init_repo(
    *,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Initialize a new Git repository.

    Returns:
        ``True`` when ``git init`` succeeded.
    """
    result = _run_git(
        ["init"],
        failure="Failed to initialize Git repository",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Initialized empty Git repository")
    return True


def git_add(
    paths: str | Path | Iterable[str | Path],
    *,
    force: bool = False,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Add files to the Git staging area.

    Args:
        paths: One path or several.
        force: Add ignored files too (``-f``).

    Returns:
        ``True`` when ``git add`` succeeded.
    """
    args = ["add"]
    if force:
        args.append("-f")
    args.extend(_as_list(paths))
    result = _run_git(
        args,
        failure="Failed to add files to Git",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Added files to Git staging area")
    return True


def git_commit(
    message: str,
    *,
    all: bool = False,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Record staged changes.

    Args:
        message: Commit message, passed as a single argument.
        all: Stage modified and deleted files first (``-a``).

    Returns:
        ``True`` when the commit succeeded.
    """
    args = ["commit"]
    if all:
        args.append("-a")
    args.extend(["-m", message])
    result = _run_git(
        args,
        failure="Failed to commit changes to Git",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Committed changes to Git")
    return True


def git_status(
    *,
    short: bool = True,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[str] | None:
    """Show the working tree status.

    Returns:
        Status lines (empty when clean), or ``None`` on failure.
    """
    args = ["status"]
    if short:
        args.append("--short")
    result = _run_git(
        args,
        failure="Failed to get Git status",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if result is None or not result.ok:
        return None
    lines = result.lines()
    if not lines:
        log.info("Working directory clean")
    else:
        _print_lines(lines)
    return lines


def git_pull(
    remote: str | None = None,
    branch: str | None = None,
    *,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    args = ["pull", *_as_list(remote), *_as_list(branch)]
    result = _run_git(
        args,
        failure="Failed to pull changes from remote",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Successfully pulled changes")
    return True


def git_push(
    remote: str | None = None,
    branch: str | None = None,
    *,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    args = ["push", *_as_list(remote), *_as_list(branch)]
    result = _run_git(
        args,
        failure="Failed to push changes to remote",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Successfully pushed changes")
    return True


def git_branch(
    branch_name: str,
    *,
    checkout: bool = True,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Create a branch and optionally switch to it."""
    result = _run_git(
        ["branch", branch_name],
        failure=f"Failed to create branch: {branch_name}",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    if checkout:
        result = _run_git(
            ["checkout", branch_name],
            failure=f"Failed to checkout branch: {branch_name}",
            cwd=cwd,
            git_path=git_path,
            runner=runner,
        )
        if not exec_util.succeeded(result):
            return False
        log.success(f"Created and checked out branch: {branch_name}")
    else:
        log.success(f"Created branch: {branch_name}")
    return True


def git_checkout(
    branch_name: str,
    *,
    create: bool = False,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Switch to a branch, creating it first with ``create``."""
    args = ["checkout"]
    if create:
        args.append("-b")
    args.append(branch_name)
    result = _run_git(
        args,
        failure=f"Failed to checkout branch: {branch_name}",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success(f"Checked out branch: {branch_name}")
    return True


def parse_branch_lines(lines: list[str]) -> list[str]:
    """Strip the current-branch marker and padding from ``git branch`` output.

    Example:
        >>> parse_branch_lines(["* main", "  feature/eda"])
        ['main', 'feature/eda']
    """
    branches = []
    for line in lines:
        name = line.lstrip("*+ ").strip()
        if name:
            branches.append(name)
    return branches


def git_branch_list(
    *,
    all: bool = False,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[str] | None:
    """List branches, including remotes with ``all``."""
    args = ["branch"]
    if all:
        args.append("-a")
    result = _run_git(
        args,
        failure="Failed to list branches",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if result is None or not result.ok:
        return None
    lines = result.lines()
    if lines:
        _print_lines(lines)
    return parse_branch_lines(lines)


def git_log(
    *,
    n: int | None = 10,
    oneline: bool = True,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[str] | None:
    """Show commit logs for the repository at ``cwd``.

    Returns:
        Log lines, or ``None`` when not a repository, the log failed, or
        there are no commits yet.
    """
    executable = require_tool("git", git_path)
    repo_dir = cwd or Path.cwd()
    if not (repo_dir / ".git").exists():
        log.warning("Not a Git repository")
        return None
    args = ["log"]
    if oneline:
        args.append("--oneline")
    if n is not None:
        args.append(f"-{n}")
    result = exec_util.run_tool(
        git_command(args, git_path=executable),
        failure="Failed to get Git log",
        label="Git",
        cwd=cwd,
        runner=runner,
    )
    if result is None or not result.ok:
        return None
    lines = result.lines()
    if not lines:
        log.info("No commits yet")
        return None
    _print_lines(lines)
    return lines


def git_clone(
    url: str,
    path: str | Path,
    *,
    branch: str | None = None,
    cwd: Path | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Clone a repository into ``path``."""
    args = ["clone"]
    if branch:
        args.extend(["-b", branch])
    args.extend([url, str(path)])
    result = _run_git(
        args,
        failure="Failed to clone repository",
        cwd=cwd,
        git_path=git_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success(f"Successfully cloned repository to {path}")
    return True
