"""DVC helper functions: data tracking, remotes, and pipeline stages."""

from __future__ import annotations

import pickle
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence, TypeVar

from . import exec as exec_util
from . import git, log, paths, templates
from .io import say
from .tools import require_tool

if TYPE_CHECKING:
    import pandas as pd

ObjT = TypeVar("ObjT")

ParamValue = str | int | float | bool


def dvc_command(args: list[str], *, dvc_path: str | None = None) -> list[str]:
    """Build a dvc command using an optional executable path.

    Example:
        >>> dvc_command(["status"])
        ['dvc', 'status']
    """
    resolved = dvc_path.strip() if isinstance(dvc_path, str) else ""
    if not resolved:
        resolved = "dvc"
    return [resolved, *args]


def _as_list(values: str | Path | Iterable[str | Path] | None) -> list[str]:
    if values is None:
        return []
    if isinstance(values, (str, Path)):
        return [str(values)]
    return [str(value) for value in values]


def _run_dvc(
    args: list[str],
    *,
    failure: str,
    cwd: Path | None,
    dvc_path: str | None,
    runner: exec_util.CommandRunner | None,
) -> exec_util.CommandResult | None:
    executable = require_tool("dvc", dvc_path)
    return exec_util.run_tool(
        dvc_command(args, dvc_path=executable),
        failure=failure,
        label="DVC",
        cwd=cwd,
        runner=runner,
    )


def _resolve(path: str | Path, cwd: Path | None) -> Path:
    candidate = Path(path)
    if candidate.is_absolute() or cwd is None:
        return candidate
    return cwd / candidate


def dvc_init(
    *,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Initialize DVC in the repository at ``cwd``."""
    result = _run_dvc(
        ["init"],
        failure="Failed to initialize DVC",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Initialized DVC")
    return True


def dvc_add(
    paths_to_track: str | Path | Iterable[str | Path],
    *,
    message: str | None = None,
    recursive: bool = False,
    git_add: bool = True,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[str]:
    """Track files with DVC and stage their ``.dvc`` files in git.

    Missing paths and failed adds are skipped with a warning. The ``.dvc``
    pointer is force-added because data directories are git-ignored.

    Args:
        paths_to_track: One path or several, relative to ``cwd``.
        message: Commit message; when set, staged pointers are committed.
        recursive: Add each file in a directory separately.
        git_add: Stage the generated ``.dvc`` files.

    Returns:
        The paths DVC now tracks; empty when every path was skipped.
    """
    tracked: list[str] = []
    for item in _as_list(paths_to_track):
        if not _resolve(item, cwd).exists():
            log.warning(f"File {item} does not exist, skipping")
            continue
        args = ["add"]
        if recursive:
            args.append("--recursive")
        args.append(item)
        result = _run_dvc(
            args,
            failure=f"Failed to add {item} to DVC tracking",
            cwd=cwd,
            dvc_path=dvc_path,
            runner=runner,
        )
        if not exec_util.succeeded(result):
            continue

        pointer = f"{item}.dvc"
        if git_add and _resolve(pointer, cwd).exists():
            if git.git_add(pointer, force=True, cwd=cwd, git_path=git_path, runner=runner):
                log.success(f"Added {pointer} to Git staging area")
            else:
                log.warning(f"Failed to add {pointer} to Git")
        log.success(f"Added {item} to DVC tracking")
        tracked.append(item)

    if message is not None and tracked:
        git.git_commit(message, cwd=cwd, git_path=git_path, runner=runner)
    return tracked


def dvc_commit(
    paths_to_commit: str | Path | Iterable[str | Path],
    *,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Record changes to already tracked outputs in the DVC cache."""
    args = ["commit", "--force", "--quiet", *_as_list(paths_to_commit)]
    result = _run_dvc(
        args,
        failure="Failed to commit changes to DVC",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Committed changes to DVC")
    return True


def _remote_args(
    verb: str, targets: str | Path | Iterable[str | Path] | None, remote: str | None
) -> list[str]:
    args = [verb]
    if remote:
        args.extend(["--remote", remote])
    args.extend(_as_list(targets))
    return args


def dvc_pull(
    targets: str | Path | Iterable[str | Path] | None = None,
    *,
    remote: str | None = None,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    result = _run_dvc(
        _remote_args("pull", targets, remote),
        failure="Failed to pull data from DVC remote",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Successfully pulled data from DVC remote")
    return True


def dvc_push(
    targets: str | Path | Iterable[str | Path] | None = None,
    *,
    remote: str | None = None,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    result = _run_dvc(
        _remote_args("push", targets, remote),
        failure="Failed to push data to DVC remote",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Successfully pushed data to DVC remote")
    return True


def format_param_value(value: ParamValue) -> str:
    """Format a stage parameter value for ``-p name=value``.

    Example:
        >>> format_param_value(True)
        'true'
        >>> format_param_value(0.25)
        '0.25'
        >>> format_param_value("rf")
        'rf'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flag_values(
    selector: bool | str | Sequence[str] | None, outs: list[str]
) -> list[str]:
    if selector is None or selector is False:
        return []
    if selector is True:
        return list(outs)
    return _as_list(selector)


def build_stage_args(
    name: str,
    cmd: str,
    *,
    deps: str | Iterable[str] | None = None,
    outs: str | Iterable[str] | None = None,
    metrics: bool | str | Sequence[str] = False,
    plots: bool | str | Sequence[str] = False,
    params: Mapping[str, ParamValue] | None = None,
    always_changed: bool = False,
) -> list[str]:
    """Build the ``dvc stage add`` argument vector.

    ``metrics=True`` and ``plots=True`` reuse ``outs``; strings or lists name
    the files explicitly. The stage command is the final single argument.

    Example:
        >>> build_stage_args("prep", "python scripts/prep.py", deps="data/raw", outs="data/processed")
        ['stage', 'add', '-n', 'prep', '-d', 'data/raw', '-o', 'data/processed', 'python scripts/prep.py']
    """
    out_list = _as_list(outs)
    args = ["stage", "add", "-n", name]
    for dep in _as_list(deps):
        args.extend(["-d", dep])
    for out in out_list:
        args.extend(["-o", out])
    for metric in _flag_values(metrics, out_list):
        args.extend(["-M", metric])
    for plot in _flag_values(plots, out_list):
        args.extend(["--plots", plot])
    for key, value in (params or {}).items():
        args.extend(["-p", f"{key}={format_param_value(value)}"])
    if always_changed:
        args.append("--always-changed")
    args.append(cmd)
    return args


def dvc_stage(
    name: str,
    cmd: str,
    *,
    deps: str | Iterable[str] | None = None,
    outs: str | Iterable[str] | None = None,
    metrics: bool | str | Sequence[str] = False,
    plots: bool | str | Sequence[str] = False,
    params: Mapping[str, ParamValue] | None = None,
    always_changed: bool = False,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Register a pipeline stage in ``dvc.yaml``."""
    args = build_stage_args(
        name,
        cmd,
        deps=deps,
        outs=outs,
        metrics=metrics,
        plots=plots,
        params=params,
        always_changed=always_changed,
    )
    result = _run_dvc(
        args,
        failure=f"Failed to create DVC stage: {name}",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success(f"Created DVC stage: {name}")
    return True


def dvc_repro(
    targets: str | Iterable[str] | None = None,
    *,
    force: bool = False,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Reproduce the pipeline, or only ``targets``."""
    args = ["repro"]
    if force:
        args.append("--force")
    args.extend(_as_list(targets))
    result = _run_dvc(
        args,
        failure="Failed to reproduce DVC pipeline",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if not exec_util.succeeded(result):
        return False
    log.success("Successfully reproduced DVC pipeline")
    return True


def dvc_status(
    *,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[str] | None:
    """Show which stages are stale.

    Returns:
        Status lines (empty when up to date), or ``None`` on failure.
    """
    result = _run_dvc(
        ["status"],
        failure="Failed to get DVC status",
        cwd=cwd,
        dvc_path=dvc_path,
        runner=runner,
    )
    if result is None or not result.ok:
        return None
    lines = result.lines()
    if not lines:
        log.info("Pipeline is up to date")
    else:
        say("\n".join(lines))
    return lines


def write_csv_dvc(
    frame: pd.DataFrame,
    path: str | Path,
    *,
    message: str | None = None,
    stage_name: str | None = None,
    deps: str | Iterable[str] | None = None,
    cmd: str | None = None,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> pd.DataFrame:
    """Write a DataFrame to CSV and track the file with DVC.

    With ``stage_name`` the file is registered as the output of a pipeline
    stage (``cmd`` is required) instead of being added directly.

    Returns:
        The frame, so calls can sit at the end of a pipeline.
    """
    target = _resolve(path, cwd)
    paths.ensure_dir(target.parent)
    frame.to_csv(target, index=False)
    log.debug(f"wrote {len(frame)} rows to {target}")
    if stage_name is not None:
        if not cmd:
            log.warning(f"No command given for DVC stage: {stage_name}")
            return frame
        dvc_stage(
            stage_name,
            cmd,
            deps=deps,
            outs=str(path),
            cwd=cwd,
            dvc_path=dvc_path,
            runner=runner,
        )
        return frame
    dvc_add(
        str(path),
        message=message,
        cwd=cwd,
        dvc_path=dvc_path,
        git_path=git_path,
        runner=runner,
    )
    return frame


def dvc_track(
    frame: pd.DataFrame,
    path: str | Path,
    *,
    message: str | None = None,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> pd.DataFrame:
    """Write ``frame`` to ``path`` as CSV, track it, and pass it through."""
    return write_csv_dvc(
        frame,
        path,
        message=message,
        cwd=cwd,
        dvc_path=dvc_path,
        git_path=git_path,
        runner=runner,
    )


def write_pickle_dvc(
    obj: ObjT,
    path: str | Path,
    *,
    message: str | None = None,
    cwd: Path | None = None,
    dvc_path: str | None = None,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> ObjT:
    """Pickle an object (a fitted model, say) and track the file with DVC."""
    target = _resolve(path, cwd)
    paths.ensure_dir(target.parent)
    with target.open("wb") as fh:
        pickle.dump(obj, fh)
    dvc_add(
        str(path),
        message=message,
        cwd=cwd,
        dvc_path=dvc_path,
        git_path=git_path,
        runner=runner,
    )
    return obj


def setup_dvc_tracking(
    project_dir: Path,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> None:
    """Write ``.dvcignore`` and keep the data directories in git.

    When the project is a git repository the ``.gitkeep`` files and the
    ``.dvcignore`` are committed as separate steps.
    """
    (project_dir / ".dvcignore").write_text(
        templates.read_template("dvcignore"), encoding="utf-8"
    )
    keep_files = paths.gitkeep_paths(project_dir)
    for keep in keep_files:
        paths.ensure_dir(keep.parent)
        keep.touch()

    if not (project_dir / ".git").exists():
        return
    relative = [str(keep.relative_to(project_dir)) for keep in keep_files]
    if git.git_add(relative, cwd=project_dir, git_path=git_path, runner=runner):
        git.git_commit(
            "Add .gitkeep files to data directories",
            cwd=project_dir,
            git_path=git_path,
            runner=runner,
        )
    if git.git_add(".dvcignore", cwd=project_dir, git_path=git_path, runner=runner):
        git.git_commit(
            "Add .dvcignore file", cwd=project_dir, git_path=git_path, runner=runner
        )
