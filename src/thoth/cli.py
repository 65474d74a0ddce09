"""Thoth command-line interface."""

from functools import wraps
from pathlib import Path
from types import SimpleNamespace
from typing import Annotated, Callable, Optional, TypeVar

import typer

from . import __version__, config, docker, dvc, git, quarto
from . import log as thoth_log
from .commands import config as config_cmd
from .commands import create as create_cmd
from .commands import decision as decision_cmd
from .decisions import EXPORT_FORMATS
from .errors import ThothError
from .io import die
from .models import ToolsSection

F = TypeVar("F", bound=Callable[..., object])

app = typer.Typer(
    name="thoth",
    help="Scaffold analytics projects and drive git, DVC, and Docker.",
    no_args_is_help=True,
    add_completion=False,
)
git_app = typer.Typer(help="Git version control helpers.", no_args_is_help=True)
dvc_app = typer.Typer(help="DVC data tracking and pipeline helpers.", no_args_is_help=True)
docker_app = typer.Typer(help="Docker image helpers.", no_args_is_help=True)
decision_app = typer.Typer(help="Record and report analytical decisions.", no_args_is_help=True)
quarto_app = typer.Typer(help="Custom Quarto report templates.", no_args_is_help=True)

app.add_typer(git_app, name="git")
app.add_typer(dvc_app, name="dvc")
app.add_typer(docker_app, name="docker")
app.add_typer(decision_app, name="decision")
app.add_typer(quarto_app, name="quarto")


def _handle_errors(func: F) -> F:
    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> object:
        try:
            return func(*args, **kwargs)
        except ThothError as exc:
            die(str(exc), hint=exc.recovery_hint)

    return wrapper  # type: ignore[return-value]


def _tools() -> ToolsSection:
    return config.load_config().tools


def _exit_on(ok: bool) -> None:
    if not ok:
        raise typer.Exit(code=1)


def _validate_log_level(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized not in thoth_log.LOG_LEVEL_NAMES:
        raise typer.BadParameter(
            f"expected one of: {', '.join(thoth_log.LOG_LEVEL_NAMES)}"
        )
    return normalized


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help="Log level (trace, debug, info, success, warning, error).",
            callback=_validate_log_level,
        ),
    ] = None,
    no_color: Annotated[
        bool, typer.Option("--no-color", help="Disable colored output.")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Thoth: reproducible analytics projects."""
    if log_level is not None:
        thoth_log.set_level(log_level)
    if no_color:
        thoth_log.set_no_color(True)


@app.command("create")
@_handle_errors
def create(
    path: Annotated[Path, typer.Argument(help="Directory for the new project.")],
    git_init: Annotated[
        Optional[bool], typer.Option("--git/--no-git", help="Initialize a git repository.")
    ] = None,
    use_dvc: Annotated[
        Optional[bool], typer.Option("--dvc/--no-dvc", help="Initialize DVC tracking.")
    ] = None,
    use_docker: Annotated[
        Optional[bool],
        typer.Option("--docker/--no-docker", help="Write Docker configuration."),
    ] = None,
    use_lock: Annotated[
        Optional[bool],
        typer.Option("--lock/--no-lock", help="Write and freeze the dependency lock."),
    ] = None,
    python_version: Annotated[
        Optional[str],
        typer.Option("--python-version", help="Python version for the Docker image."),
    ] = None,
) -> None:
    """Create a new analytics project."""
    create_cmd.create_project(
        SimpleNamespace(
            path=path,
            git_init=git_init,
            use_dvc=use_dvc,
            use_docker=use_docker,
            use_lock=use_lock,
            python_version=python_version,
        )
    )


@app.command("config")
@_handle_errors
def show_config(
    sources: Annotated[
        bool, typer.Option("--sources", help="List config files instead of values.")
    ] = False,
) -> None:
    """Show the resolved configuration."""
    config_cmd.show_config(SimpleNamespace(sources=sources))


# git


@git_app.command("init")
@_handle_errors
def git_init_command() -> None:
    """Initialize a git repository here."""
    _exit_on(git.git_init_repo(git_path=_tools().git))


@git_app.command("add")
@_handle_errors
def git_add_command(
    paths: Annotated[list[str], typer.Argument(help="Paths to stage.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Add ignored files.")] = False,
) -> None:
    """Stage files."""
    _exit_on(git.git_add(paths, force=force, git_path=_tools().git))


@git_app.command("commit")
@_handle_errors
def git_commit_command(
    message: Annotated[str, typer.Option("--message", "-m", help="Commit message.")],
    all: Annotated[
        bool, typer.Option("--all", "-a", help="Stage modified and deleted files.")
    ] = False,
) -> None:
    """Record staged changes."""
    _exit_on(git.git_commit(message, all=all, git_path=_tools().git))


@git_app.command("status")
@_handle_errors
def git_status_command(
    long: Annotated[bool, typer.Option("--long", help="Show the long format.")] = False,
) -> None:
    """Show the working tree status."""
    _exit_on(git.git_status(short=not long, git_path=_tools().git) is not None)


@git_app.command("pull")
@_handle_errors
def git_pull_command(
    remote: Annotated[Optional[str], typer.Argument()] = None,
    branch: Annotated[Optional[str], typer.Argument()] = None,
) -> None:
    """Pull changes from a remote."""
    _exit_on(git.git_pull(remote, branch, git_path=_tools().git))


@git_app.command("push")
@_handle_errors
def git_push_command(
    remote: Annotated[Optional[str], typer.Argument()] = None,
    branch: Annotated[Optional[str], typer.Argument()] = None,
) -> None:
    """Push commits to a remote."""
    _exit_on(git.git_push(remote, branch, git_path=_tools().git))


@git_app.command("branch")
@_handle_errors
def git_branch_command(
    name: Annotated[str, typer.Argument(help="Branch to create.")],
    checkout: Annotated[
        bool, typer.Option("--checkout/--no-checkout", help="Switch to the new branch.")
    ] = True,
) -> None:
    """Create a branch."""
    _exit_on(git.git_branch(name, checkout=checkout, git_path=_tools().git))


@git_app.command("checkout")
@_handle_errors
def git_checkout_command(
    name: Annotated[str, typer.Argument(help="Branch to switch to.")],
    create: Annotated[bool, typer.Option("-b", help="Create the branch first.")] = False,
) -> None:
    """Switch branches."""
    _exit_on(git.git_checkout(name, create=create, git_path=_tools().git))


@git_app.command("branches")
@_handle_errors
def git_branches_command(
    all: Annotated[bool, typer.Option("--all", "-a", help="Include remotes.")] = False,
) -> None:
    """List branches."""
    _exit_on(git.git_branch_list(all=all, git_path=_tools().git) is not None)


@git_app.command("log")
@_handle_errors
def git_log_command(
    n: Annotated[int, typer.Option("-n", help="Number of commits.")] = 10,
    full: Annotated[bool, typer.Option("--full", help="Multi-line entries.")] = False,
) -> None:
    """Show recent commits."""
    _exit_on(git.git_log(n=n, oneline=not full, git_path=_tools().git) is not None)


@git_app.command("clone")
@_handle_errors
def git_clone_command(
    url: Annotated[str, typer.Argument(help="Repository URL.")],
    path: Annotated[Path, typer.Argument(help="Target directory.")],
    branch: Annotated[Optional[str], typer.Option("--branch", "-b")] = None,
) -> None:
    """Clone a repository."""
    _exit_on(git.git_clone(url, path, branch=branch, git_path=_tools().git))


# dvc


@dvc_app.command("init")
@_handle_errors
def dvc_init_command() -> None:
    """Initialize DVC here."""
    _exit_on(dvc.dvc_init(dvc_path=_tools().dvc))


@dvc_app.command("add")
@_handle_errors
def dvc_add_command(
    paths: Annotated[list[str], typer.Argument(help="Files or directories to track.")],
    message: Annotated[
        Optional[str], typer.Option("--message", "-m", help="Commit the pointers.")
    ] = None,
    recursive: Annotated[bool, typer.Option("--recursive", "-R")] = False,
    no_git: Annotated[
        bool, typer.Option("--no-git", help="Do not stage .dvc files in git.")
    ] = False,
) -> None:
    """Track data files with DVC; exits non-zero when nothing was tracked."""
    tools = _tools()
    tracked = dvc.dvc_add(
        paths,
        message=message,
        recursive=recursive,
        git_add=not no_git,
        dvc_path=tools.dvc,
        git_path=tools.git,
    )
    _exit_on(bool(tracked))


@dvc_app.command("commit")
@_handle_errors
def dvc_commit_command(
    paths: Annotated[list[str], typer.Argument(help="Tracked outputs.")],
) -> None:
    """Record changes to tracked outputs."""
    _exit_on(dvc.dvc_commit(paths, dvc_path=_tools().dvc))


@dvc_app.command("pull")
@_handle_errors
def dvc_pull_command(
    targets: Annotated[Optional[list[str]], typer.Argument()] = None,
    remote: Annotated[Optional[str], typer.Option("--remote", "-r")] = None,
) -> None:
    """Pull tracked data from a remote."""
    _exit_on(dvc.dvc_pull(targets, remote=remote, dvc_path=_tools().dvc))


@dvc_app.command("push")
@_handle_errors
def dvc_push_command(
    targets: Annotated[Optional[list[str]], typer.Argument()] = None,
    remote: Annotated[Optional[str], typer.Option("--remote", "-r")] = None,
) -> None:
    """Push tracked data to a remote."""
    _exit_on(dvc.dvc_push(targets, remote=remote, dvc_path=_tools().dvc))


def _parse_params(values: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected name=value, got {raw!r}")
        params[key.strip()] = value
    return params


@dvc_app.command("stage")
@_handle_errors
def dvc_stage_command(
    name: Annotated[str, typer.Argument(help="Stage name.")],
    cmd: Annotated[str, typer.Argument(help="Command the stage runs.")],
    deps: Annotated[Optional[list[str]], typer.Option("--dep", "-d")] = None,
    outs: Annotated[Optional[list[str]], typer.Option("--out", "-o")] = None,
    metrics: Annotated[Optional[list[str]], typer.Option("--metric", "-M")] = None,
    plots: Annotated[Optional[list[str]], typer.Option("--plot")] = None,
    params: Annotated[Optional[list[str]], typer.Option("--param", "-p", help="name=value")] = None,
    always_changed: Annotated[bool, typer.Option("--always-changed")] = False,
) -> None:
    """Add a pipeline stage."""
    _exit_on(
        dvc.dvc_stage(
            name,
            cmd,
            deps=deps,
            outs=outs,
            metrics=metrics or False,
            plots=plots or False,
            params=_parse_params(params or []) or None,
            always_changed=always_changed,
            dvc_path=_tools().dvc,
        )
    )


@dvc_app.command("repro")
@_handle_errors
def dvc_repro_command(
    targets: Annotated[Optional[list[str]], typer.Argument()] = None,
    force: Annotated[bool, typer.Option("--force", "-f")] = False,
) -> None:
    """Reproduce the pipeline."""
    _exit_on(dvc.dvc_repro(targets, force=force, dvc_path=_tools().dvc))


@dvc_app.command("status")
@_handle_errors
def dvc_status_command() -> None:
    """Show pipeline status."""
    _exit_on(dvc.dvc_status(dvc_path=_tools().dvc) is not None)


# docker


@docker_app.command("build")
@_handle_errors
def docker_build_command(
    tag: Annotated[str, typer.Argument(help="Image tag.")],
    context: Annotated[Path, typer.Option("--context")] = Path("."),
    dockerfile: Annotated[Path, typer.Option("--file", "-f")] = Path("docker/Dockerfile"),
) -> None:
    """Build the project image."""
    _exit_on(
        docker.docker_build(
            tag, context=context, dockerfile=dockerfile, docker_path=_tools().docker
        )
    )


# decision


@decision_app.command("init")
@_handle_errors
def decision_init_command(
    analysis_id: Annotated[str, typer.Argument(help="Analysis identifier.")],
    analyst: Annotated[str, typer.Option("--analyst", help="Who makes the calls.")],
    description: Annotated[Optional[str], typer.Option("--description")] = None,
    file: Annotated[Optional[Path], typer.Option("--file", help="Decision tree file.")] = None,
    overwrite: Annotated[bool, typer.Option("--overwrite")] = False,
) -> None:
    """Start a decision tree."""
    decision_cmd.init_tree(
        SimpleNamespace(
            analysis_id=analysis_id,
            analyst=analyst,
            description=description,
            file=file,
            overwrite=overwrite,
        )
    )


@decision_app.command("record")
@_handle_errors
def decision_record_command(
    check: Annotated[str, typer.Option("--check", help="What was checked.")],
    observation: Annotated[str, typer.Option("--observation", help="What was seen.")],
    decision: Annotated[str, typer.Option("--decision", help="What was decided.")],
    reasoning: Annotated[str, typer.Option("--reasoning", help="Why.")],
    evidence: Annotated[Optional[str], typer.Option("--evidence")] = None,
    file: Annotated[Optional[Path], typer.Option("--file")] = None,
) -> None:
    """Append a decision."""
    decision_cmd.record(
        SimpleNamespace(
            check=check,
            observation=observation,
            decision=decision,
            reasoning=reasoning,
            evidence=evidence,
            file=file,
        )
    )


@decision_app.command("methods")
@_handle_errors
def decision_methods_command(
    file: Annotated[Optional[Path], typer.Option("--file")] = None,
    no_evidence: Annotated[bool, typer.Option("--no-evidence")] = False,
) -> None:
    """Print the decisions as a methods section."""
    decision_cmd.methods(SimpleNamespace(file=file, no_evidence=no_evidence))


def _validate_format(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in EXPORT_FORMATS:
        raise typer.BadParameter(f"expected one of: {', '.join(EXPORT_FORMATS)}")
    return normalized


@decision_app.command("export")
@_handle_errors
def decision_export_command(
    export_format: Annotated[
        str, typer.Option("--format", callback=_validate_format, help="md, html, yaml, or json.")
    ] = "md",
    output: Annotated[Optional[Path], typer.Option("--output", "-o")] = None,
    file: Annotated[Optional[Path], typer.Option("--file")] = None,
) -> None:
    """Render the decision tree as a report."""
    decision_cmd.export(SimpleNamespace(format=export_format, output=output, file=file))


# quarto


@quarto_app.command("template")
@_handle_errors
def quarto_template_command(
    name: Annotated[str, typer.Argument(help="Template name.")],
    primary_color: Annotated[str, typer.Option("--color")] = quarto.DEFAULT_PRIMARY_COLOR,
    font: Annotated[str, typer.Option("--font")] = quarto.DEFAULT_FONT,
    theme: Annotated[str, typer.Option("--theme")] = quarto.DEFAULT_THEME,
    overwrite: Annotated[bool, typer.Option("--overwrite")] = False,
) -> None:
    """Create a report template under reports/templates."""
    quarto.create_quarto_template(
        name, primary_color=primary_color, font=font, theme=theme, overwrite=overwrite
    )


@quarto_app.command("apply")
@_handle_errors
def quarto_apply_command(
    report: Annotated[Path, typer.Argument(help="Quarto document to update.")],
    template: Annotated[str, typer.Argument(help="Template name.")],
) -> None:
    """Apply a template to a report."""
    quarto.apply_template_to_report(report, template)
