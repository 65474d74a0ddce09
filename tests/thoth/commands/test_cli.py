import re
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import thoth
import thoth.cli as cli
import thoth.tools as tools

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

runner = CliRunner()


def _strip_ansi(output: str) -> str:
    return ANSI_ESCAPE_RE.sub("", output)


def test_global_log_level_flag_sets_runtime_level() -> None:
    with (
        patch("thoth.cli.config_cmd.show_config", lambda _args: None),
        patch("thoth.cli.thoth_log.set_level") as mock_set_level,
    ):
        result = runner.invoke(cli.app, ["--log-level", "debug", "config"])

    assert result.exit_code == 0
    mock_set_level.assert_called_once_with("debug")


def test_global_log_level_rejects_unknown_values() -> None:
    result = runner.invoke(cli.app, ["--log-level", "loud", "config"], color=False)
    clean_output = _strip_ansi(result.output)

    assert result.exit_code != 0
    assert "--log-level" in clean_output
    assert "expected one of" in clean_output.lower()


def test_no_color_flag_disables_colorized_output() -> None:
    with (
        patch("thoth.cli.config_cmd.show_config", lambda _args: None),
        patch("thoth.cli.thoth_log.set_no_color") as mock_set_no_color,
    ):
        result = runner.invoke(cli.app, ["--no-color", "config"])

    assert result.exit_code == 0
    mock_set_no_color.assert_called_once_with(True)


def test_version_flag() -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == thoth.__version__


def test_create_passes_flags_as_namespace() -> None:
    captured: dict[str, SimpleNamespace] = {}

    def fake_create(args: SimpleNamespace) -> None:
        captured["args"] = args

    with patch("thoth.cli.create_cmd.create_project", fake_create):
        result = runner.invoke(
            cli.app, ["create", "churn", "--no-docker", "--python-version", "3.11"]
        )

    assert result.exit_code == 0
    args = captured["args"]
    assert args.path == Path("churn")
    assert args.use_docker is False
    assert args.git_init is None
    assert args.use_dvc is None
    assert args.python_version == "3.11"


def test_thoth_errors_exit_with_message_and_hint(tmp_path: Path) -> None:
    result = runner.invoke(
        cli.app,
        [
            "decision",
            "record",
            "--check",
            "Outliers",
            "--observation",
            "Long tail",
            "--decision",
            "Cap",
            "--reasoning",
            "Entry errors",
            "--file",
            str(tmp_path / "missing.yaml"),
        ],
    )

    assert result.exit_code == 1
    assert "error: decision tree not found" in result.output
    assert "hint: run 'thoth decision init'" in result.output


def test_missing_tool_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tools.shutil, "which", lambda name: None)

    result = runner.invoke(cli.app, ["git", "status"])

    assert result.exit_code == 1
    assert "Git is not installed" in result.output


def test_wrapped_command_failure_exits_nonzero() -> None:
    with patch("thoth.cli.git.git_commit", return_value=False) as mock_commit:
        result = runner.invoke(cli.app, ["git", "commit", "-m", "Add model"])

    assert result.exit_code == 1
    mock_commit.assert_called_once_with("Add model", all=False, git_path="git")


def test_git_log_failure_exits_nonzero() -> None:
    with patch("thoth.cli.git.git_log", return_value=None) as mock_log:
        result = runner.invoke(cli.app, ["git", "log", "-n", "3"])

    assert result.exit_code == 1
    mock_log.assert_called_once_with(n=3, oneline=True, git_path="git")


def test_git_log_success_exits_zero() -> None:
    with patch("thoth.cli.git.git_log", return_value=["abc123 Add model"]):
        result = runner.invoke(cli.app, ["git", "log"])

    assert result.exit_code == 0


def test_dvc_add_exits_nonzero_when_nothing_tracked() -> None:
    with patch("thoth.cli.dvc.dvc_add", return_value=[]) as mock_add:
        result = runner.invoke(cli.app, ["dvc", "add", "data/raw/missing.csv"])

    assert result.exit_code == 1
    assert mock_add.call_args.args == (["data/raw/missing.csv"],)


def test_dvc_add_exits_zero_when_something_tracked() -> None:
    with patch("thoth.cli.dvc.dvc_add", return_value=["data/raw/sales.csv"]):
        result = runner.invoke(
            cli.app, ["dvc", "add", "data/raw/sales.csv", "data/raw/missing.csv"]
        )

    assert result.exit_code == 0


def test_git_add_forwards_paths() -> None:
    with patch("thoth.cli.git.git_add", return_value=True) as mock_add:
        result = runner.invoke(cli.app, ["git", "add", "-f", "a.dvc", "b.dvc"])

    assert result.exit_code == 0
    mock_add.assert_called_once_with(["a.dvc", "b.dvc"], force=True, git_path="git")


def test_dvc_stage_parses_params() -> None:
    with patch("thoth.cli.dvc.dvc_stage", return_value=True) as mock_stage:
        result = runner.invoke(
            cli.app,
            [
                "dvc",
                "stage",
                "train",
                "python scripts/train.py",
                "-d",
                "data/processed",
                "-o",
                "model.pkl",
                "-p",
                "alpha=0.5",
            ],
        )

    assert result.exit_code == 0
    _, kwargs = mock_stage.call_args
    assert mock_stage.call_args.args == ("train", "python scripts/train.py")
    assert kwargs["deps"] == ["data/processed"]
    assert kwargs["outs"] == ["model.pkl"]
    assert kwargs["metrics"] is False
    assert kwargs["params"] == {"alpha": "0.5"}


def test_dvc_stage_rejects_malformed_params() -> None:
    with patch("thoth.cli.dvc.dvc_stage", return_value=True) as mock_stage:
        result = runner.invoke(cli.app, ["dvc", "stage", "train", "run", "-p", "alpha"])

    assert result.exit_code != 0
    assert "expected name=value" in _strip_ansi(result.output)
    mock_stage.assert_not_called()


def test_decision_export_rejects_unknown_format() -> None:
    result = runner.invoke(cli.app, ["decision", "export", "--format", "pdf"], color=False)

    assert result.exit_code != 0
    assert "expected one of" in _strip_ansi(result.output).lower()


def test_decision_workflow_end_to_end(tmp_path: Path) -> None:
    tree = str(tmp_path / "tree.yaml")

    init = runner.invoke(
        cli.app, ["decision", "init", "churn-q3", "--analyst", "Sam", "--file", tree]
    )
    record = runner.invoke(
        cli.app,
        [
            "decision",
            "record",
            "--check",
            "Missing tenure",
            "--observation",
            "4% of rows lack tenure",
            "--decision",
            "Drop them",
            "--reasoning",
            "Imputation biases the curve",
            "--file",
            tree,
        ],
    )
    methods = runner.invoke(cli.app, ["decision", "methods", "--file", tree])
    export = runner.invoke(
        cli.app, ["decision", "export", "--format", "json", "--file", tree]
    )

    assert init.exit_code == 0
    assert record.exit_code == 0
    assert methods.exit_code == 0
    assert "When checking missing tenure, we observed that 4% of rows lack tenure." in (
        methods.output
    )
    assert export.exit_code == 0
    assert '"analysis_id": "churn-q3"' in export.output


def test_quarto_template_command(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli.app, ["quarto", "template", "brand", "--color", "#112233"])

    assert result.exit_code == 0
    assert (tmp_path / "reports" / "templates" / "brand" / "custom.css").exists()


def test_quarto_apply_reports_malformed_front_matter(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    report = tmp_path / "report.qmd"
    report.write_text("---\ntitle: [unclosed\n---\nBody\n", encoding="utf-8")
    assert runner.invoke(cli.app, ["quarto", "template", "brand"]).exit_code == 0

    result = runner.invoke(cli.app, ["quarto", "apply", str(report), "brand"])

    assert result.exit_code == 1
    assert "error: report front matter is not valid YAML" in result.output
    assert report.read_text(encoding="utf-8").endswith("Body\n")
