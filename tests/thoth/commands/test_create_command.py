import json
import os
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

import thoth.commands.create as create_cmd


def _args(**overrides: object) -> SimpleNamespace:
    data: dict[str, object] = {
        "path": "churn",
        "git_init": None,
        "use_dvc": None,
        "use_docker": None,
        "use_lock": None,
        "python_version": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def test_create_project_uses_config_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    Path(os.environ["THOTH_CONFIG"]).write_text(
        json.dumps(
            {
                "tools": {"dvc": "/opt/dvc"},
                "project": {"use_docker": False, "python_version": "3.10"},
            }
        ),
        encoding="utf-8",
    )

    with patch(
        "thoth.commands.create.scaffold.create_analytics_project",
        return_value=tmp_path / "churn",
    ) as mock_create:
        result = create_cmd.create_project(_args(use_lock=False))

    assert result == tmp_path / "churn"
    args, kwargs = mock_create.call_args
    assert args == (Path("churn"),)
    assert kwargs["git_init"] is True
    assert kwargs["use_dvc"] is True
    assert kwargs["use_docker"] is False
    assert kwargs["use_lock"] is False
    assert kwargs["python_version"] == "3.10"
    assert kwargs["tools"].dvc == "/opt/dvc"


def test_explicit_flags_beat_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".thoth.json").write_text(
        json.dumps({"project": {"use_dvc": False}}), encoding="utf-8"
    )

    with patch("thoth.commands.create.scaffold.create_analytics_project") as mock_create:
        create_cmd.create_project(_args(use_dvc=True, python_version="3.12"))

    kwargs = mock_create.call_args.kwargs
    assert kwargs["use_dvc"] is True
    assert kwargs["python_version"] == "3.12"
