# ruff: noqa: E402

from __future__ import annotations

import builtins
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import thoth.io as io
import thoth.log as thoth_log
import thoth.tools as tools
from thoth.exec import CommandRequest, CommandResult


class RecordingRunner:
    """Command runner that records requests and mimics tool side effects.

    Commands are keyed as ``"<tool> <subcommand>"`` (``"git commit"``,
    ``"dvc add"``, ``"pip freeze"``). Keys in ``fail`` exit 1, tools in
    ``missing`` behave like an absent executable, and ``stdout`` maps keys
    to canned output.
    """

    def __init__(self) -> None:
        self.calls: list[CommandRequest] = []
        self.fail: set[str] = set()
        self.missing: set[str] = set()
        self.stdout: dict[str, str] = {}

    @staticmethod
    def key(argv: tuple[str, ...]) -> str:
        if argv[1:4] == ("-m", "pip", "freeze"):
            return "pip freeze"
        name = Path(argv[0]).name
        sub = argv[1] if len(argv) > 1 else ""
        return f"{name} {sub}".strip()

    def run(self, request: CommandRequest) -> CommandResult | None:
        self.calls.append(request)
        key = self.key(request.argv)
        if key.split(" ")[0] in self.missing:
            return None
        if key in self.fail:
            return CommandResult(
                argv=request.argv, returncode=1, stdout="", stderr=f"{key} exploded"
            )
        self._apply(key, request)
        return CommandResult(
            argv=request.argv,
            returncode=0,
            stdout=self.stdout.get(key, ""),
            stderr="",
        )

    def _apply(self, key: str, request: CommandRequest) -> None:
        cwd = request.cwd or Path.cwd()
        if key == "git init":
            (cwd / ".git").mkdir(exist_ok=True)
        elif key == "dvc init":
            (cwd / ".dvc").mkdir(exist_ok=True)
        elif key == "dvc add":
            (cwd / f"{request.argv[-1]}.dvc").write_text("outs: []\n", encoding="utf-8")

    def argvs(self) -> list[list[str]]:
        return [list(request.argv) for request in self.calls]

    def keys(self) -> list[str]:
        return [self.key(request.argv) for request in self.calls]

    def commit_messages(self) -> list[str]:
        return [
            request.argv[-1]
            for request in self.calls
            if self.key(request.argv) == "git commit"
        ]


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("THOTH_CONFIG", str(tmp_path / "user-config.json"))
    monkeypatch.delenv("THOTH_LOG_LEVEL", raising=False)
    monkeypatch.setenv("THOTH_NO_COLOR", "1")
    monkeypatch.setattr(thoth_log, "_configured_level", None)
    monkeypatch.setattr(thoth_log, "_no_color_override", None)
    monkeypatch.setattr(io, "_use_questionary", lambda: False)
    monkeypatch.setattr(tools.shutil, "which", lambda name: f"/usr/bin/{name}")

    def fail_input(prompt: str = "") -> str:
        raise AssertionError("prompted unexpectedly")

    monkeypatch.setattr(builtins, "input", fail_input)
