from __future__ import annotations

import pytest

import thoth.log as thoth_log


def test_default_level_hides_debug(capsys: pytest.CaptureFixture[str]) -> None:
    thoth_log.debug("hidden detail")
    thoth_log.info("visible")

    out = capsys.readouterr().out
    assert "hidden detail" not in out
    assert "ℹ visible" in out


def test_env_level_is_read_once(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("THOTH_LOG_LEVEL", "debug")

    thoth_log.debug("now shown")

    assert thoth_log.configured_level() is thoth_log.LogLevel.DEBUG
    assert "now shown" in capsys.readouterr().out


def test_set_level_filters_below_threshold(capsys: pytest.CaptureFixture[str]) -> None:
    thoth_log.set_level("warning")

    thoth_log.success("done")
    thoth_log.warning("careful")
    thoth_log.error("broken")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "! careful" in captured.err
    assert "✖ broken" in captured.err


def test_unknown_level_falls_back_to_info() -> None:
    thoth_log.set_level("chatty")
    assert thoth_log.configured_level() is thoth_log.LogLevel.INFO
    thoth_log.set_level("WARN")
    assert thoth_log.configured_level() is thoth_log.LogLevel.WARNING


def test_success_prefix(capsys: pytest.CaptureFixture[str]) -> None:
    thoth_log.success("Initialized DVC")
    assert capsys.readouterr().out == "✔ Initialized DVC\n"


def test_no_color_sources(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("THOTH_NO_COLOR")
    monkeypatch.delenv("NO_COLOR", raising=False)
    assert thoth_log._no_color() is False

    monkeypatch.setenv("NO_COLOR", "1")
    assert thoth_log._no_color() is True

    monkeypatch.delenv("NO_COLOR")
    thoth_log.set_no_color(True)
    assert thoth_log._no_color() is True
