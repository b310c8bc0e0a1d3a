import re

import pytest

from drillrun import ui

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture(autouse=True)
def _plain_terminal(monkeypatch):
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)
    monkeypatch.delenv("NO_EMOJI", raising=False)


def test_use_emoji_follows_environment(monkeypatch):
    assert ui.use_emoji() is True
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.use_emoji() is False


def test_bold_is_plain_without_colour_support():
    assert ui.bold("`I AM NOT DONE`") == "`I AM NOT DONE`"


def test_bold_disabled_when_force_is_zero(monkeypatch):
    monkeypatch.setenv("CLICOLOR_FORCE", "0")
    assert ui.bold("word") == "word"


def test_bold_wraps_text_when_forced(monkeypatch):
    monkeypatch.setenv("CLICOLOR_FORCE", "1")
    styled = ui.bold("word")
    assert styled.startswith("\x1b[1m")
    assert _ANSI.sub("", styled) == "word"


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran exercises/a.rs with errors")
    assert capsys.readouterr().out == "! Ran exercises/a.rs with errors\n"


def test_warn_with_emoji(capsys):
    ui.warn("Compilation failed")
    assert capsys.readouterr().out == "⚠️  Compilation failed\n"


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran x")
    assert capsys.readouterr().out == "✓ Successfully ran x\n"


def test_success_with_emoji(capsys):
    ui.success("Successfully ran x")
    assert capsys.readouterr().out == "✅ Successfully ran x\n"


def test_forced_colour_keeps_message_text(monkeypatch, capsys):
    monkeypatch.setenv("CLICOLOR_FORCE", "1")
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("done")
    out = capsys.readouterr().out
    assert out != "✓ done\n"
    assert _ANSI.sub("", out) == "✓ done\n"