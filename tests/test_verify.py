import subprocess
from pathlib import Path

import pytest

from drillrun import verify as verify_mod
from drillrun.exercise import Exercise, Mode
from drillrun.verify import VerificationError, prompt_for_completion, verify

PENDING_SOURCE = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
DONE_SOURCE = "// fake_exercise\n\nfn main() {\n\n}\n"


class _Commands:
    def __init__(self):
        self.calls = []
        self.compile_rc = 0
        self.run_rc = 0
        self.stdout = b""
        self.stderr = b""

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        is_tool = Path(args[0]).name in ("rustc", "cargo")
        rc = self.compile_rc if is_tool else self.run_rc
        return subprocess.CompletedProcess(args, rc, self.stdout, self.stderr)

    def tool_calls(self, tool):
        return [call for call in self.calls if call[0] == tool]


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    (tmp_path / "exercises").mkdir()
    return tmp_path


@pytest.fixture
def commands(monkeypatch):
    fake = _Commands()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


def make_exercise(root, name, mode=Mode.COMPILE, pending=False, hint=""):
    path = Path("exercises") / f"{name}.rs"
    (root / path).write_text(PENDING_SOURCE if pending else DONE_SOURCE)
    return Exercise(name=name, path=path, mode=mode, hint=hint)


def test_verify_passes_done_exercises(workdir, commands, capsys):
    exercises = [make_exercise(workdir, "a"), make_exercise(workdir, "b")]
    verify(exercises, (0, 2))
    assert len(commands.tool_calls("rustc")) == 2
    assert "2/2" in capsys.readouterr().err


def test_verify_default_progress_counts_all(workdir, commands, capsys):
    verify(iter([make_exercise(workdir, "a")]))
    assert "1/1" in capsys.readouterr().err


def test_verify_compile_failure(workdir, commands, capsys):
    commands.compile_rc = 1
    commands.stderr = b"error[E0425]"
    exercise = make_exercise(workdir, "a")
    with pytest.raises(VerificationError) as excinfo:
        verify([exercise], (0, 1))
    assert excinfo.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Compiling of {exercise} failed!" in out
    assert "error[E0425]" in out


def test_verify_stops_at_first_failure(workdir, commands):
    commands.compile_rc = 1
    first = make_exercise(workdir, "a")
    second = make_exercise(workdir, "b")
    with pytest.raises(VerificationError) as excinfo:
        verify([first, second], (0, 2))
    assert excinfo.value.exercise is first
    assert len(commands.tool_calls("rustc")) == 1


def test_verify_pending_exercise_prompts(workdir, commands, capsys):
    exercise = make_exercise(workdir, "p", pending=True)
    with pytest.raises(VerificationError):
        verify([exercise], (0, 1))
    out = capsys.readouterr().out
    assert f"Successfully ran {exercise}!" in out
    assert "The code is compiling!" in out
    assert " 3 |  // I AM NOT DONE" in out


def test_verify_run_failure(workdir, commands, capsys):
    commands.run_rc = 1
    commands.stdout = b"boom"
    exercise = make_exercise(workdir, "a")
    with pytest.raises(VerificationError):
        verify([exercise], (0, 1))
    out = capsys.readouterr().out
    assert f"Ran {exercise} with errors" in out
    assert "boom" in out


def test_verify_test_mode_builds_harness(workdir, commands, capsys):
    exercise = make_exercise(workdir, "t", mode=Mode.TEST)
    verify([exercise], (0, 1))
    assert "1/1" in capsys.readouterr().err
    rustc = commands.tool_calls("rustc")
    assert rustc[0][1] == "--test"
    assert commands.calls[-1][-1] == "--show-output"


def test_prompt_for_completion_done(workdir, capsys):
    exercise = make_exercise(workdir, "a")
    assert prompt_for_completion(exercise, None, False) is True
    assert capsys.readouterr().out == ""


def test_prompt_for_completion_shows_output_and_hint(workdir, capsys):
    exercise = make_exercise(workdir, "p", pending=True, hint="Try harder")
    assert prompt_for_completion(exercise, "hello there", True) is False
    out = capsys.readouterr().out
    assert "Output:" in out
    assert "hello there" in out
    assert "Hints:" in out
    assert "Try harder" in out


def test_prompt_without_emoji(workdir, capsys, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make_exercise(workdir, "p", mode=Mode.TEST, pending=True)
    assert prompt_for_completion(exercise, None, False) is False
    assert "~*~ The code is compiling, and the tests pass! ~*~" in capsys.readouterr().out


def test_test_verbose_shows_output(workdir, commands, capsys):
    commands.stdout = b"THIS TEST TOO SHALL PASS"
    verify_mod.test(make_exercise(workdir, "t", mode=Mode.TEST), True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out


def test_test_quiet_hides_output(workdir, commands, capsys):
    commands.stdout = b"THIS TEST TOO SHALL PASS"
    verify_mod.test(make_exercise(workdir, "t", mode=Mode.TEST), False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_test_failure_raises(workdir, commands, capsys):
    commands.run_rc = 101
    exercise = make_exercise(workdir, "t", mode=Mode.TEST)
    with pytest.raises(VerificationError) as excinfo:
        verify_mod.test(exercise, False)
    assert excinfo.value.exercise is exercise
    assert f"Testing of {exercise} failed!" in capsys.readouterr().out