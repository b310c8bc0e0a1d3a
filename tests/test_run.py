import subprocess
from pathlib import Path

import pytest

from drillrun.exercise import Exercise, Mode
from drillrun.run import reset, run
from drillrun.verify import VerificationError

PENDING_SOURCE = "// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n"
DONE_SOURCE = "fn main() {\n}\n"


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


def make_exercise(root, name, mode=Mode.COMPILE, pending=False):
    path = Path("exercises") / f"{name}.rs"
    (root / path).write_text(PENDING_SOURCE if pending else DONE_SOURCE)
    return Exercise(name=name, path=path, mode=mode, hint="")


def test_run_compile_success(workdir, commands, capsys):
    commands.stdout = b"Hello world!"
    exercise = make_exercise(workdir, "compSuccess")
    run(exercise)
    out = capsys.readouterr().out
    assert "Hello world!" in out
    assert f"Successfully ran {exercise}" in out


def test_run_compile_failure(workdir, commands, capsys):
    commands.compile_rc = 1
    commands.stderr = b"expected pattern"
    exercise = make_exercise(workdir, "compFailure")
    with pytest.raises(VerificationError) as excinfo:
        run(exercise)
    assert excinfo.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Compilation of {exercise} failed!" in out
    assert "expected pattern" in out


def test_run_binary_failure(workdir, commands, capsys):
    commands.run_rc = 1
    commands.stderr = b"panicked"
    exercise = make_exercise(workdir, "a")
    with pytest.raises(VerificationError):
        run(exercise)
    out = capsys.readouterr().out
    assert "panicked" in out
    assert f"Ran {exercise} with errors" in out


def test_run_test_mode_with_output(workdir, commands, capsys):
    commands.stdout = b"THIS TEST TOO SHALL PASS"
    run(make_exercise(workdir, "testSuccess", mode=Mode.TEST), True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out
    assert commands.calls[0][:2] == ["rustc", "--test"]


def test_run_test_mode_without_output(workdir, commands, capsys):
    commands.stdout = b"THIS TEST TOO SHALL PASS"
    run(make_exercise(workdir, "testSuccess", mode=Mode.TEST), False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_run_test_failure(workdir, commands):
    commands.run_rc = 101
    with pytest.raises(VerificationError):
        run(make_exercise(workdir, "testNotPassed", mode=Mode.TEST))


def test_run_test_exercise_does_not_prompt(workdir, commands, capsys):
    run(make_exercise(workdir, "pending_test_exercise", mode=Mode.TEST, pending=True))
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_run_compile_exercise_does_not_prompt(workdir, commands, capsys):
    run(make_exercise(workdir, "pending_exercise", pending=True))
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_run_build_script_skips_binary(workdir, commands, capsys):
    (workdir / "exercises" / "tests").mkdir()
    commands.stdout = b"cargo test output"
    run(make_exercise(workdir, "build", mode=Mode.BUILD_SCRIPT), True)
    assert "cargo test output" not in capsys.readouterr().out
    assert commands.calls == [
        ["cargo", "test", "--manifest-path", "./exercises/tests/Cargo.toml"]
    ]


def test_reset_stashes_exercise(workdir, monkeypatch):
    started = []

    def fake_popen(args, **kwargs):
        started.append(list(args))
        return "process"

    monkeypatch.setattr(subprocess, "Popen", fake_popen)
    result = reset(make_exercise(workdir, "intro1"))
    assert result == "process"
    assert started == [["git", "stash", "--", str(Path("exercises") / "intro1.rs")]]