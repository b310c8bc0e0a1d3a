"""Running and resetting a single exercise."""

from __future__ import annotations

import subprocess

from drillrun.exercise import CompileError, Exercise, Mode, RunError
from drillrun.ui import success, warn
from drillrun.verify import VerificationError, test


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run one exercise; raise VerificationError if it fails."""
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        test(exercise, verbose)
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen:
    """Start ``git stash`` on the exercise file and return the process."""
    return subprocess.Popen(["git", "stash", "--", str(exercise.path)])


def _compile_and_run(exercise: Exercise) -> None:
    try:
        compiled = exercise.compile()
    except CompileError as exc:
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(exc.output.stderr)
        raise VerificationError(exercise) from exc

    with compiled:
        try:
            output = compiled.run()
        except RunError as exc:
            print(exc.output.stdout)
            print(exc.output.stderr)
            warn(f"Ran {exercise} with errors")
            raise VerificationError(exercise) from exc

    print(output.stdout)
    success(f"Successfully ran {exercise}")