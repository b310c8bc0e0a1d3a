"""Checking exercises in order and reporting progress and completion."""

from __future__ import annotations

import sys
from collections.abc import Iterable

from drillrun.exercise import (
    CompiledExercise,
    CompileError,
    Exercise,
    Mode,
    RunError,
)
from drillrun.ui import bold, success, use_emoji, warn

_SEPARATOR = "===================="


class VerificationError(Exception):
    """An exercise failed to compile, run, pass its tests or is still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} did not pass")
        self.exercise = exercise


class _ProgressBar:
    """A plain text progress bar written to standard error."""

    WIDTH = 60

    def __init__(self, total: int, position: int) -> None:
        self.total = total
        self.position = position

    def percentage(self) -> float:
        if self.total == 0:
            return 100.0
        return self.position / self.total * 100.0

    def draw(self) -> None:
        if self.total:
            filled = min(self.WIDTH, self.WIDTH * self.position // self.total)
        else:
            filled = self.WIDTH
        head = ">" if filled < self.WIDTH else ""
        rest = self.WIDTH - filled - len(head)
        bar = "#" * filled + head + "-" * rest
        print(
            f"Progress: [{bar}] {self.position}/{self.total} "
            f"({self.percentage():.1f} %)",
            file=sys.stderr,
        )

    def advance(self) -> None:
        self.position += 1
        self.draw()


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int] | None = None,
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise VerificationError at the first failure."""
    if progress is None:
        exercises = list(exercises)
        progress = (0, len(exercises))
    num_done, total = progress
    bar = _ProgressBar(total, num_done)
    bar.draw()

    for exercise in exercises:
        match exercise.mode:
            case Mode.TEST | Mode.BUILD_SCRIPT:
                passed = _compile_and_test(exercise, True, verbose, success_hints)
            case Mode.COMPILE:
                passed = _compile_and_run_interactively(exercise, success_hints)
            case Mode.CLIPPY:
                passed = _compile_only(exercise, success_hints)
        if not passed:
            raise VerificationError(exercise)
        bar.advance()


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run an exercise's test harness without prompting."""
    if not _compile_and_test(exercise, False, verbose, False):
        raise VerificationError(exercise)


def _compile(exercise: Exercise) -> CompiledExercise | None:
    try:
        return exercise.compile()
    except CompileError as exc:
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stderr)
        return None


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    compiled = _compile(exercise)
    if compiled is None:
        return False
    compiled.close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    compiled = _compile(exercise)
    if compiled is None:
        return False
    with compiled:
        try:
            output = compiled.run()
        except RunError as exc:
            warn(f"Ran {exercise} with errors")
            print(exc.output.stdout)
            print(exc.output.stderr)
            return False
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    compiled = _compile(exercise)
    if compiled is None:
        return False
    with compiled:
        try:
            output = compiled.run()
        except RunError as exc:
            warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(exc.output.stdout)
            return False
    if verbose:
        print(output.stdout)
    if interactive:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def _success_message(mode: Mode, no_emoji: bool) -> str:
    match mode:
        case Mode.COMPILE:
            return "The code is compiling!"
        case Mode.TEST:
            return "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            if no_emoji:
                return "The code is compiling, and Clippy is happy!"
            return "The code is compiling, and 📎 Clippy 📎 is happy!"
        case Mode.BUILD_SCRIPT:
            return "Build script works!"


def _announce(exercise: Exercise) -> None:
    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None = None, success_hints: bool = False
) -> bool:
    """Return True if the exercise is done, else show where the marker is."""
    state = exercise.state()
    if state.done:
        return True

    _announce(exercise)
    no_emoji = not use_emoji()
    message = _success_message(exercise.mode, no_emoji)
    print()
    if no_emoji:
        print(f"~*~ {message} ~*~")
    else:
        print(f"🎉 🎉  {message} 🎉 🎉")
    print()

    separator = bold(_SEPARATOR)
    if prompt_output is not None:
        print("Output:")
        print(separator)
        print(prompt_output)
        print(separator)
        print()
    if success_hints:
        print("Hints:")
        print(separator)
        print(exercise.hint)
        print(separator)
        print()

    print("You can keep working on this exercise,")
    print(
        "or jump into the next one by removing the "
        f"{bold('`I AM NOT DONE`')} comment:"
    )
    print()
    for context_line in state.pending:
        text = bold(context_line.line) if context_line.important else context_line.line
        print(f"{bold(f'{context_line.number:>2}')} {bold('|')}  {text}")
    return False