"""Checking exercises in order and prompting for completion."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from enum import Enum, auto

from rich.console import Console
from rich.status import Status
from rich.text import Text

from . import ui
from .exercise import CompileError, Exercise, ExerciseOutput, Mode, RunError

_BAR_WIDTH = 60
_SEPARATOR = "===================="


class RunMode(Enum):
    """Whether a successful test run should prompt for completion."""

    INTERACTIVE = auto()
    NON_INTERACTIVE = auto()


class ExerciseFailed(Exception):
    """An exercise failed to build, run or is still marked as pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(str(exercise))
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


@contextmanager
def _spinner(message: str) -> Iterator[Status]:
    with _console().status(message) as status:
        yield status


def _show_progress(position: int, total: int, percentage: float) -> None:
    filled = min(_BAR_WIDTH, position * _BAR_WIDTH // total) if total else 0
    remaining = _BAR_WIDTH - filled
    head = ">" if remaining else ""
    rest = "-" * max(remaining - 1, 0)
    _console().print(
        Text.assemble(
            "Progress: [",
            ("#" * filled + head, "green"),
            (rest, "red"),
            f"] {position}/{total} ({percentage:.1f} %)",
        )
    )


def _report_compile_failure(exercise: Exercise, output: ExerciseOutput) -> None:
    ui.warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
    print(output.stderr)


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise ExerciseFailed at the first that is not done."""
    num_done, total = progress
    percentage = num_done / total * 100.0 if total else 0.0
    position = num_done
    _show_progress(position, total, percentage)

    for exercise in exercises:
        if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
            passed = _compile_and_test(exercise, RunMode.INTERACTIVE, verbose, success_hints)
        elif exercise.mode is Mode.COMPILE:
            passed = _compile_and_run_interactively(exercise, success_hints)
        else:
            passed = _compile_only(exercise, success_hints)
        if not passed:
            raise ExerciseFailed(exercise)
        if total:
            percentage += 100.0 / total
        position += 1
        _show_progress(position, total, percentage)


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run the exercise's test harness; raise ExerciseFailed on failure."""
    if not _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False):
        raise ExerciseFailed(exercise)


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    try:
        with _spinner(f"Compiling {exercise}..."):
            exercise.compile().close()
    except CompileError as exc:
        _report_compile_failure(exercise, exc.output)
        return False
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    try:
        with _spinner(f"Compiling {exercise}...") as status:
            with exercise.compile() as compiled:
                status.update(f"Running {exercise}...")
                output = compiled.run()
    except CompileError as exc:
        _report_compile_failure(exercise, exc.output)
        return False
    except RunError as exc:
        ui.warn(f"Ran {exercise} with errors")
        print(exc.output.stdout)
        print(exc.output.stderr)
        return False
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    try:
        with _spinner(f"Testing {exercise}..."):
            with exercise.compile() as compiled:
                output = compiled.run()
    except CompileError as exc:
        _report_compile_failure(exercise, exc.output)
        return False
    except RunError as exc:
        ui.warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stdout)
        return False

    if verbose:
        print(output.stdout)
    if run_mode is RunMode.INTERACTIVE:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def _success_message(mode: Mode, no_emoji: bool) -> str:
    if mode is Mode.COMPILE:
        return "The code is compiling!"
    if mode is Mode.TEST:
        return "The code is compiling, and the tests pass!"
    if mode is Mode.CLIPPY:
        if no_emoji:
            return "The code is compiling, and Clippy is happy!"
        return "The code is compiling, and 📎 Clippy 📎 is happy!"
    return "Build script works!"


def _print_section(console: Console, title: str, body: str) -> None:
    print(title)
    console.print(Text(_SEPARATOR, style="bold"))
    print(body)
    console.print(Text(_SEPARATOR, style="bold"))
    print()


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where the marker sits."""
    state = exercise.state()
    if state.done():
        return True

    if exercise.mode is Mode.COMPILE:
        ui.success(f"Successfully ran {exercise}!")
    elif exercise.mode is Mode.TEST:
        ui.success(f"Successfully tested {exercise}!")
    else:
        ui.success(f"Successfully compiled {exercise}!")

    no_emoji = ui.no_emoji()
    message = _success_message(exercise.mode, no_emoji)
    print()
    print(f"~*~ {message} ~*~" if no_emoji else f"🎉 🎉  {message} 🎉 🎉")
    print()

    console = _console()
    if prompt_output is not None:
        _print_section(console, "Output:", prompt_output)
    if success_hints:
        _print_section(console, "Hints:", exercise.hint)

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        )
    )
    print()
    for context_line in state.context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "bold blue"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )
    return False