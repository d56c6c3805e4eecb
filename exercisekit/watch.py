"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import itertools
import os
import queue
import subprocess
import sys
import threading
from collections.abc import Sequence
from enum import Enum, auto
from pathlib import Path, PurePath
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import ExerciseFailed, verify

_HELP = (
    "Commands available to you in watch mode:\n"
    "  hint   - prints the current exercise's hint\n"
    "  clear  - clears the screen\n"
    "  quit   - quits watch mode\n"
    "  !<cmd> - executes a command, like `!rustc --explain E0381`\n"
    "  help   - displays this help message\n"
    "\n"
    "Watch mode automatically re-evaluates the current exercise\n"
    "when you edit a file's contents."
)

_RESET_TERMINAL = "\x1bc"


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = auto()
    UNFINISHED = auto()


class WatchShell:
    """Reads commands typed while watch mode is running."""

    def __init__(self, hint: str | None = None, stream: TextIO | None = None) -> None:
        self._hint = hint
        self._lock = threading.Lock()
        self._stream = stream
        self.should_quit = threading.Event()

    @property
    def hint(self) -> str | None:
        with self._lock:
            return self._hint

    @hint.setter
    def hint(self, value: str | None) -> None:
        with self._lock:
            self._hint = value

    def handle(self, command: str) -> None:
        """Carry out one command line."""
        command = command.strip()
        if command == "hint":
            hint = self.hint
            if hint is not None:
                print(hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP)
        elif command.startswith("!"):
            shell_command = command[1:]
            parts = shell_command.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts)
            except OSError as exc:
                print(f"failed to execute command `{shell_command}`: {exc}")
        else:
            print(f"unknown command: {command}")

    def start(self) -> threading.Thread:
        """Start reading commands on a background thread."""
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        thread = threading.Thread(target=self._read_loop, daemon=True)
        thread.start()
        return thread

    def _read_loop(self) -> None:
        stream = self._stream if self._stream is not None else sys.stdin
        while True:
            try:
                line = stream.readline()
            except (OSError, ValueError) as exc:
                print(f"error reading command: {exc}")
                return
            if not line:
                return
            self.handle(line)


class _ChangeCollector(FileSystemEventHandler):
    def __init__(self, changes: queue.Queue) -> None:
        self._changes = changes

    def _record(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._changes.put(os.fsdecode(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event)


def _clear_screen(stream: TextIO | None = None) -> None:
    """Reset the terminal with an ANSI escape code and flush it out at once."""
    out = stream if stream is not None else sys.stdout
    out.write(_RESET_TERMINAL + "\n")
    out.flush()


def _ends_with(path: PurePath, suffix: PurePath) -> bool:
    tail = PurePath(suffix).parts
    return bool(tail) and len(tail) <= len(path.parts) and path.parts[-len(tail):] == tail


def watch(
    exercises: Sequence[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify the exercises, then re-verify on every change until done or quit."""
    changes: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeCollector(changes), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
        except ExerciseFailed as exc:
            shell = WatchShell(exc.exercise.hint)
        else:
            return WatchStatus.FINISHED

        shell.start()
        while True:
            try:
                changed = changes.get(timeout=1)
            except queue.Empty:
                pass
            else:
                path = Path(changed)
                if path.suffix == ".rs" and path.exists():
                    filepath = path.resolve()
                    current = (e for e in exercises if _ends_with(filepath, e.path))
                    pending = itertools.chain(
                        itertools.islice(current, 1),
                        (
                            e
                            for e in exercises
                            if not e.looks_done() and not _ends_with(filepath, e.path)
                        ),
                    )
                    num_done = sum(1 for e in exercises if e.looks_done())
                    _clear_screen()
                    try:
                        verify(pending, (num_done, len(exercises)), verbose, success_hints)
                    except ExerciseFailed as exc:
                        shell.hint = exc.exercise.hint
                    else:
                        return WatchStatus.FINISHED
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()