import io
import subprocess
from unittest import mock

from exercisekit.exercise import Exercise, Mode
from exercisekit.watch import WatchShell, WatchStatus, watch


def _fake_run(args, **kwargs):
    return subprocess.CompletedProcess(args, 0, b"", b"")


def test_hint_prints_current_hint(capsys):
    shell = WatchShell("use a loop")
    shell.handle("hint\n")
    assert capsys.readouterr().out == "use a loop\n"


def test_hint_without_hint_prints_nothing(capsys):
    WatchShell().handle("hint")
    assert capsys.readouterr().out == ""


def test_hint_can_be_replaced(capsys):
    shell = WatchShell("first")
    shell.hint = "second"
    shell.handle("hint")
    assert capsys.readouterr().out == "second\n"


def test_quit_sets_flag(capsys):
    shell = WatchShell()
    assert not shell.should_quit.is_set()
    shell.handle("  quit  ")
    assert shell.should_quit.is_set()
    assert capsys.readouterr().out == "Bye!\n"


def test_clear_prints_escape_sequence(capsys):
    WatchShell().handle("clear")
    assert capsys.readouterr().out == "\x1b[2J\x1b[1;1H\n"


def test_unknown_command(capsys):
    WatchShell().handle("foo")
    assert capsys.readouterr().out == "unknown command: foo\n"


def test_bang_without_command(capsys):
    WatchShell().handle("!")
    assert capsys.readouterr().out == "no command provided\n"


def test_bang_with_missing_program(capsys):
    WatchShell().handle("!no-such-program-anywhere --flag")
    out = capsys.readouterr().out
    assert out.startswith("failed to execute command `no-such-program-anywhere --flag`: ")


def test_help_lists_commands(capsys):
    WatchShell().handle("help")
    out = capsys.readouterr().out
    assert out.startswith("Commands available to you in watch mode:")
    for command in ("hint", "clear", "quit", "!<cmd>", "help"):
        assert f"  {command}" in out


def test_start_reads_commands_from_stream(capsys):
    shell = WatchShell(stream=io.StringIO("quit\n"))
    thread = shell.start()
    thread.join(5)
    assert not thread.is_alive()
    assert shell.should_quit.is_set()
    assert "Bye!" in capsys.readouterr().out


def test_watch_with_no_exercises_finishes(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "exercises").mkdir()
    assert watch([], False, False) is WatchStatus.FINISHED


def test_watch_with_done_exercise_finishes(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "exercises").mkdir()
    source = tmp_path / "exercises" / "done.rs"
    source.write_text("fn main() {}\n")
    exercise = Exercise(name="done", path=source, mode=Mode.COMPILE, hint="")
    with mock.patch("subprocess.run", side_effect=_fake_run) as fake:
        status = watch([exercise], False, False)
    assert status is WatchStatus.FINISHED
    assert fake.call_args_list[0].args[0][0] == "rustc"