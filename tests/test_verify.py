import subprocess

import pytest

from exercisekit.exercise import Exercise, Mode
from exercisekit.verify import ExerciseFailed, prompt_for_completion, test, verify

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_EMOJI", "1")


def _fake_tools(monkeypatch, rustc_rc=0, compile_stderr=b"", binary_rc=0, binary_stdout=b""):
    calls = []

    def fake(args, **kwargs):
        calls.append(list(args))
        if args[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(args, rustc_rc, b"", compile_stderr)
        return subprocess.CompletedProcess(args, binary_rc, binary_stdout, b"")

    monkeypatch.setattr(subprocess, "run", fake)
    return calls


def _exercise(tmp_path, name, source, mode=Mode.COMPILE, hint=""):
    path = tmp_path / f"{name}.rs"
    path.write_text(source)
    return Exercise(name=name, path=path, mode=mode, hint=hint)


def test_verify_all_done_passes(tmp_path, monkeypatch, capsys):
    calls = _fake_tools(monkeypatch)
    first = _exercise(tmp_path, "first", FINISHED)
    second = _exercise(tmp_path, "second", FINISHED)
    verify([first, second], (0, 2))
    assert sum(call[0] == "rustc" for call in calls) == 2
    assert "2/2" in capsys.readouterr().out


def test_verify_stops_at_pending_exercise(tmp_path, monkeypatch, capsys):
    calls = _fake_tools(monkeypatch)
    pending = _exercise(tmp_path, "pending", PENDING)
    finished = _exercise(tmp_path, "finished", FINISHED)
    with pytest.raises(ExerciseFailed) as excinfo:
        verify([pending, finished], (0, 2))
    assert excinfo.value.exercise is pending
    assert sum(call[0] == "rustc" for call in calls) == 1
    out = capsys.readouterr().out
    assert "~*~ The code is compiling! ~*~" in out
    assert "// I AM NOT DONE" in out


def test_verify_reports_compile_failure(tmp_path, monkeypatch, capsys):
    _fake_tools(monkeypatch, rustc_rc=1, compile_stderr=b"error: expected pattern")
    broken = _exercise(tmp_path, "broken", FINISHED)
    with pytest.raises(ExerciseFailed) as excinfo:
        verify([broken], (0, 1))
    assert excinfo.value.exercise is broken
    out = capsys.readouterr().out
    assert "error: expected pattern" in out
    assert "Compiling of" in out


def test_verify_test_mode_compiles_harness_and_shows_output(tmp_path, monkeypatch, capsys):
    calls = _fake_tools(monkeypatch, binary_stdout=b"THIS TEST TOO SHALL PASS")
    exercise = _exercise(tmp_path, "testSuccess", FINISHED, mode=Mode.TEST)
    verify([exercise], (0, 1), verbose=True)
    rustc_calls = [call for call in calls if call[0] == "rustc"]
    assert "--test" in rustc_calls[0]
    binary_calls = [call for call in calls if call[0] != "rustc"]
    assert binary_calls[0][-1] == "--show-output"
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out


def test_test_does_not_prompt_for_pending(tmp_path, monkeypatch, capsys):
    _fake_tools(monkeypatch, binary_stdout=b"THIS TEST TOO SHALL PASS")
    exercise = _exercise(tmp_path, "pending_test_exercise", PENDING, mode=Mode.TEST)
    test(exercise, verbose=False)
    out = capsys.readouterr().out
    assert "I AM NOT DONE" not in out
    assert "THIS TEST TOO SHALL PASS" not in out


def test_test_raises_when_harness_fails(tmp_path, monkeypatch, capsys):
    _fake_tools(monkeypatch, binary_rc=101, binary_stdout=b"test not_passing ... FAILED")
    exercise = _exercise(tmp_path, "testNotPassed", FINISHED, mode=Mode.TEST)
    with pytest.raises(ExerciseFailed):
        test(exercise)
    out = capsys.readouterr().out
    assert "test not_passing ... FAILED" in out
    assert "Testing of" in out


def test_build_script_mode_passes_when_cargo_succeeds(tmp_path, monkeypatch):
    calls = _fake_tools(monkeypatch)
    (tmp_path / "exercises" / "tests").mkdir(parents=True)
    exercise = _exercise(tmp_path, "build1", FINISHED, mode=Mode.BUILD_SCRIPT)
    verify([exercise], (0, 1))
    assert calls[0][:2] == ["cargo", "test"]
    manifest = (tmp_path / "exercises" / "tests" / "Cargo.toml").read_text()
    assert 'name = "build1"' in manifest


def test_prompt_for_completion_done_returns_true(tmp_path, capsys):
    exercise = _exercise(tmp_path, "finished", FINISHED)
    assert prompt_for_completion(exercise, "ignored", True) is True
    assert capsys.readouterr().out == ""


def test_prompt_for_completion_pending_shows_output_and_hint(tmp_path, capsys):
    exercise = _exercise(tmp_path, "pending", PENDING, hint="Try harder")
    assert prompt_for_completion(exercise, "program output", True) is False
    out = capsys.readouterr().out
    assert "Output:" in out
    assert "program output" in out
    assert "Hints:" in out
    assert "Try harder" in out
    assert " 3 |  // I AM NOT DONE" in out