import pytest

from exercisekit import ui


@pytest.fixture(autouse=True)
def _plain_output(monkeypatch):
    monkeypatch.delenv("FORCE_COLOR", raising=False)


def test_no_emoji_reflects_environment(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert ui.no_emoji() is False
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.no_emoji() is True


def test_no_emoji_set_to_empty_counts(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "")
    assert ui.no_emoji() is True


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran exercises/intro1.rs with errors")
    out = capsys.readouterr().out
    assert out == "! Ran exercises/intro1.rs with errors\n"


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran exercises/intro1.rs")
    out = capsys.readouterr().out
    assert out == "✓ Successfully ran exercises/intro1.rs\n"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.warn("careful")
    out = capsys.readouterr().out
    assert out.startswith("⚠️")
    assert out.rstrip("\n").endswith(" careful")


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.success("done")
    out = capsys.readouterr().out
    assert out == "✅ done\n"


def test_markup_in_message_is_kept_literally(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("[bold]x[/bold] :smile:")
    out = capsys.readouterr().out
    assert "[bold]x[/bold] :smile:" in out