"""Tests for the stderr diagnostics manager.

Covers:
- NO_COLOR / TERM=dumb color disabling
- Warnings always shown
- Verbose mode debug output
- Nothing ever written to stdout
- Global instance management and APIWIRE_VERBOSE
"""

from __future__ import annotations

import pytest

from apiwire.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


# ------------------------------------------------------------------ #
# Color disabling
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_color_allowed(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# Message levels
# ------------------------------------------------------------------ #


class TestPlainMessages:
    """no_color output uses plain prefixes on stderr."""

    def test_warning(self, capsys):
        OutputManager(no_color=True).warning("careful")
        captured = capsys.readouterr()
        assert captured.err == "Warning: careful\n"
        assert captured.out == ""

    def test_debug_hidden_by_default(self, capsys):
        OutputManager(no_color=True).debug("details")
        assert capsys.readouterr().err == ""

    def test_debug_when_verbose(self, capsys):
        OutputManager(verbose=True, no_color=True).debug("details")
        assert capsys.readouterr().err == "[debug] details\n"


class TestVerbosity:
    def test_warning_shown_without_verbose(self, capsys):
        mgr = OutputManager(no_color=True)
        mgr.debug("d")
        mgr.warning("w")
        assert capsys.readouterr().err == "Warning: w\n"

    def test_flag(self):
        assert OutputManager(verbose=True).is_verbose
        assert not OutputManager().is_verbose


class TestRichMessages:
    def test_warning_goes_to_stderr(self, capsys, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        OutputManager().warning("careful")
        captured = capsys.readouterr()
        assert "Warning:" in captured.err
        assert "careful" in captured.err
        assert captured.out == ""

    def test_markup_in_debug_is_literal(self, capsys, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        OutputManager(verbose=True).debug("[bold]not markup[/bold]")
        assert "[bold]not markup[/bold]" in capsys.readouterr().err


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazy_default(self, monkeypatch):
        monkeypatch.delenv("APIWIRE_VERBOSE", raising=False)
        mgr = get_output()
        assert mgr is get_output()
        assert not mgr.is_verbose

    def test_verbose_from_env(self, monkeypatch):
        monkeypatch.setenv("APIWIRE_VERBOSE", "1")
        assert get_output().is_verbose

    def test_set_and_reset(self):
        custom = OutputManager(verbose=True)
        set_output(custom)
        assert get_output() is custom
        reset_output()
        assert get_output() is not custom
