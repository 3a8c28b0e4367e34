"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- Document, table and problem printing in every format
- Global instance management and convenience functions
"""

from __future__ import annotations

import json

import pytest

from specmodel import output as output_module
from specmodel.models import ValidationProblem, ValidationProblemSeverity
from specmodel.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("specmodel.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("specmodel.output._is_tty", lambda: True)


@pytest.fixture()
def problems() -> list[ValidationProblem]:
    return [
        ValidationProblem(
            error_code="R-003",
            node_path="/",
            property_name="openapi",
            message="Unsupported openapi version '3.0.9'.",
            severity=ValidationProblemSeverity.HIGH,
            context={"dialect": "openapi", "version": "3.0.9"},
        ),
        ValidationProblem(
            error_code="INF-003",
            node_path="/info/contact",
            property_name="email",
            message="API Contact has an invalid email address 'nobody'.",
            severity=ValidationProblemSeverity.LOW,
        ),
    ]


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """AUTO format resolves from the environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        assert mgr.format == OutputFormat.JSON


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout, diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("something happened")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "something happened" in captured.err

    def test_warning_and_error_prefixes(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.warning("careful")
        mgr.error("broken")
        lines = capfd.readouterr().err.splitlines()
        assert lines == ["Warning: careful", "Error: broken"]


# ------------------------------------------------------------------ #
# Quiet and verbose modes
# ------------------------------------------------------------------ #


class TestQuietAndVerbose:
    def test_quiet_suppresses_info_and_success(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("hidden")
        mgr.success("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warning_error_and_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.warning("important warning")
        mgr.error("critical error")
        mgr.print_data("important data")
        captured = capfd.readouterr()
        assert "important warning" in captured.err
        assert "critical error" in captured.err
        assert "important data" in captured.out

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("secret")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("details")
        assert capfd.readouterr().err.strip() == "[debug] details"
        assert mgr.is_verbose is True


# ------------------------------------------------------------------ #
# Documents
# ------------------------------------------------------------------ #


class TestPrintDocument:
    def test_plain_document_is_verbatim(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_document('{\n  "openapi": "3.0.3"\n}\n')
        assert capfd.readouterr().out == '{\n  "openapi": "3.0.3"\n}\n'

    def test_json_document_is_verbatim(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        mgr.print_document('{"swagger": "2.0"}')
        assert json.loads(capfd.readouterr().out) == {"swagger": "2.0"}

    def test_rich_document_contains_text(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_document("asyncapi: 2.6.0\n", language="yaml")
        assert "asyncapi" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Tables
# ------------------------------------------------------------------ #


class TestPrintTable:
    def test_table_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["path", "kind"], [["/", "document"], ["/info", "info"]])
        parsed = json.loads(capfd.readouterr().out)
        assert parsed == [{"path": "/", "kind": "document"}, {"path": "/info", "kind": "info"}]

    def test_table_plain_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["path", "kind"], [["/info", "info"]], title="Ignored")
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["path\tkind", "/info\tinfo"]

    def test_table_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["path", "kind"], [["/info", "info"]], title="Nodes")
        out = capfd.readouterr().out
        assert "Nodes" in out
        assert "/info" in out


# ------------------------------------------------------------------ #
# Problems
# ------------------------------------------------------------------ #


class TestPrintProblems:
    def test_json_records_include_context(self, capfd, non_tty, problems):
        mgr = OutputManager(format=OutputFormat.JSON)
        mgr.print_problems(problems)
        parsed = json.loads(capfd.readouterr().out)
        assert parsed[0] == {
            "error_code": "R-003",
            "node_path": "/",
            "property_name": "openapi",
            "message": "Unsupported openapi version '3.0.9'.",
            "severity": "high",
            "context": {"dialect": "openapi", "version": "3.0.9"},
        }
        assert parsed[1]["severity"] == "low"

    def test_plain_rows(self, capfd, non_tty, problems):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_problems(problems)
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines[0] == "severity\tcode\tpath\tproperty\tmessage"
        assert lines[1] == "high\tR-003\t/\topenapi\tUnsupported openapi version '3.0.9'."
        assert lines[2].startswith("low\tINF-003\t/info/contact\temail\t")

    def test_rich_table(self, capfd, non_tty, problems):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_problems(problems)
        out = capfd.readouterr().out
        assert "R-003" in out
        assert "INF-003" in out


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        custom = OutputManager(format=OutputFormat.JSON, no_color=True)
        set_output(custom)
        assert get_output() is custom

    def test_reset_output_clears(self):
        first = OutputManager(format=OutputFormat.JSON, no_color=True)
        set_output(first)
        reset_output()
        assert get_output() is not first


class TestConvenienceFunctions:
    """Module-level functions delegate to the global instance."""

    def test_print_data(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("payload")
        assert capfd.readouterr().out == "payload\n"

    @pytest.mark.parametrize("name", ["info", "success", "warning", "error"])
    def test_diagnostics(self, capfd, non_tty, name):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        getattr(output_module, name)("hello")
        assert "hello" in capfd.readouterr().err

    def test_debug_requires_verbose(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))
        output_module.debug("trace")
        assert "trace" in capfd.readouterr().err
