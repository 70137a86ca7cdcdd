"""
Tests for widgets.py
====================
Verifies DiagnosticsView, EvalView and StatusBar using Textual's async
test harness, plus the plain render helper.
"""

from __future__ import annotations

import pytest
from textual.app import App, ComposeResult

from cuebolt.parsing.diagnostics import Diagnostic
from cuebolt.ui.widgets import (
    DiagnosticsView,
    EvalView,
    StatusBar,
    render_diagnostics,
)


class _WidgetTestApp(App):
    """Headless Textual app that composes every widget."""

    def compose(self) -> ComposeResult:
        yield DiagnosticsView()
        yield EvalView()
        yield StatusBar()


def _diag(line=6, column=3, message="expected operand, found 'EOF'"):
    return Diagnostic(line=line, column=column, severity="error", message=message, file_path="./a.cue")


class TestRenderDiagnostics:

    def test_no_problems(self):
        assert "No problems" in render_diagnostics([]).plain

    def test_location_is_one_based(self):
        text = render_diagnostics([_diag()]).plain
        assert "./a.cue:7:3" in text
        assert "expected operand, found 'EOF'" in text

    def test_source_line_shown(self):
        lines = ["a: 1", "b: ("]
        text = render_diagnostics([_diag(line=1, column=4)], lines).plain
        assert "b: (" in text

    def test_out_of_range_source_line_skipped(self):
        text = render_diagnostics([_diag(line=99)], ["a: 1"]).plain
        assert "a: 1" not in text

    def test_empty_message_placeholder(self):
        assert "(no message)" in render_diagnostics([_diag(message="")]).plain


class TestDiagnosticsView:

    @pytest.mark.asyncio
    async def test_has_correct_id(self):
        async with _WidgetTestApp().run_test() as pilot:
            view = pilot.app.query_one("#diagnostics-view", DiagnosticsView)
            assert view.id == "diagnostics-view"

    @pytest.mark.asyncio
    async def test_set_diagnostics(self):
        async with _WidgetTestApp().run_test() as pilot:
            view = pilot.app.query_one(DiagnosticsView)
            view.set_diagnostics([_diag(), _diag(line=0)], ["a: 1"])
            await pilot.pause()


class TestEvalView:

    @pytest.mark.asyncio
    async def test_set_output(self):
        async with _WidgetTestApp().run_test() as pilot:
            view = pilot.app.query_one("#eval-view", EvalView)
            view.set_output("a: 1\n", "yaml")
            await pilot.pause()


class TestStatusBar:

    def test_render_text_parts(self):
        bar = StatusBar()
        bar._file, bar._root, bar._flags = "a.cue", "/ws", "-t x=1"
        bar._status, bar._errors = "linted", 2
        text = bar.render_text()
        assert "a.cue" in text
        assert "/ws" in text
        assert "-t x=1" in text
        assert "linted" in text
        assert "2 error(s)" in text

    def test_no_error_count_when_zero(self):
        bar = StatusBar()
        assert "error(s)" not in bar.render_text()

    @pytest.mark.asyncio
    async def test_set_status_partial_update(self):
        async with _WidgetTestApp().run_test() as pilot:
            bar = pilot.app.query_one("#status-bar", StatusBar)
            bar.set_status(file="a.cue", status="idle")
            bar.set_status(errors=3)
            await pilot.pause()
            text = bar.render_text()
            assert "a.cue" in text
            assert "3 error(s)" in text
