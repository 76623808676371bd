"""Unit tests for utility functions (vitedeploy.utils).

Tests cover:
- sanitize_name (various inputs)
- format_duration
- Rich output helpers (print_step, print_summary_table, etc.)
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from vitedeploy.utils import (
    format_duration,
    print_error,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
    sanitize_name,
)


class TestSanitizeName:
    @pytest.mark.unit
    def test_already_clean(self):
        assert sanitize_name("react-vite-project") == "react-vite-project"

    @pytest.mark.unit
    def test_spaces_and_case(self):
        assert sanitize_name("React Vite Project") == "react-vite-project"

    @pytest.mark.unit
    def test_special_chars(self):
        assert sanitize_name("  Demo (v2)  ") == "demo-v2"

    @pytest.mark.unit
    def test_consecutive_hyphens_collapsed(self):
        assert sanitize_name("a---b") == "a-b"

    @pytest.mark.unit
    def test_all_special_chars_gives_empty(self):
        assert sanitize_name("!!!") == ""


class TestFormatDuration:
    @pytest.mark.unit
    def test_seconds(self):
        assert format_duration(3.7) == "3.7s"

    @pytest.mark.unit
    def test_minutes(self):
        assert format_duration(65.2) == "1m 5s"

    @pytest.mark.unit
    def test_hours(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    @pytest.mark.unit
    def test_negative(self):
        assert format_duration(-1) == "0.0s"

    @pytest.mark.unit
    def test_zero(self):
        assert format_duration(0) == "0.0s"


class TestRichHelpers:
    @pytest.mark.unit
    def test_print_step(self):
        with patch("vitedeploy.utils.console") as mock_console:
            print_step(4, 16, "Scaffold Vite React project")
            mock_console.print.assert_called_once()

    @pytest.mark.unit
    def test_print_summary_table(self):
        with patch("vitedeploy.utils.console") as mock_console:
            print_summary_table({"URL": "https://x.surge.sh"}, title="Build Summary")
            assert mock_console.print.call_count == 2

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "func,style",
        [(print_success, "green"), (print_error, "red"), (print_warning, "yellow")],
    )
    def test_message_helpers_escape_markup(self, func, style):
        with patch("vitedeploy.utils.console") as mock_console:
            func("failed at [step 4]")
            printed = mock_console.print.call_args[0][0]
            assert printed.startswith(f"[bold {style}]")
            assert "\\[step 4]" in printed
