"""Tests for Rich Console factory and theme."""

from io import StringIO

from formctl.output.console import FORMCTL_THEME, create_console, get_output


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[form.error]hello[/form.error]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_widths(self) -> None:
        assert create_console(width=80).width == 80
        assert create_console().width == 120


class TestTheme:
    def test_form_styles_defined(self) -> None:
        for name in ("form.ok", "form.error", "form.warning", "form.id", "form.hidden"):
            assert name in FORMCTL_THEME.styles
