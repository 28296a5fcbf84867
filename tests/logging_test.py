import io

import pytest
import structlog
import typer
from rich.console import Console
from structlog.testing import capture_logs

from sbomview.core.decorators import handle_errors
from sbomview.core.logging import RichConsoleRenderer


def test_rich_renderer_escapes_markup():
    """Test bracketed SBOM content is printed literally."""
    out = io.StringIO()
    renderer = RichConsoleRenderer(Console(file=out, width=200))
    event = {
        'event': 'dangling dependency reference: app -> [bold]x[/bold]',
        'level': 'warning',
        'logger': 'view',
        'ref': '[red]',
    }
    with pytest.raises(structlog.DropEvent):
        renderer(None, 'warning', event)
    text = out.getvalue()
    assert '[bold]x[/bold]' in text
    assert "ref='[red]'" in text
    assert 'view' in text


class TestHandleErrors:
    """Tests for the handle_errors decorator."""

    def test_value_error_exits_1(self):
        """Test validation problems exit with code 1."""
        @handle_errors
        def command():
            raise ValueError('bad input')

        with pytest.raises(typer.Exit) as exc:
            command()
        assert exc.value.exit_code == 1

    def test_keyboard_interrupt_exits_130(self):
        """Test Ctrl-C exits with code 130."""
        @handle_errors
        def command():
            raise KeyboardInterrupt

        with pytest.raises(typer.Exit) as exc:
            command()
        assert exc.value.exit_code == 130

    def test_unexpected_error_logged(self):
        """Test other exceptions are logged and exit with code 1."""
        @handle_errors
        def command():
            raise RuntimeError('boom')

        with capture_logs() as captured:
            with pytest.raises(typer.Exit) as exc:
                command()
        assert exc.value.exit_code == 1
        assert captured[0]['event'] == 'Unexpected error'

    def test_exit_passes_through(self):
        """Test typer.Exit raised by a command is not rewrapped."""
        @handle_errors
        def command():
            raise typer.Exit(3)

        with pytest.raises(typer.Exit) as exc:
            command()
        assert exc.value.exit_code == 3

    def test_return_value(self):
        """Test the wrapped function's result is returned."""
        assert handle_errors(lambda: 42)() == 42
