import functools
from collections.abc import Callable
from typing import Any

import structlog
import typer
from rich.markup import escape

from sbomview.core.logging import console

logger = structlog.get_logger('cli')


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn exceptions raised by a CLI command into a message and an exit code."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except ValueError as e:
            console.print(f"[bold red]Validation Error:[/] {escape(str(e))}")
            logger.debug('Validation error', exc_info=True)
            raise typer.Exit(1)
        except KeyboardInterrupt:
            console.print('\n[yellow]Operation cancelled by user.[/]')
            raise typer.Exit(130)
        except Exception as e:
            console.print(f"[bold red]Unexpected Error:[/] {escape(str(e))}")
            logger.exception('Unexpected error')
            raise typer.Exit(1)
    return wrapper
