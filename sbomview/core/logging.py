import logging
import os
import sys
from typing import Any

import structlog
from rich.console import Console
from rich.markup import escape

# Diagnostics go to stderr so rendered views on stdout stay clean
console = Console(stderr=True)


class RichConsoleRenderer:
    """
    Render structlog events as one `key=value` line on the stderr console.

    Event text and values come from SBOM content, so they are escaped
    before being handed to rich markup.
    """

    def __init__(self, target: Console | None = None):
        self._console = target or console
        self._level_styles = {
            'debug': 'dim',
            'info': 'green',
            'warning': 'yellow',
            'error': 'bold red',
            'critical': 'bold magenta',
        }

    def __call__(self, logger, name, event_dict):
        event = str(event_dict.pop('event', ''))
        log_level = event_dict.pop('level', 'info')
        logger_name = event_dict.pop('logger', None)
        timestamp = event_dict.pop('timestamp', '')
        exception = event_dict.pop('exception', None)
        stack_info = event_dict.pop('stack_info', None)

        parts = []
        if timestamp:
            parts.append(f"[dim]{timestamp}[/dim]")
        if logger_name:
            parts.append(f"[bold]{escape(logger_name)}[/bold]")

        level_style = self._level_styles.get(log_level, 'white')
        parts.append(f"[{level_style}]{log_level:<8}[/{level_style}]")
        parts.append(escape(event))

        for key, value in event_dict.items():
            parts.append(f"[cyan]{escape(key)}[/cyan]=[green]{escape(repr(value))}[/green]")

        message = ' '.join(parts)
        if exception:
            message += f"\n[red]{escape(str(exception))}[/red]"
        if stack_info:
            message += f"\n[dim]{escape(str(stack_info))}[/dim]"

        self._console.print(message, soft_wrap=True)
        raise structlog.DropEvent


def setup_logging(level: str = 'INFO') -> None:
    """Configure structlog: rich console in development, JSON lines when ENV=production."""
    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if os.getenv('ENV') == 'production':
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [RichConsoleRenderer()]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
