import typer

from sbomview.__version__ import __version__
from sbomview.commands import stats
from sbomview.commands import view
from sbomview.core.logging import setup_logging

app = typer.Typer(
    help='sbomview: consolidate and explore CycloneDX SBOMs as a component tree.',
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)

app.command(name='view')(view.main)
app.command(name='stats')(stats.main)


def _print_version(value: bool):
    if value:
        typer.echo(f"sbomview {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    debug: bool = typer.Option(False, '--debug', help='Enable debug logging'),
    version: bool = typer.Option(
        False, '--version', callback=_print_version, is_eager=True,
        help='Show the version and exit',
    ),
):
    """
    sbomview CLI - see what an SBOM actually contains.
    """
    level = 'DEBUG' if debug else 'INFO'
    setup_logging(level=level)


if __name__ == '__main__':
    app()
