import io
import sys
from pathlib import Path

import structlog
import typer

from sbomview.core.config import DisplayConfig
from sbomview.core.config import PRESETS
from sbomview.core.container import get_container
from sbomview.core.decorators import handle_errors

logger = structlog.get_logger('view')


def build_display_config(
    preset: str = 'default',
    verbose: bool = False,
    only_licenses: bool = False,
    toggles: dict[str, bool | None] | None = None,
    **options,
) -> DisplayConfig:
    """
    Combine a preset with command line flags.

    `--only-licenses` wins over `--verbose`, which wins over the individual
    detail toggles. Toggles left as None keep the preset value.
    """
    if preset not in PRESETS:
        raise ValueError(f"Unknown preset: {preset} (valid: {', '.join(PRESETS)})")
    config = PRESETS[preset]()

    if only_licenses:
        config = config.with_only_licenses()
    elif verbose:
        config = config.with_verbose()
    else:
        for name, value in (toggles or {}).items():
            if value is not None:
                setattr(config, name, value)

    for name, value in options.items():
        if value is not None:
            setattr(config, name, value)
    return config


@handle_errors
def main(
    sbom_file: Path = typer.Argument(..., help='CycloneDX JSON SBOM to view'),
    verbose: bool = typer.Option(False, '--verbose', '-V', help='Show all available fields'),
    dependencies: bool | None = typer.Option(None, '--dependencies/--no-dependencies', help='Show dependencies section'),
    vulnerabilities: bool | None = typer.Option(None, '--vulnerabilities/--no-vulnerabilities', '-v', help='Show vulnerabilities section'),
    annotations: bool | None = typer.Option(None, '--annotations/--no-annotations', '-a', help='Show annotations section'),
    compositions: bool | None = typer.Option(None, '--compositions/--no-compositions', '-c', help='Show compositions section'),
    properties: bool | None = typer.Option(None, '--properties/--no-properties', '-p', help='Show custom properties'),
    hashes: bool | None = typer.Option(None, '--hashes/--no-hashes', help='Show component hashes'),
    licenses: bool | None = typer.Option(None, '--licenses/--no-licenses', '-l', help='Show license information'),
    only_licenses: bool = typer.Option(False, '--only-licenses', help='Show only license information'),
    max_depth: int | None = typer.Option(None, '--max-depth', help='Maximum tree depth to display (0 = unlimited)'),
    filter_type: str | None = typer.Option(None, '--filter-type', help='Filter by component type (comma-separated)'),
    hide_islands: bool = typer.Option(False, '--hide-islands', help="Don't show disconnected components"),
    only_primary: bool = typer.Option(False, '--only-primary', help='Only show the primary component tree'),
    min_severity: str | None = typer.Option(None, '--min-severity', help='Minimum vulnerability severity (none|low|medium|high|critical)'),
    only_unresolved: bool = typer.Option(False, '--only-unresolved', help='Only show unresolved vulnerabilities'),
    output_format: str | None = typer.Option(None, '--format', help='Output format: tree, flat, json'),
    output: Path | None = typer.Option(None, '--output', '-o', help='Write output to file instead of stdout'),
    no_color: bool = typer.Option(False, '--no-color', help='Disable colored output'),
    quiet: bool = typer.Option(False, '--quiet', '-q', help='Suppress all warnings'),
    preset: str = typer.Option('default', '--preset', help='Start from a preset: default, minimal, compact, verbose'),
    reachability: str | None = typer.Option(None, '--reachability', help='Links that join the primary tree: assembly, dependencies'),
):
    """
    View an SBOM as a consolidated component tree.
    """
    container = get_container()
    settings = container.config

    config = build_display_config(
        preset=preset,
        verbose=verbose,
        only_licenses=only_licenses,
        toggles={
            'show_dependencies': dependencies,
            'show_vulnerabilities': vulnerabilities,
            'show_annotations': annotations,
            'show_compositions': compositions,
            'show_properties': properties,
            'show_hashes': hashes,
            'show_licenses': licenses,
        },
        max_depth=max_depth,
        filter_by_type=filter_type,
        collapse_islands=hide_islands or None,
        only_primary=only_primary or None,
        min_severity=min_severity,
        only_unresolved=only_unresolved or None,
        format=output_format or settings.default_format,
        no_color=no_color or settings.no_color or None,
        output=str(output) if output else None,
        reachability=reachability,
    )
    if max_depth is None and preset == 'default':
        config.max_depth = settings.default_max_depth

    service = container.get_view_service()
    result = service.load(sbom_file, config)

    if not quiet and result.warnings:
        logger.warning('Graph validation found issues', count=len(result.warnings))
        for warning in result.warnings:
            logger.warning(warning)

    if output:
        buffer = io.StringIO()
        service.render(result, config, buffer)
        with open(output, 'w', encoding='utf-8') as f:
            f.write(buffer.getvalue())
        logger.info('Output written', path=str(output))
    else:
        service.render(result, config, sys.stdout)
