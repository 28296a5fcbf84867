from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sbomview.core.config import DisplayConfig
from sbomview.core.container import get_container
from sbomview.core.decorators import handle_errors
from sbomview.models.severity import Severity

console = Console()

ISLAND_PREVIEW = 5
TABLE_WIDTH = 40


@handle_errors
def main(
    sbom_file: Path = typer.Argument(..., help='CycloneDX JSON SBOM to summarize'),
    as_json: bool = typer.Option(False, '--json', help='Print statistics as JSON'),
    reachability: str = typer.Option('assembly', '--reachability', help='Links that join the primary tree: assembly, dependencies'),
):
    """
    Show component, dependency and vulnerability statistics for an SBOM.
    """
    config = DisplayConfig(reachability=reachability)
    service = get_container().get_view_service()
    result = service.load(sbom_file, config)
    stats = result.statistics

    if as_json:
        typer.echo(stats.model_dump_json(indent=2, by_alias=True))
        return

    graph = result.graph
    primary = graph.primary
    metadata = graph.metadata
    console.print(
        Panel.fit(
            f"[bold blue]{metadata.format or 'SBOM'} {metadata.spec_version}[/bold blue]\n\n"
            f"Primary Component: [bold green]{escape(primary.label) if primary else 'none'}[/bold green]\n"
            f"Total Components: [bold green]{stats.total_components:,}[/bold green]\n"
            f"Total Dependencies: [bold green]{stats.total_dependencies:,}[/bold green]\n"
            f"Max Depth: [bold green]{stats.max_depth}[/bold green]\n"
            f"Max Assembly Level: [bold green]{stats.max_assembly_level}[/bold green]\n"
            f"Annotations: [bold green]{stats.total_annotations}[/bold green]  "
            f"Compositions: [bold green]{stats.total_compositions}[/bold green]",
            title=sbom_file.name,
        ),
    )

    if stats.components_by_type:
        table = Table(title='Components by Type', min_width=TABLE_WIDTH)
        table.add_column('Type', style='cyan')
        table.add_column('Count', style='magenta', justify='right')
        for component_type, cnt in stats.components_by_type.items():
            table.add_row(component_type or 'Unknown', f"{cnt:,}")
        console.print(table)

    vulns = stats.total_vulnerabilities
    if vulns.total:
        table = Table(title='Vulnerabilities by Severity', min_width=TABLE_WIDTH)
        table.add_column('Severity', style='yellow')
        table.add_column('Count', style='magenta', justify='right')
        for severity in reversed(list(Severity)):
            cnt = getattr(vulns, severity.value)
            if cnt:
                table.add_row(severity.value.upper(), str(cnt))
        if vulns.unknown:
            table.add_row('UNKNOWN', str(vulns.unknown))
        console.print(table)

    islands = [island for island in graph.islands if island]
    if islands:
        table = Table(title=f"Islands ({len(islands)})", min_width=TABLE_WIDTH)
        table.add_column('Island', style='cyan', justify='right')
        table.add_column('Components', style='magenta', justify='right')
        table.add_column('Members', style='green')
        for index, island in enumerate(graph.islands, start=1):
            if not island:
                continue
            labels = [escape(graph.nodes[key].label) for key in island[:ISLAND_PREVIEW]]
            if len(island) > ISLAND_PREVIEW:
                labels.append(f"... and {len(island) - ISLAND_PREVIEW} more")
            table.add_row(str(index), str(len(island)), ', '.join(labels))
        console.print(table)

    if result.warnings:
        console.print(f"[yellow]{len(result.warnings)} warning(s), run 'sbomview view' to see them[/yellow]")
