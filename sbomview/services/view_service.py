from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import TextIO

import structlog

from sbomview.core.config import DisplayConfig
from sbomview.core.config import FilterConfig
from sbomview.core.validation import validate_display_config
from sbomview.graph.builder import build_graph
from sbomview.graph.depth import compute_depths
from sbomview.graph.filters import apply_filters
from sbomview.graph.filters import parse_type_filter
from sbomview.graph.islands import analyze_islands
from sbomview.graph.statistics import Statistics
from sbomview.graph.statistics import calculate_statistics
from sbomview.graph.validate import validate_graph
from sbomview.models.graph import ComponentGraph
from sbomview.models.sbom import CdxDocument
from sbomview.renderers.factory import get_renderer
from sbomview.services.loader_service import LoaderService

logger = structlog.get_logger('view_service')


@dataclass
class ViewResult:
    """Outcome of the pipeline: the graph to render and what was noticed on the way."""
    graph: ComponentGraph
    source_graph: ComponentGraph
    warnings: list[str] = field(default_factory=list)

    @property
    def statistics(self) -> Statistics:
        return calculate_statistics(self.graph)


def filter_config_for(config: DisplayConfig) -> FilterConfig:
    return FilterConfig(
        types=parse_type_filter(config.filter_by_type),
        min_severity=config.min_severity,
        only_unresolved=config.only_unresolved,
        max_depth=config.max_depth,
    )


class ViewService:
    """
    Runs load -> build -> islands + depths -> validate -> filter -> render.

    Island and depth passes always complete on the full graph before any
    filter or renderer sees it.
    """

    def __init__(self, loader: LoaderService):
        self.loader = loader

    def prepare(self, document: CdxDocument, config: DisplayConfig) -> ViewResult:
        graph = build_graph(document)
        analyze_islands(graph, config.reachability)
        compute_depths(graph)
        warnings = validate_graph(graph)

        filtered = apply_filters(graph, filter_config_for(config))
        logger.debug(
            'View prepared',
            components=len(graph.nodes),
            shown=len(filtered.nodes),
            islands=len(graph.islands),
            warnings=len(warnings),
        )
        return ViewResult(graph=filtered, source_graph=graph, warnings=warnings)

    def load(self, sbom_path: Path, config: DisplayConfig) -> ViewResult:
        validate_display_config(config)
        document = self.loader.load(sbom_path)
        return self.prepare(document, config)

    def render(self, result: ViewResult, config: DisplayConfig, writer: TextIO) -> None:
        get_renderer(config).render(result.graph, writer)

    def view(self, sbom_path: Path, config: DisplayConfig, writer: TextIO) -> ViewResult:
        result = self.load(sbom_path, config)
        self.render(result, config, writer)
        return result
