"""Reduce a graph to the components matching type and vulnerability predicates."""
import structlog

from sbomview.core.config import FilterConfig
from sbomview.models.component import EnrichedComponent
from sbomview.models.component import VulnerabilityInfo
from sbomview.models.graph import ComponentGraph
from sbomview.models.severity import RESOLVED_STATES
from sbomview.models.severity import severity_rank

logger = structlog.get_logger('filters')


def parse_type_filter(value: str | None) -> list[str]:
    """Split a comma separated type list such as `library, container`."""
    if not value:
        return []
    return [part.strip() for part in value.split(',') if part.strip()]


def is_unresolved(state: str | None) -> bool:
    return (state or '').strip().lower() not in RESOLVED_STATES


def meets_severity_threshold(severity: str | None, threshold: str) -> bool:
    return severity_rank(severity) >= severity_rank(threshold)


def filter_vulnerabilities(
    vulnerabilities: list[VulnerabilityInfo],
    min_severity: str = '',
    only_unresolved: bool = False,
) -> list[VulnerabilityInfo]:
    return [
        v for v in vulnerabilities
        if (not only_unresolved or is_unresolved(v.analysis_state))
        and (not min_severity or meets_severity_threshold(v.severity, min_severity))
    ]


def matches(node: EnrichedComponent, config: FilterConfig) -> bool:
    if config.types:
        wanted = {t.lower() for t in config.types}
        if node.type.lower() not in wanted:
            return False

    if config.min_severity or config.only_unresolved:
        if not filter_vulnerabilities(node.vulnerabilities, config.min_severity, config.only_unresolved):
            return False

    return True


def apply_filters(graph: ComponentGraph, config: FilterConfig) -> ComponentGraph:
    """
    Return a graph holding only the matching nodes.

    A default config returns `graph` itself. Otherwise node objects are
    shared with the source graph and must be treated as read only.
    """
    if config.is_default:
        return graph

    kept = {key: node for key, node in graph.nodes.items() if matches(node, config)}
    primary_key = graph.primary_key if graph.primary_key in kept else None

    filtered = ComponentGraph(
        nodes=kept,
        primary_key=primary_key,
        adjacency=graph.adjacency,
        by_purl=graph.by_purl,
        by_cpe=graph.by_cpe,
        by_name_version=graph.by_name_version,
        by_name=graph.by_name,
        # positions are kept so island ids still index into the list
        islands=[[k for k in island if k in kept] for island in graph.islands],
        metadata=graph.metadata,
        annotations=graph.annotations,
        compositions=graph.compositions,
        fallback_resolutions=graph.fallback_resolutions,
        warnings=list(graph.warnings),
        depths={k: d for k, d in graph.depths.items() if k in kept},
        expandable={k for k in graph.expandable if k in kept},
    )
    logger.debug(
        'Filters applied',
        types=config.types,
        min_severity=config.min_severity,
        only_unresolved=config.only_unresolved,
        kept=len(kept),
        total=len(graph.nodes),
    )
    return filtered
