from pydantic import Field

from sbomview.graph.depth import assembly_levels
from sbomview.graph.depth import measure_depths
from sbomview.models.component import ViewModel
from sbomview.models.component import VulnerabilityStats
from sbomview.models.graph import ComponentGraph


class Statistics(ViewModel):
    total_components: int = 0
    total_dependencies: int = 0
    total_vulnerabilities: VulnerabilityStats = Field(default_factory=VulnerabilityStats)
    total_annotations: int = 0
    total_compositions: int = 0
    island_count: int = 0
    components_by_type: dict[str, int] = Field(default_factory=dict)
    max_depth: int = 0
    max_assembly_level: int = 0


def calculate_statistics(graph: ComponentGraph) -> Statistics:
    """
    Summarize a (possibly filtered) graph in one pass over its nodes.

    `max_depth` is the depth of the primary tree, read from the depth cache
    or measured without filling it. `max_assembly_level` is the deepest
    nesting level along assembly links.
    """
    stats = Statistics(total_components=len(graph.nodes))
    by_type: dict[str, int] = {}

    annotations = {
        (a.text, a.annotator, a.timestamp, tuple(a.subjects)) for a in graph.annotations
    }
    compositions = {
        (c.aggregate, tuple(c.assemblies), tuple(c.dependencies)) for c in graph.compositions
    }

    for node in graph.nodes.values():
        by_type[node.type] = by_type.get(node.type, 0) + 1
        stats.total_dependencies += node.dependency_count
        stats.total_vulnerabilities.merge(node.vulnerability_stats)
        annotations.update(
            (a.text, a.annotator, a.timestamp, tuple(a.subjects)) for a in node.annotations
        )
        compositions.update(
            (c.aggregate, tuple(c.assemblies), tuple(c.dependencies)) for c in node.compositions
        )

    stats.total_annotations = len(annotations)
    stats.total_compositions = len(compositions)
    stats.island_count = sum(1 for island in graph.islands if island)
    stats.components_by_type = dict(sorted(by_type.items()))

    stats.max_assembly_level = max(assembly_levels(graph).values(), default=0)

    if graph.primary is not None:
        if graph.depths:
            stats.max_depth = graph.depth_of(graph.primary_key)
        else:
            depths, _ = measure_depths(graph)
            stats.max_depth = depths.get(graph.primary_key, 0)
    return stats
