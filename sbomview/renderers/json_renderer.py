"""Pointer-free JSON form of a component graph, and reading it back."""
from typing import TextIO

from pydantic import Field

from sbomview.graph.resolver import index_component
from sbomview.graph.statistics import Statistics
from sbomview.graph.statistics import calculate_statistics
from sbomview.models.component import AnnotationInfo
from sbomview.models.component import CompositionInfo
from sbomview.models.component import DependencyRecord
from sbomview.models.component import EnrichedComponent
from sbomview.models.component import HashInfo
from sbomview.models.component import LicenseInfo
from sbomview.models.component import PropertyInfo
from sbomview.models.component import SBOMMetadata
from sbomview.models.component import ViewModel
from sbomview.models.component import VulnerabilityInfo
from sbomview.models.component import VulnerabilityStats
from sbomview.models.graph import ComponentGraph
from sbomview.renderers.base import Renderer


class JsonDependency(ViewModel):
    ref: str
    target: str | None = None
    resolved_by: str = ''
    name: str = ''
    version: str = ''
    type: str = ''
    purl: str = ''
    licenses: list[LicenseInfo] = Field(default_factory=list)
    supplier: str = ''


class JsonComponent(ViewModel):
    key: str
    bom_ref: str = ''
    type: str = ''
    name: str = ''
    version: str = ''
    purl: str = ''
    cpe: str = ''
    description: str = ''
    group: str = ''
    scope: str = ''
    supplier: str = ''

    parent: str | None = None
    children: list[str] = Field(default_factory=list)

    dependencies: list[JsonDependency] = Field(default_factory=list)
    vulnerabilities: list[VulnerabilityInfo] = Field(default_factory=list)
    compositions: list[CompositionInfo] = Field(default_factory=list)
    annotations: list[AnnotationInfo] = Field(default_factory=list)
    licenses: list[LicenseInfo] = Field(default_factory=list)
    hashes: list[HashInfo] = Field(default_factory=list)
    properties: list[PropertyInfo] = Field(default_factory=list)

    island_id: int = 0
    is_primary: bool = False
    assembly_count: int = 0
    dependency_count: int = 0
    depth: int = 0
    vulnerability_stats: VulnerabilityStats = Field(default_factory=VulnerabilityStats)


class JsonComponentGraph(ViewModel):
    primary: JsonComponent | None = None
    components: dict[str, JsonComponent] = Field(default_factory=dict)
    dependencies: dict[str, list[str]] = Field(default_factory=dict)
    islands: list[list[str]] = Field(default_factory=list)
    metadata: SBOMMetadata = Field(default_factory=SBOMMetadata)
    annotations: list[AnnotationInfo] = Field(default_factory=list)
    compositions: list[CompositionInfo] = Field(default_factory=list)
    statistics: Statistics = Field(default_factory=Statistics)
    warnings: list[str] = Field(default_factory=list)


def _to_json_component(graph: ComponentGraph, node: EnrichedComponent) -> JsonComponent:
    dependencies = []
    for record in node.dependencies:
        dep = JsonDependency(ref=record.ref, target=record.target, resolved_by=record.resolved_by)
        target = graph.get(record.target)
        if target is not None:
            dep.name = target.name
            dep.version = target.version
            dep.type = target.type
            dep.purl = target.purl
            dep.licenses = list(target.licenses)
            dep.supplier = target.supplier
        dependencies.append(dep)

    return JsonComponent(
        key=node.key,
        bom_ref=node.bom_ref,
        type=node.type,
        name=node.name,
        version=node.version,
        purl=node.purl,
        cpe=node.cpe,
        description=node.description,
        group=node.group,
        scope=node.scope,
        supplier=node.supplier,
        parent=node.parent if node.parent in graph.nodes else None,
        children=[c.key for c in graph.children_of(node)],
        dependencies=dependencies,
        vulnerabilities=node.vulnerabilities,
        compositions=node.compositions,
        annotations=node.annotations,
        licenses=node.licenses,
        hashes=node.hashes,
        properties=node.properties,
        island_id=node.island_id,
        is_primary=node.is_primary,
        assembly_count=len(graph.children_of(node)),
        dependency_count=node.dependency_count,
        depth=graph.depth_of(node.key),
        vulnerability_stats=node.vulnerability_stats,
    )


def to_json_graph(graph: ComponentGraph) -> JsonComponentGraph:
    components = {key: _to_json_component(graph, node) for key, node in graph.nodes.items()}
    return JsonComponentGraph(
        primary=components.get(graph.primary_key) if graph.primary_key else None,
        components=components,
        dependencies=graph.adjacency,
        islands=[list(island) for island in graph.islands],
        metadata=graph.metadata,
        annotations=graph.annotations,
        compositions=graph.compositions,
        statistics=calculate_statistics(graph),
        warnings=graph.warnings,
    )


def read_json_graph(text: str) -> ComponentGraph:
    """Rebuild a ComponentGraph from `JsonRenderer` output. Depths are not restored."""
    data = JsonComponentGraph.model_validate_json(text)
    graph = ComponentGraph(
        adjacency={k: list(v) for k, v in data.dependencies.items()},
        metadata=data.metadata,
        annotations=list(data.annotations),
        compositions=list(data.compositions),
        warnings=list(data.warnings),
    )

    for key, item in data.components.items():
        node = EnrichedComponent(
            key=key,
            bom_ref=item.bom_ref,
            type=item.type,
            name=item.name,
            version=item.version,
            purl=item.purl,
            cpe=item.cpe,
            description=item.description,
            group=item.group,
            scope=item.scope,
            supplier=item.supplier,
            licenses=list(item.licenses),
            hashes=list(item.hashes),
            properties=list(item.properties),
            vulnerabilities=list(item.vulnerabilities),
            annotations=list(item.annotations),
            compositions=list(item.compositions),
            parent=item.parent,
            children=list(item.children),
            dependencies=[
                DependencyRecord(ref=d.ref, target=d.target, resolved_by=d.resolved_by)
                for d in item.dependencies
            ],
            island_id=item.island_id,
            dependency_count=item.dependency_count,
            is_primary=item.is_primary,
            vulnerability_stats=item.vulnerability_stats,
        )
        graph.nodes[key] = node
        index_component(graph, node)
        if node.is_primary and graph.primary_key is None:
            graph.primary_key = key

    graph.islands = [list(island) for island in data.islands]
    return graph


class JsonRenderer(Renderer):
    """Complete graph as indented JSON, regardless of island or depth settings."""

    def render(self, graph: ComponentGraph, writer: TextIO) -> None:
        writer.write(to_json_graph(graph).model_dump_json(indent=2, by_alias=True))
        writer.write('\n')
