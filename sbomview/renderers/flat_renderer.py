from typing import TextIO

from sbomview.graph.statistics import calculate_statistics
from sbomview.models.component import EnrichedComponent
from sbomview.models.graph import ComponentGraph
from sbomview.renderers import formatters as fmt
from sbomview.renderers.base import TextRenderer


class FlatRenderer(TextRenderer):
    """One record per component in insertion order, followed by statistics."""

    def render(self, graph: ComponentGraph, writer: TextIO) -> None:
        self._open(writer)
        self._graph = graph

        for line in fmt.sbom_header(graph.metadata):
            self._line(line)
        self._line()

        hide_islands = self.config.collapse_islands or self.config.only_primary
        nodes = [n for n in graph.nodes.values() if not (hide_islands and n.island_id > 0)]
        for i, node in enumerate(nodes, start=1):
            self._line((f'─── Component {i}/{len(nodes)}:', fmt.style('name')))
            self._render_component(node)
            self._line()

        for line in fmt.statistics_lines(calculate_statistics(graph)):
            self._line(line)

    def _render_component(self, node: EnrichedComponent) -> None:
        indent = '  '
        self._line(indent, 'Name: ', (node.name, fmt.style('name')))
        if node.version:
            self._line(indent, 'Version: ', (node.version, fmt.style('info')))
        if node.type:
            self._line(indent, 'Type: ', (node.type, fmt.style('info')))
        if node.is_primary:
            self._line(indent, 'Primary: ', ('true', fmt.style('primary')))

        parent = self._graph.parent_of(node)
        if parent is not None:
            self._line(indent, 'Parent: ', (parent.label, fmt.style('info')))
        if node.purl:
            self._line(indent, 'PURL: ', (node.purl, fmt.style('purl')))
        if node.cpe:
            self._line(indent, 'CPE: ', (node.cpe, fmt.style('info')))

        children = self._graph.children_of(node)
        if children:
            self._line(indent, f'Assembly: {len(children)} components')
        if node.dependency_count > 0:
            self._line(indent, f'Dependencies: {node.dependency_count}')
        if node.vulnerability_stats.total > 0:
            self._line(indent, fmt.vulnerability_summary(node.vulnerability_stats))
        if node.island_id > 0:
            self._line(indent, f'Island: {node.island_id}')
