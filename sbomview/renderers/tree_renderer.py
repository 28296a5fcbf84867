"""Hierarchical tree view of a component graph."""
from collections.abc import Iterator
from typing import TextIO

from rich.text import Text

from sbomview.graph.depth import find_expandable
from sbomview.graph.filters import filter_vulnerabilities
from sbomview.graph.statistics import calculate_statistics
from sbomview.models.component import EnrichedComponent
from sbomview.models.graph import ComponentGraph
from sbomview.renderers import formatters as fmt
from sbomview.renderers.base import TextRenderer

BRANCH = '├─'
LAST = '└─'
VERTICAL = '│'
TOP = '┌─'

DETAIL_LIMIT = 5
ANNOTATION_LIMIT = 3
SMALL_ISLAND = 10
ISLAND_NAME_LIMIT = 20

# (node, prefix, is_last, depth)
Task = tuple[EnrichedComponent, str, bool, int]


class TreeRenderer(TextRenderer):
    """
    Depth-first tree from the primary component, then islands, then statistics.

    Each node is rendered by a generator that prints the node and yields
    the child tasks it wants rendered next; `render` drives the generators
    from an explicit stack so deep or cyclic graphs cannot exhaust the
    interpreter stack. A subtree is expanded once; later references to it
    print the node header marked as already shown.
    """

    def render(self, graph: ComponentGraph, writer: TextIO) -> None:
        self._open(writer)
        self._graph = graph
        self._expandable = graph.expandable if graph.depths else find_expandable(graph)
        self._path: set[str] = set()
        self._rendered: set[str] = set()
        self._expanded: set[str] = set()

        for line in fmt.sbom_header(graph.metadata, verbose=self.config.verbose_output):
            self._line(line)

        stats = calculate_statistics(graph)
        if self.config.max_depth > 0:
            self._line((
                f'Showing up to depth {self.config.max_depth}, total depth is {stats.max_depth}',
                fmt.style('label'),
            ))
        else:
            self._line((f'Total depth is {stats.max_depth}', fmt.style('label')))
        self._line()

        for root in self._main_roots(graph):
            self._render_tree(root, prefix='', is_last=True)

        if not self.config.collapse_islands and not self.config.only_primary:
            self._render_islands(graph)

        self._line()
        for line in fmt.statistics_lines(stats):
            self._line(line)

    def _main_roots(self, graph: ComponentGraph) -> list[EnrichedComponent]:
        if graph.primary is not None:
            return [graph.primary]

        # Primary removed by a filter: its surviving tree members become top level entries
        roots = [
            node for node in graph.nodes.values()
            if node.island_id == 0 and node.parent not in graph.nodes
        ]
        if roots or self.config.only_primary:
            return roots

        for island in graph.islands:
            members = [graph.nodes[k] for k in island if k in graph.nodes]
            if members:
                tops = [m for m in members if m.parent not in graph.nodes]
                return [(tops or members)[0]]
        return []

    def _render_tree(self, root: EnrichedComponent, prefix: str, is_last: bool) -> None:
        stack: list[Iterator[Task]] = [self._render_node(root, prefix, is_last, 0)]
        while stack:
            task = next(stack[-1], None)
            if task is None:
                stack.pop()
                continue
            stack.append(self._render_node(*task))

    def _connector(self, is_last: bool, depth: int) -> str:
        if depth == 0:
            return TOP
        return LAST if is_last else BRANCH

    def _render_node(self, node: EnrichedComponent, prefix: str, is_last: bool, depth: int) -> Iterator[Task]:
        max_depth = self.config.max_depth
        if max_depth > 0 and depth >= max_depth:
            return

        connector = (self._connector(is_last, depth), fmt.style('tree'))
        depth_tag = (f' [depth:{depth}]', fmt.style('label'))
        if node.key in self._path:
            self._line(
                prefix, connector, ' ', fmt.component_header(node), depth_tag,
                (' (circular reference - already shown above)', fmt.style('label')),
            )
            return
        if node.key in self._expanded:
            self._line(
                prefix, connector, ' ', fmt.component_header(node), depth_tag,
                (' (already shown above)', fmt.style('label')),
            )
            return

        self._path.add(node.key)
        self._rendered.add(node.key)
        try:
            self._line(prefix, connector, ' ', fmt.component_header(node), depth_tag)

            if depth > 0 and is_last:
                child_prefix = prefix + '  '
            else:
                child_prefix = prefix + VERTICAL + ' '

            expand = self._render_details(node, child_prefix)
            children = self._graph.children_of(node)
            child_keys = {c.key for c in children}
            nested = children + [t for t in expand if t.key not in child_keys]
            if not nested:
                return

            if max_depth > 0 and depth + 1 >= max_depth:
                self._line(
                    (child_prefix, fmt.style('tree')), (LAST, fmt.style('tree')),
                    (
                        f' (... {len(nested)} nested components - use --max-depth to expand)',
                        fmt.style('label'),
                    ),
                )
                return

            self._expanded.add(node.key)
            if children:
                self._line((child_prefix, fmt.style('tree')), (f'Assemblies ({len(children)}):', fmt.style('label')))
            for i, target in enumerate(nested):
                yield target, child_prefix, i == len(nested) - 1, depth + 1
        finally:
            self._path.discard(node.key)

    def _detail(self, prefix: str, indent: str, *parts) -> None:
        self._line((prefix, fmt.style('tree')), indent, *parts)

    def _capped(self, prefix: str, items: list, limit: int, render) -> None:
        """Print `items` (all of them when verbose) and a `... and N more` line."""
        shown = items if self.config.verbose_output else items[:limit]
        for item in shown:
            self._detail(prefix, '    - ', render(item))
        if len(items) > len(shown):
            self._detail(prefix, '    ', (f'... and {len(items) - len(shown)} more', fmt.style('label')))

    def _render_licenses(self, node: EnrichedComponent, prefix: str) -> None:
        self._detail(prefix, '  ', fmt.list_header('Licenses', len(node.licenses)))
        for lic in node.licenses:
            self._detail(prefix, '    - ', fmt.license_text(lic))

    def _render_details(self, node: EnrichedComponent, prefix: str) -> list[EnrichedComponent]:
        """Print the detail blocks of a node and return the dependency targets to nest."""
        config = self.config
        verbose = config.verbose_output

        if config.show_only_licenses:
            if node.licenses:
                self._render_licenses(node, prefix)
            else:
                self._detail(prefix, '  ', ('No license information', fmt.style('label')))
            return []

        if node.type:
            self._detail(prefix, '  Type: ', (node.type, fmt.style('info')))
        if verbose:
            if node.description:
                self._detail(prefix, '  Description: ', (fmt.truncate(node.description, 100), fmt.style('info')))
            if node.supplier:
                self._detail(prefix, '  Supplier: ', (node.supplier, fmt.style('supplier')))
            if node.purl:
                self._detail(prefix, '  PURL: ', (node.purl, fmt.style('purl')))
            if node.cpe:
                self._detail(prefix, '  CPE: ', (node.cpe, fmt.style('info')))

        if config.show_licenses and node.licenses:
            self._render_licenses(node, prefix)

        if config.show_hashes and node.hashes:
            self._detail(prefix, '  ', fmt.list_header('Hashes', len(node.hashes)))
            for item in node.hashes:
                self._detail(prefix, '    - ', fmt.hash_text(item, verbose=verbose))

        expand = []
        if config.show_dependencies and node.dependencies:
            targets = self._graph.dependency_targets(node)
            expand = [t for t in targets if t.key in self._expandable]
            inline = [t for t in targets if t.key not in self._expandable]
            if inline:
                self._detail(prefix, '  ', fmt.list_header('Dependencies', len(inline)))
                self._capped(prefix, inline, DETAIL_LIMIT, fmt.dependency_verbose if verbose else fmt.dependency)
            if node.unresolved_count:
                self._detail(prefix, '  ', (f'Unresolved references: {node.unresolved_count}', fmt.style('label')))
        elif node.dependency_count > 0:
            self._detail(prefix, f'  Dependencies: {node.dependency_count}')

        if config.show_vulnerabilities and node.vulnerabilities:
            vulns = node.vulnerabilities
            if config.min_severity or config.only_unresolved:
                vulns = filter_vulnerabilities(vulns, config.min_severity, config.only_unresolved)
            if vulns:
                self._detail(prefix, '  ', fmt.list_header('Vulnerabilities', len(vulns)))
                self._capped(prefix, vulns, DETAIL_LIMIT, fmt.vulnerability_verbose if verbose else fmt.vulnerability)
        elif node.vulnerability_stats.total > 0:
            self._detail(prefix, '  ', fmt.vulnerability_summary(node.vulnerability_stats))

        if config.show_annotations and node.annotations:
            self._render_annotations(node, prefix)

        if config.show_compositions and node.compositions:
            self._render_compositions(node, prefix)

        if config.show_properties and node.properties:
            self._detail(prefix, '  ', fmt.list_header('Properties', len(node.properties)))
            self._capped(prefix, node.properties, DETAIL_LIMIT, fmt.property_text)

        if verbose or config.show_dependencies or config.show_vulnerabilities or config.show_properties:
            self._line((prefix, fmt.style('tree')))

        return expand

    def _render_annotations(self, node: EnrichedComponent, prefix: str) -> None:
        annotations = node.annotations
        self._detail(prefix, '  ', fmt.list_header('Annotations', len(annotations)))
        if not self.config.verbose_output:
            def inline(ann):
                tag = f'[{ann.annotator}] ' if ann.annotator else ''
                return Text.assemble((tag, fmt.style('annotation')), (ann.text, fmt.style('info')))
            self._capped(prefix, annotations, ANNOTATION_LIMIT, inline)
            return

        for i, ann in enumerate(annotations):
            self._detail(prefix, '    - ', (ann.text, fmt.style('info')))
            if ann.annotator:
                self._detail(prefix, '      Annotator: ', (ann.annotator, fmt.style('annotation')))
            if ann.timestamp is not None:
                self._detail(prefix, '      Timestamp: ', (ann.timestamp.strftime(fmt.TIME_FORMAT), fmt.style('label')))
            if i < len(annotations) - 1:
                self._line((prefix, fmt.style('tree')))

    def _render_compositions(self, node: EnrichedComponent, prefix: str) -> None:
        compositions = node.compositions
        self._detail(prefix, '  ', fmt.list_header('Compositions', len(compositions)))
        if not self.config.verbose_output:
            for comp in compositions[:DETAIL_LIMIT]:
                self._detail(prefix, '    - ', (f'Aggregate: {comp.aggregate}', fmt.style('info')))
                if comp.assemblies:
                    self._detail(
                        prefix, '      Assemblies: ',
                        (', '.join(comp.assemblies[:3]), fmt.style('dependency')),
                    )
            if len(compositions) > DETAIL_LIMIT:
                self._detail(prefix, '    ', (f'... and {len(compositions) - DETAIL_LIMIT} more', fmt.style('label')))
            return

        for i, comp in enumerate(compositions):
            self._detail(prefix, '    - Aggregate: ', (comp.aggregate, fmt.style('info')))
            for title, refs in (('Assemblies', comp.assemblies), ('Dependencies', comp.dependencies)):
                if refs:
                    self._detail(prefix, f'      {title} ({len(refs)}):')
                    for ref in refs:
                        self._detail(prefix, '        - ', (ref, fmt.style('dependency')))
            if i < len(compositions) - 1:
                self._line((prefix, fmt.style('tree')))

    def _render_islands(self, graph: ComponentGraph) -> None:
        islands = [(i, graph.island_members(i)) for i in range(1, len(graph.islands) + 1)]
        islands = [
            (i, members) for i, members in islands
            if any(m.key not in self._rendered for m in members)
        ]
        if not islands:
            return

        self._line()
        self._line(('Islands (disconnected components):', fmt.style('island')))
        for island_id, members in islands:
            self._line()
            self._line((LAST, fmt.style('tree')), f' [Island {island_id}] {len(members)} components')

            limit = None if len(members) <= SMALL_ISLAND or self.config.verbose_output else DETAIL_LIMIT
            shown = 0
            remaining = []
            for i, member in enumerate(members):
                if member.key in self._rendered:
                    continue
                if limit is not None and shown >= limit:
                    remaining.append(member)
                    continue
                self._render_tree(member, prefix='   ', is_last=i == len(members) - 1)
                shown += 1

            # members rendered as part of an earlier tree are not listed again
            remaining = [m for m in remaining if m.key not in self._rendered]
            if remaining:
                self._line('   ', (f'... and {len(remaining)} more components', fmt.style('label')), ':')
                for member in remaining[:ISLAND_NAME_LIMIT]:
                    self._line(f'     - {member.label}')
                if len(remaining) > ISLAND_NAME_LIMIT:
                    self._line(
                        '     ',
                        (
                            f'... and {len(remaining) - ISLAND_NAME_LIMIT} more (use --verbose to show all)',
                            fmt.style('label'),
                        ),
                    )
