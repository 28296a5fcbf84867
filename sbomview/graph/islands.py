"""Partition the graph into the primary tree and disconnected islands."""
from collections import deque

import structlog

from sbomview.core.config import Reachability
from sbomview.models.graph import ComponentGraph
from sbomview.models.graph import MISSING_PRIMARY

logger = structlog.get_logger('islands')


def _reverse_dependencies(graph: ComponentGraph) -> dict[str, list[str]]:
    reverse: dict[str, list[str]] = {}
    for node in graph.nodes.values():
        for target in graph.dependency_targets(node):
            reverse.setdefault(target.key, []).append(node.key)
    return reverse


def _mark_reachable(graph: ComponentGraph, follow_dependencies: bool) -> set[str]:
    """Breadth-first walk from the primary node."""
    start = graph.primary_key
    visited = {start}
    queue = deque([start])
    while queue:
        node = graph.nodes[queue.popleft()]
        neighbours = list(node.children)
        if follow_dependencies:
            neighbours.extend(t.key for t in graph.dependency_targets(node))
        for key in neighbours:
            if key in graph.nodes and key not in visited:
                visited.add(key)
                queue.append(key)
    return visited


def analyze_islands(
    graph: ComponentGraph,
    reachability: str | Reachability = Reachability.ASSEMBLY,
) -> list[list[str]]:
    """
    Assign `island_id` to every node and fill `graph.islands`.

    Nodes reachable from the primary get island 0. The rest are grouped
    through assembly and dependency links in either direction, numbered
    1, 2, ... in insertion order.
    """
    follow_dependencies = Reachability(reachability) == Reachability.DEPENDENCIES
    graph.islands = []
    for node in graph.nodes.values():
        node.island_id = 0

    if graph.primary is not None:
        visited = _mark_reachable(graph, follow_dependencies)
    else:
        visited = set()
        if graph.nodes and MISSING_PRIMARY not in graph.warnings:
            graph.warnings.append(MISSING_PRIMARY)

    reverse = _reverse_dependencies(graph)
    for key, node in graph.nodes.items():
        if key in visited:
            continue

        island_id = len(graph.islands) + 1
        members = []
        visited.add(key)
        queue = deque([key])
        while queue:
            current = graph.nodes[queue.popleft()]
            current.island_id = island_id
            members.append(current.key)

            neighbours = list(current.children)
            if current.parent is not None:
                neighbours.append(current.parent)
            neighbours.extend(t.key for t in graph.dependency_targets(current))
            neighbours.extend(reverse.get(current.key, []))
            for other in neighbours:
                if other in graph.nodes and other not in visited:
                    visited.add(other)
                    queue.append(other)

        graph.islands.append(members)

    logger.debug(
        'Islands analyzed',
        reachability=str(Reachability(reachability)),
        islands=len(graph.islands),
        island_components=sum(len(i) for i in graph.islands),
    )
    return graph.islands
