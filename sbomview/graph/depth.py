"""Subtree depth and expand/inline facts, computed once before rendering."""
from collections import deque

import structlog

from sbomview.models.graph import ComponentGraph

logger = structlog.get_logger('depth')


def find_expandable(graph: ComponentGraph) -> set[str]:
    """Nodes with assembly children or resolved dependencies. Others render inline."""
    return {
        key for key, node in graph.nodes.items()
        if graph.children_of(node) or graph.dependency_targets(node)
    }


def _successors(graph: ComponentGraph, key: str, expandable: set[str]) -> list[str]:
    node = graph.nodes[key]
    keys = [c.key for c in graph.children_of(node)]
    keys.extend(t.key for t in graph.dependency_targets(node) if t.key in expandable)
    return list(dict.fromkeys(keys))


def measure_depths(graph: ComponentGraph) -> tuple[dict[str, int], set[str]]:
    """
    Depth of every node: 0 for a leaf, otherwise 1 + the deepest child or
    expandable dependency target.

    A target already on the current path contributes nothing. Results are
    memoized, so a node shared by several parents is computed once. The
    graph is not modified.
    """
    expandable = find_expandable(graph)
    depths: dict[str, int] = {}

    order = list(graph.nodes)
    if graph.primary_key in graph.nodes:
        order.remove(graph.primary_key)
        order.insert(0, graph.primary_key)

    for root in order:
        if root in depths:
            continue
        on_path = {root}
        # frame: [key, successor iterator, best depth so far]
        stack = [[root, iter(_successors(graph, root, expandable)), 0]]
        while stack:
            frame = stack[-1]
            descended = False
            for nxt in frame[1]:
                if nxt in on_path:
                    continue
                if nxt in depths:
                    frame[2] = max(frame[2], depths[nxt] + 1)
                    continue
                on_path.add(nxt)
                stack.append([nxt, iter(_successors(graph, nxt, expandable)), 0])
                descended = True
                break
            if descended:
                continue

            key, _, best = stack.pop()
            on_path.discard(key)
            depths[key] = best
            if stack:
                stack[-1][2] = max(stack[-1][2], best + 1)

    return depths, expandable


def compute_depths(graph: ComponentGraph) -> dict[str, int]:
    """Measure depths and store them in `graph.depths` and `graph.expandable`."""
    depths, expandable = measure_depths(graph)
    graph.depths = depths
    graph.expandable = expandable
    logger.debug(
        'Depths computed',
        max_depth=max(depths.values(), default=0),
        expandable=len(expandable),
    )
    return depths


def assembly_levels(graph: ComponentGraph) -> dict[str, int]:
    """Root-relative level along assembly links: roots (and the primary) are 0."""
    levels: dict[str, int] = {}
    roots = [
        key for key, node in graph.nodes.items()
        if node.parent is None or node.parent not in graph.nodes
    ]
    if graph.primary_key in graph.nodes and graph.primary_key not in roots:
        roots.insert(0, graph.primary_key)

    for root in roots:
        if root in levels:
            continue
        levels[root] = 0
        queue = deque([root])
        while queue:
            key = queue.popleft()
            for child in graph.children_of(graph.nodes[key]):
                if child.key not in levels:
                    levels[child.key] = levels[key] + 1
                    queue.append(child.key)
    return levels
