"""Non-fatal structural checks over a built graph."""
from sbomview.graph.resolver import ComponentResolver
from sbomview.models.graph import ComponentGraph
from sbomview.models.graph import MISSING_PRIMARY


def find_dependency_cycles(graph: ComponentGraph) -> list[list[str]]:
    """
    Cycles along resolved dependency edges, one per back edge found by an
    iterative depth-first search in insertion order. Each cycle repeats its
    first key at the end.
    """
    cycles = []
    done: set[str] = set()
    for root in graph.nodes:
        if root in done:
            continue
        path = [root]
        on_path = {root}
        stack = [iter(graph.dependency_targets(graph.nodes[root]))]
        while stack:
            target = next(stack[-1], None)
            if target is None:
                stack.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue
            if target.key in on_path:
                start = path.index(target.key)
                cycles.append(path[start:] + [target.key])
            elif target.key not in done:
                path.append(target.key)
                on_path.add(target.key)
                stack.append(iter(graph.dependency_targets(target)))
    return cycles


def validate_graph(graph: ComponentGraph) -> list[str]:
    """Collect warnings about the graph. Never raises."""
    warnings = list(graph.warnings)

    if graph.primary is None and graph.nodes and MISSING_PRIMARY not in warnings:
        warnings.append(MISSING_PRIMARY)

    resolver = ComponentResolver(graph)
    for source_ref, target_refs in graph.adjacency.items():
        if resolver.resolve(source_ref) is None:
            warnings.append(f'dangling dependency source: {source_ref}')
        for target_ref in target_refs:
            if resolver.resolve(target_ref) is None:
                warnings.append(f'dangling dependency reference: {source_ref} -> {target_ref}')

    for fb in graph.fallback_resolutions:
        if fb.target:
            warnings.append(
                f'used fallback resolution ({fb.resolved_by}): {fb.source} -> {fb.target} '
                f'(resolved to component: {fb.resolved_to})',
            )
        else:
            warnings.append(
                f'used fallback resolution ({fb.resolved_by}): {fb.source} '
                f'(resolved to component: {fb.resolved_to})',
            )

    for cycle in find_dependency_cycles(graph):
        warnings.append(f"circular dependency detected: {' -> '.join(cycle)}")

    return warnings
