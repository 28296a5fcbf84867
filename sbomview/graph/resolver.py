"""Component identity resolution through ordered fallback lookups."""
from collections.abc import Callable
from dataclasses import dataclass

from sbomview.models.component import EnrichedComponent
from sbomview.models.graph import ComponentGraph


@dataclass(frozen=True)
class Resolution:
    key: str
    resolved_by: str

    @property
    def is_fallback(self) -> bool:
        return self.resolved_by != 'bom-ref'


def name_version_key(name: str, version: str) -> str:
    if version:
        return f'{name}-{version}'
    return name


def index_component(graph: ComponentGraph, node: EnrichedComponent) -> None:
    """Register a node in the fallback indices. The first registration of a value wins."""
    if node.purl:
        graph.by_purl.setdefault(node.purl, node.key)
    if node.cpe:
        graph.by_cpe.setdefault(node.cpe, node.key)
    if node.name:
        graph.by_name_version.setdefault(name_version_key(node.name, node.version), node.key)
        graph.by_name.setdefault(node.name, []).append(node.key)


class ComponentResolver:
    """
    Resolve a dependency reference to a node key.

    Lookups run in order and stop at the first hit:
    bom-ref, purl, cpe, name-version (or `name@version`), name.
    """

    def __init__(self, graph: ComponentGraph):
        self.graph = graph
        self._strategies: list[tuple[str, Callable[[str], str | None]]] = [
            ('bom-ref', self._by_bom_ref),
            ('purl', graph.by_purl.get),
            ('cpe', graph.by_cpe.get),
            ('name-version', self._by_name_version),
            ('name', self._by_name),
        ]

    def resolve(self, ref: str) -> Resolution | None:
        if not ref:
            return None
        for resolved_by, lookup in self._strategies:
            key = lookup(ref)
            if key is not None and key in self.graph.nodes:
                return Resolution(key=key, resolved_by=resolved_by)
        return None

    def _by_bom_ref(self, ref: str) -> str | None:
        node = self.graph.nodes.get(ref)
        if node is not None and node.bom_ref == ref:
            return node.key
        return None

    def _by_name_version(self, ref: str) -> str | None:
        key = self.graph.by_name_version.get(ref)
        if key is None and '@' in ref:
            name, _, version = ref.rpartition('@')
            if name:
                key = self.graph.by_name_version.get(name_version_key(name, version))
        return key

    def _by_name(self, ref: str) -> str | None:
        keys = self.graph.by_name.get(ref)
        if keys:
            return keys[0]
        return None
