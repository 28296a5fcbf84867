from dataclasses import dataclass
from dataclasses import field

from sbomview.models.component import AnnotationInfo
from sbomview.models.component import CompositionInfo
from sbomview.models.component import EnrichedComponent
from sbomview.models.component import SBOMMetadata

MISSING_PRIMARY = 'no primary component: every component is treated as an island'


@dataclass
class FallbackResolution:
    """A dependency reference that matched through something other than bom-ref."""
    source: str
    target: str
    resolved_by: str
    resolved_to: str


@dataclass
class ComponentGraph:
    """
    Arena of enriched components.

    Nodes live once in `nodes` (insertion ordered). Assembly links,
    dependency targets and island members are node keys, never objects.
    """
    nodes: dict[str, EnrichedComponent] = field(default_factory=dict)
    primary_key: str | None = None
    adjacency: dict[str, list[str]] = field(default_factory=dict)

    by_purl: dict[str, str] = field(default_factory=dict)
    by_cpe: dict[str, str] = field(default_factory=dict)
    by_name_version: dict[str, str] = field(default_factory=dict)
    by_name: dict[str, list[str]] = field(default_factory=dict)

    islands: list[list[str]] = field(default_factory=list)
    metadata: SBOMMetadata = field(default_factory=SBOMMetadata)
    annotations: list[AnnotationInfo] = field(default_factory=list)
    compositions: list[CompositionInfo] = field(default_factory=list)
    fallback_resolutions: list[FallbackResolution] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    # Filled by the depth pass
    depths: dict[str, int] = field(default_factory=dict)
    expandable: set[str] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def primary(self) -> EnrichedComponent | None:
        if self.primary_key is None:
            return None
        return self.nodes.get(self.primary_key)

    def get(self, key: str | None) -> EnrichedComponent | None:
        if key is None:
            return None
        return self.nodes.get(key)

    def parent_of(self, node: EnrichedComponent) -> EnrichedComponent | None:
        return self.get(node.parent)

    def children_of(self, node: EnrichedComponent) -> list[EnrichedComponent]:
        return [self.nodes[k] for k in node.children if k in self.nodes]

    def dependency_targets(self, node: EnrichedComponent) -> list[EnrichedComponent]:
        """Resolved dependency targets still present in this graph, in declared order."""
        keys = dict.fromkeys(
            d.target for d in node.dependencies
            if d.target is not None and d.target in self.nodes
        )
        return [self.nodes[k] for k in keys]

    def island_members(self, island_id: int) -> list[EnrichedComponent]:
        if island_id < 1 or island_id > len(self.islands):
            return []
        return [self.nodes[k] for k in self.islands[island_id - 1] if k in self.nodes]

    def depth_of(self, key: str) -> int:
        return self.depths.get(key, 0)
