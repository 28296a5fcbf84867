"""Build a consolidated component graph from a parsed CycloneDX document."""
from datetime import datetime

import structlog

from sbomview.graph.resolver import ComponentResolver
from sbomview.graph.resolver import index_component
from sbomview.models.component import AnnotationInfo
from sbomview.models.component import CompositionInfo
from sbomview.models.component import DependencyRecord
from sbomview.models.component import EnrichedComponent
from sbomview.models.component import HashInfo
from sbomview.models.component import LicenseInfo
from sbomview.models.component import PropertyInfo
from sbomview.models.component import SBOMMetadata
from sbomview.models.component import ToolInfo
from sbomview.models.component import VulnerabilityInfo
from sbomview.models.component import VulnerabilityStats
from sbomview.models.graph import ComponentGraph
from sbomview.models.graph import FallbackResolution
from sbomview.models.sbom import CdxAnnotation
from sbomview.models.sbom import CdxComponent
from sbomview.models.sbom import CdxDocument
from sbomview.models.sbom import CdxLicenseChoice
from sbomview.models.sbom import CdxVulnerability
from sbomview.models.severity import severity_rank

logger = structlog.get_logger('graph_builder')


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, None when absent or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None


def convert_licenses(licenses: list[CdxLicenseChoice]) -> list[LicenseInfo]:
    result = []
    for choice in licenses:
        if choice.expression:
            result.append(LicenseInfo(expression=choice.expression))
        elif choice.license is not None:
            result.append(
                LicenseInfo(
                    id=choice.license.id,
                    name=choice.license.name,
                    url=choice.license.url,
                ),
            )
    return result


def convert_vulnerability(vuln: CdxVulnerability) -> VulnerabilityInfo:
    """Collapse ratings to the worst known severity and the highest score."""
    severity = ''
    best_rank = -1
    fallback = ''
    score = None
    for rating in vuln.ratings:
        if rating.severity:
            fallback = rating.severity
            rank = severity_rank(rating.severity)
            if rank > best_rank:
                best_rank = rank
                severity = rating.severity.lower()
        if rating.score is not None and (score is None or rating.score > score):
            score = rating.score

    return VulnerabilityInfo(
        id=vuln.id,
        source_name=vuln.source.name if vuln.source else '',
        source_url=vuln.source.url if vuln.source else '',
        analysis_state=vuln.analysis.state if vuln.analysis else '',
        severity=severity or fallback,
        score=score,
        description=vuln.description,
        published=parse_timestamp(vuln.published),
        updated=parse_timestamp(vuln.updated),
    )


def convert_annotation(annotation: CdxAnnotation) -> AnnotationInfo:
    annotator = ''
    if annotation.annotator is not None:
        names = [
            entity.name for entity in (
                annotation.annotator.organization,
                annotation.annotator.individual,
                annotation.annotator.component,
            ) if entity is not None and entity.name
        ]
        annotator = ' / '.join(names)
    return AnnotationInfo(
        text=annotation.text,
        annotator=annotator,
        timestamp=parse_timestamp(annotation.timestamp),
        subjects=list(annotation.subjects),
    )


def convert_metadata(document: CdxDocument) -> SBOMMetadata:
    metadata = SBOMMetadata(
        format=document.bom_format,
        spec_version=document.spec_version,
        serial_number=document.serial_number,
        version=document.version,
    )
    source = document.metadata
    if source is None:
        return metadata

    metadata.timestamp = parse_timestamp(source.timestamp)
    metadata.tools = [
        ToolInfo(vendor=t.vendor, name=t.name, version=t.version) for t in source.tools
    ]
    metadata.authors = [a.name for a in source.authors if a.name]
    if source.supplier is not None:
        metadata.supplier = source.supplier.name
    # `manufacture` up to 1.5, `manufacturer` from 1.6
    for entity in (source.manufacturer, source.manufacture):
        if entity is not None and entity.name:
            metadata.manufacturer = entity.name
            break
    metadata.licenses = convert_licenses(source.licenses)
    return metadata


class GraphBuilder:
    """
    Turns a CdxDocument into a ComponentGraph.

    Cross-cutting sections (vulnerabilities, annotations, compositions) are
    indexed by component reference once, then joined onto each node while it
    is created. Dependencies are linked after every node exists.
    """

    def __init__(self, document: CdxDocument):
        self.document = document
        self.graph = ComponentGraph()
        self.resolver = ComponentResolver(self.graph)
        self._vulnerabilities: dict[str, list[VulnerabilityInfo]] = {}
        self._annotations: dict[str, list[AnnotationInfo]] = {}
        self._compositions: dict[str, list[CompositionInfo]] = {}
        self._anonymous = 0
        self._primary_ref = ''

    def build(self) -> ComponentGraph:
        self._index_vulnerabilities()
        self._index_annotations()
        self._index_compositions()

        primary = self.document.metadata.component if self.document.metadata is not None else None
        if primary is not None:
            self._primary_ref = primary.bom_ref

        self._walk(self.document.components, parent_key=None)
        if primary is not None:
            self._add_primary(primary)

        self.graph.metadata = convert_metadata(self.document)
        self._collect_adjacency()
        self._link_dependencies()

        logger.debug(
            'Graph built',
            components=len(self.graph.nodes),
            primary=self.graph.primary_key,
            dependency_refs=len(self.graph.adjacency),
        )
        return self.graph

    # -- Pre-indexing --

    def _index_vulnerabilities(self) -> None:
        for vuln in self.document.vulnerabilities:
            info = convert_vulnerability(vuln)
            seen = set()
            for affect in vuln.affects:
                if affect.ref and affect.ref not in seen:
                    seen.add(affect.ref)
                    self._vulnerabilities.setdefault(affect.ref, []).append(info)

    def _index_annotations(self) -> None:
        for annotation in self.document.annotations:
            info = convert_annotation(annotation)
            self.graph.annotations.append(info)
            for subject in dict.fromkeys(info.subjects):
                self._annotations.setdefault(subject, []).append(info)

    def _index_compositions(self) -> None:
        for composition in self.document.compositions:
            info = CompositionInfo(
                aggregate=composition.aggregate,
                assemblies=list(composition.assemblies),
                dependencies=list(composition.dependencies),
            )
            self.graph.compositions.append(info)
            for assembly in dict.fromkeys(info.assemblies):
                self._compositions.setdefault(assembly, []).append(info)

    # -- Nodes --

    def _walk(self, components: list[CdxComponent], parent_key: str | None) -> None:
        """Depth-first walk of nested components with an explicit stack."""
        seen: set[int] = set()
        stack = [(c, parent_key) for c in reversed(components)]
        while stack:
            component, parent = stack.pop()
            if id(component) in seen:
                continue
            seen.add(id(component))
            node = self._create_node(component, parent)
            stack.extend((child, node.key) for child in reversed(component.components))

    def _add_primary(self, component: CdxComponent) -> None:
        existing = self.graph.nodes.get(component.bom_ref) if component.bom_ref else None
        if existing is not None and existing.parent is None and existing.bom_ref == component.bom_ref:
            # Primary repeated in the component list: promote the listed node
            existing.is_primary = True
            self.graph.primary_key = existing.key
            self.graph.warnings.append(
                f'primary component also listed in components: {existing.key}',
            )
            self._walk(component.components, parent_key=existing.key)
            return

        node = self._create_node(component, parent_key=None)
        node.is_primary = True
        self.graph.primary_key = node.key
        self._walk(component.components, parent_key=node.key)

    def _assign_key(self, component: CdxComponent, parent_key: str | None) -> str:
        """
        Key by bom-ref, else name, suffixing repeats with `#N`.

        The primary's bom-ref is held for the primary (or a top-level copy
        of it), so nested components reusing it get a suffixed key.
        """
        base = component.bom_ref or component.name
        if not base:
            self._anonymous += 1
            base = f'component-{self._anonymous}'
        reserved = parent_key is not None and component.bom_ref and base == self._primary_ref
        if base not in self.graph.nodes and not reserved:
            return base

        self.graph.warnings.append(f'duplicate component identifier: {base}')
        n = 2
        while f'{base}#{n}' in self.graph.nodes:
            n += 1
        return f'{base}#{n}'

    def _create_node(self, component: CdxComponent, parent_key: str | None) -> EnrichedComponent:
        node = EnrichedComponent(
            key=self._assign_key(component, parent_key),
            bom_ref=component.bom_ref,
            type=component.type,
            name=component.name,
            version=component.version,
            purl=component.purl,
            cpe=component.cpe,
            description=component.description,
            group=component.group,
            scope=component.scope,
            supplier=component.supplier.name if component.supplier else '',
            licenses=convert_licenses(component.licenses),
            hashes=[HashInfo(algorithm=h.alg, value=h.content) for h in component.hashes],
            properties=[PropertyInfo(name=p.name, value=p.value) for p in component.properties],
        )
        if component.bom_ref:
            node.vulnerabilities = list(self._vulnerabilities.get(component.bom_ref, []))
            node.annotations = list(self._annotations.get(component.bom_ref, []))
            node.compositions = list(self._compositions.get(component.bom_ref, []))

        stats = VulnerabilityStats()
        for vuln in node.vulnerabilities:
            stats.add(vuln.severity)
        node.vulnerability_stats = stats

        if parent_key is not None:
            node.parent = parent_key
            self.graph.nodes[parent_key].children.append(node.key)

        self.graph.nodes[node.key] = node
        index_component(self.graph, node)
        return node

    # -- Dependencies --

    def _collect_adjacency(self) -> None:
        for dependency in self.document.dependencies:
            if dependency.ref:
                self.graph.adjacency.setdefault(dependency.ref, []).extend(dependency.depends_on)

    def _link_dependencies(self) -> None:
        for source_ref, target_refs in self.graph.adjacency.items():
            source = self.resolver.resolve(source_ref)
            if source is None:
                continue
            if source.is_fallback:
                self.graph.fallback_resolutions.append(
                    FallbackResolution(
                        source=source_ref,
                        target='',
                        resolved_by=source.resolved_by,
                        resolved_to=source.key,
                    ),
                )

            node = self.graph.nodes[source.key]
            declared = {d.ref for d in node.dependencies}
            for ref in target_refs:
                if ref in declared:
                    continue
                declared.add(ref)
                target = self.resolver.resolve(ref)
                if target is None:
                    node.dependencies.append(DependencyRecord(ref=ref))
                    continue
                if target.is_fallback:
                    self.graph.fallback_resolutions.append(
                        FallbackResolution(
                            source=source_ref,
                            target=ref,
                            resolved_by=target.resolved_by,
                            resolved_to=target.key,
                        ),
                    )
                node.dependencies.append(
                    DependencyRecord(ref=ref, target=target.key, resolved_by=target.resolved_by),
                )
            node.dependency_count = len(node.resolved_dependencies)


def build_graph(document: CdxDocument) -> ComponentGraph:
    """Build the component graph for a document. Derived passes are not run here."""
    return GraphBuilder(document).build()
