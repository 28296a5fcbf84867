"""Consolidated component records built from a parsed SBOM."""
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel


class ViewModel(BaseModel):
    """Value records; serialized with camelCase keys."""
    model_config = ConfigDict(extra='ignore', alias_generator=to_camel, populate_by_name=True)


class LicenseInfo(ViewModel):
    id: str = ''
    name: str = ''
    url: str = ''
    expression: str = ''

    @property
    def label(self) -> str:
        return self.id or self.name or self.expression


class HashInfo(ViewModel):
    algorithm: str = ''
    value: str = ''


class PropertyInfo(ViewModel):
    name: str = ''
    value: str = ''


class VulnerabilityInfo(ViewModel):
    id: str = ''
    source_name: str = ''
    source_url: str = ''
    analysis_state: str = ''
    severity: str = ''
    score: float | None = None
    description: str = ''
    published: datetime | None = None
    updated: datetime | None = None


class AnnotationInfo(ViewModel):
    text: str = ''
    annotator: str = ''
    timestamp: datetime | None = None
    subjects: list[str] = Field(default_factory=list)


class CompositionInfo(ViewModel):
    aggregate: str = ''
    assemblies: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)


class ToolInfo(ViewModel):
    vendor: str = ''
    name: str = ''
    version: str = ''


class SBOMMetadata(ViewModel):
    """Document level metadata shown in headers."""
    format: str = ''
    spec_version: str = ''
    serial_number: str = ''
    version: int = 0
    timestamp: datetime | None = None
    tools: list[ToolInfo] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    supplier: str = ''
    manufacturer: str = ''
    licenses: list[LicenseInfo] = Field(default_factory=list)


class VulnerabilityStats(ViewModel):
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    none: int = 0
    unknown: int = 0

    def add(self, severity: str) -> None:
        self.total += 1
        bucket = (severity or '').strip().lower()
        if bucket in ('critical', 'high', 'medium', 'low', 'none'):
            setattr(self, bucket, getattr(self, bucket) + 1)
        else:
            self.unknown += 1

    def merge(self, other: 'VulnerabilityStats') -> None:
        for name in ('total', 'critical', 'high', 'medium', 'low', 'none', 'unknown'):
            setattr(self, name, getattr(self, name) + getattr(other, name))


@dataclass
class DependencyRecord:
    """A declared dependency: the raw reference and, when resolved, the target key."""
    ref: str
    target: str | None = None
    resolved_by: str = ''

    @property
    def resolved(self) -> bool:
        return self.target is not None


@dataclass
class EnrichedComponent:
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

    licenses: list[LicenseInfo] = field(default_factory=list)
    hashes: list[HashInfo] = field(default_factory=list)
    properties: list[PropertyInfo] = field(default_factory=list)
    vulnerabilities: list[VulnerabilityInfo] = field(default_factory=list)
    annotations: list[AnnotationInfo] = field(default_factory=list)
    compositions: list[CompositionInfo] = field(default_factory=list)

    # Assembly tree, by node key
    parent: str | None = None
    children: list[str] = field(default_factory=list)
    dependencies: list[DependencyRecord] = field(default_factory=list)

    island_id: int = 0
    dependency_count: int = 0
    is_primary: bool = False
    vulnerability_stats: VulnerabilityStats = field(default_factory=VulnerabilityStats)

    @property
    def label(self) -> str:
        name = self.name or self.bom_ref or self.key
        if self.version:
            return f'{name}@{self.version}'
        return name

    @property
    def resolved_dependencies(self) -> list[DependencyRecord]:
        return [d for d in self.dependencies if d.resolved]

    @property
    def unresolved_count(self) -> int:
        return sum(1 for d in self.dependencies if not d.resolved)
