"""Pydantic models for a parsed CycloneDX JSON document."""
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


def _to_str(v: Any) -> str:
    if v is None:
        return ''
    if isinstance(v, (str, int, float)):
        return str(v)
    return ''


class CdxModel(BaseModel):
    """Base for all document models: tolerant of unknown keys."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)


class CdxEntity(CdxModel):
    """Organization, individual or tool-like entity with a name."""
    name: str = ''

    @field_validator('name', mode='before')
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        return _to_str(v)


class CdxLicense(CdxModel):
    id: str = ''
    name: str = ''
    url: str = ''


class CdxLicenseChoice(CdxModel):
    license: CdxLicense | None = None
    expression: str = ''


class CdxHash(CdxModel):
    alg: str = ''
    content: str = ''


class CdxProperty(CdxModel):
    name: str = ''
    value: str = ''

    @field_validator('name', 'value', mode='before')
    @classmethod
    def coerce_str(cls, v: Any) -> str:
        return _to_str(v)


class CdxComponent(CdxModel):
    """A component, possibly with nested (assembled) components."""
    bom_ref: str = Field(alias='bom-ref', default='')
    type: str = ''
    name: str = ''
    version: str = ''
    group: str = ''
    scope: str = ''
    description: str = ''
    purl: str = ''
    cpe: str = ''
    supplier: CdxEntity | None = None
    licenses: list[CdxLicenseChoice] = Field(default_factory=list)
    hashes: list[CdxHash] = Field(default_factory=list)
    properties: list[CdxProperty] = Field(default_factory=list)
    components: list['CdxComponent'] = Field(default_factory=list)

    @field_validator(
        'bom_ref', 'type', 'name', 'version', 'group', 'scope',
        'description', 'purl', 'cpe', mode='before',
    )
    @classmethod
    def coerce_str(cls, v: Any) -> str:
        return _to_str(v)

    @field_validator('licenses', 'hashes', 'properties', 'components', mode='before')
    @classmethod
    def coerce_list(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]


class CdxDependency(CdxModel):
    ref: str = ''
    depends_on: list[str] = Field(alias='dependsOn', default_factory=list)

    @field_validator('depends_on', mode='before')
    @classmethod
    def parse_depends_on(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [str(item) for item in v if isinstance(item, str) and item]


class CdxRating(CdxModel):
    score: float | None = None
    severity: str = ''
    method: str = ''

    @field_validator('score', mode='before')
    @classmethod
    def parse_score(cls, v: Any) -> float | None:
        try:
            return float(v) if v is not None else None
        except (TypeError, ValueError):
            return None


class CdxSource(CdxModel):
    name: str = ''
    url: str = ''


class CdxAffect(CdxModel):
    ref: str = ''


class CdxAnalysis(CdxModel):
    state: str = ''


class CdxVulnerability(CdxModel):
    id: str = ''
    source: CdxSource | None = None
    ratings: list[CdxRating] = Field(default_factory=list)
    description: str = ''
    published: str = ''
    updated: str = ''
    affects: list[CdxAffect] = Field(default_factory=list)
    analysis: CdxAnalysis | None = None


class CdxAnnotator(CdxModel):
    organization: CdxEntity | None = None
    individual: CdxEntity | None = None
    component: CdxEntity | None = None
    service: CdxEntity | None = None


class CdxAnnotation(CdxModel):
    subjects: list[str] = Field(default_factory=list)
    annotator: CdxAnnotator | None = None
    timestamp: str = ''
    text: str = ''


class CdxComposition(CdxModel):
    aggregate: str = ''
    assemblies: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)


class CdxTool(CdxModel):
    vendor: str = ''
    name: str = ''
    version: str = ''

    @field_validator('vendor', mode='before')
    @classmethod
    def parse_vendor(cls, v: Any) -> str:
        # 1.5+ tool components carry the vendor as an organization object
        if isinstance(v, dict):
            return _to_str(v.get('name'))
        return _to_str(v)


class CdxMetadata(CdxModel):
    timestamp: str = ''
    tools: list[CdxTool] = Field(default_factory=list)
    authors: list[CdxEntity] = Field(default_factory=list)
    component: CdxComponent | None = None
    manufacture: CdxEntity | None = None
    manufacturer: CdxEntity | None = None
    supplier: CdxEntity | None = None
    licenses: list[CdxLicenseChoice] = Field(default_factory=list)

    @field_validator('tools', mode='before')
    @classmethod
    def parse_tools(cls, v: Any) -> list[dict]:
        """Accept both the legacy tool list and the 1.5 `{components, services}` object."""
        if isinstance(v, list):
            return [t for t in v if isinstance(t, dict)]
        if isinstance(v, dict):
            tools = []
            for key in ('components', 'services'):
                for item in v.get(key) or []:
                    if not isinstance(item, dict):
                        continue
                    tool = dict(item)
                    if 'vendor' not in tool:
                        tool['vendor'] = (
                            tool.get('manufacturer')
                            or tool.get('supplier')
                            or tool.get('group')
                            or tool.get('publisher')
                            or ''
                        )
                    tools.append(tool)
            return tools
        return []


class CdxDocument(CdxModel):
    """Root of a CycloneDX JSON BOM."""
    bom_format: str = Field(alias='bomFormat', default='')
    spec_version: str = Field(alias='specVersion', default='')
    serial_number: str = Field(alias='serialNumber', default='')
    version: int = 0
    metadata: CdxMetadata | None = None
    components: list[CdxComponent] = Field(default_factory=list)
    dependencies: list[CdxDependency] = Field(default_factory=list)
    vulnerabilities: list[CdxVulnerability] = Field(default_factory=list)
    annotations: list[CdxAnnotation] = Field(default_factory=list)
    compositions: list[CdxComposition] = Field(default_factory=list)

    @field_validator('spec_version', mode='before')
    @classmethod
    def coerce_spec_version(cls, v: Any) -> str:
        return _to_str(v)

    @field_validator('version', mode='before')
    @classmethod
    def parse_version(cls, v: Any) -> int:
        try:
            return int(v)
        except (TypeError, ValueError):
            return 0

    @field_validator('components', 'dependencies', 'vulnerabilities', 'annotations', 'compositions', mode='before')
    @classmethod
    def coerce_list(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]


CdxComponent.model_rebuild()
