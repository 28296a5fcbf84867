import json

import pytest

from sbomview.graph.builder import build_graph
from sbomview.graph.depth import compute_depths
from sbomview.graph.islands import analyze_islands
from sbomview.models.sbom import CdxDocument


def make_document(
    components=None,
    primary=None,
    dependencies=None,
    vulnerabilities=None,
    annotations=None,
    compositions=None,
    **metadata,
) -> dict:
    """Raw CycloneDX JSON dict with only the given sections filled in."""
    doc = {
        'bomFormat': 'CycloneDX',
        'specVersion': '1.5',
        'serialNumber': 'urn:uuid:3e671687-395b-41f5-a30f-a58921a69b79',
        'version': 1,
        'components': components or [],
        'dependencies': dependencies or [],
    }
    if primary is not None or metadata:
        doc['metadata'] = dict(metadata)
        if primary is not None:
            doc['metadata']['component'] = primary
    if vulnerabilities:
        doc['vulnerabilities'] = vulnerabilities
    if annotations:
        doc['annotations'] = annotations
    if compositions:
        doc['compositions'] = compositions
    return doc


def component(ref, name=None, version='', type='library', **extra) -> dict:
    item = {'bom-ref': ref, 'type': type, 'name': name or ref}
    if version:
        item['version'] = version
    item.update(extra)
    return item


def vulnerability(vuln_id, ref, severity, state='', score=None) -> dict:
    rating = {'severity': severity}
    if score is not None:
        rating['score'] = score
    item = {
        'id': vuln_id,
        'source': {'name': 'NVD'},
        'ratings': [rating],
        'affects': [{'ref': ref}],
    }
    if state:
        item['analysis'] = {'state': state}
    return item


def build(doc: dict, reachability='assembly'):
    """Build a graph and run the island and depth passes, as the view pipeline does."""
    graph = build_graph(CdxDocument.model_validate(doc))
    analyze_islands(graph, reachability)
    compute_depths(graph)
    return graph


@pytest.fixture
def app_document():
    """Primary `app` assembling a library, with dependencies and one vulnerability."""
    return make_document(
        primary=component('app', version='1.0.0', type='application', components=[
            component('pkg:pypi/requests@2.31.0', name='requests', version='2.31.0', purl='pkg:pypi/requests@2.31.0',
                      licenses=[{'license': {'id': 'Apache-2.0'}}]),
        ]),
        components=[
            component('urllib3', version='2.0.7', purl='pkg:pypi/urllib3@2.0.7'),
            component('certifi', version='2023.7.22'),
        ],
        dependencies=[
            {'ref': 'app', 'dependsOn': ['pkg:pypi/requests@2.31.0']},
            {'ref': 'pkg:pypi/requests@2.31.0', 'dependsOn': ['urllib3', 'certifi']},
        ],
        vulnerabilities=[vulnerability('CVE-2023-45803', 'urllib3', 'medium', score=4.2)],
        timestamp='2024-01-15T10:30:00Z',
        tools=[{'vendor': 'anchore', 'name': 'syft', 'version': '0.98.0'}],
    )


@pytest.fixture
def self_loop_document():
    """`app@v1` assembling `libA@v2`, which declares a dependency on itself."""
    return make_document(
        primary=component('root', name='app', version='v1', type='application', components=[
            component('libA', version='v2'),
        ]),
        dependencies=[{'ref': 'libA', 'dependsOn': ['libA']}],
    )


@pytest.fixture
def orphan_document():
    return make_document(
        primary=component('app', type='application'),
        components=[component('orphan')],
    )


@pytest.fixture
def severity_document():
    return make_document(
        primary=component('app', type='application'),
        components=[component('crit'), component('high'), component('med')],
        vulnerabilities=[
            vulnerability('CVE-1', 'crit', 'critical'),
            vulnerability('CVE-2', 'high', 'high'),
            vulnerability('CVE-3', 'med', 'medium'),
        ],
    )


@pytest.fixture
def write_sbom(tmp_path):
    """Write a document dict to a JSON file and return its path."""
    def _write(doc, name='bom.json'):
        path = tmp_path / name
        path.write_text(json.dumps(doc), encoding='utf-8')
        return path
    return _write
