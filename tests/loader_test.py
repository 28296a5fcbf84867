import json

import pytest

from sbomview.core.validation import DocumentError
from sbomview.services.loader_service import LoaderService


@pytest.fixture
def loader():
    return LoaderService()


def test_load_cyclonedx(loader, write_sbom, app_document):
    """Test a CycloneDX JSON file is parsed into a document."""
    document = loader.load(write_sbom(app_document))
    assert document.bom_format == 'CycloneDX'
    assert document.metadata.component.bom_ref == 'app'
    assert len(document.components) == 2
    assert document.dependencies[1].depends_on == ['urllib3', 'certifi']


def test_missing_file(loader, tmp_path):
    """Test a missing path is a document error."""
    with pytest.raises(DocumentError, match='does not exist'):
        loader.load(tmp_path / 'missing.json')


def test_directory(loader, tmp_path):
    """Test a directory is rejected."""
    with pytest.raises(DocumentError, match='Not a file'):
        loader.load(tmp_path)


def test_empty_file(loader, tmp_path):
    """Test an empty file is rejected."""
    path = tmp_path / 'empty.json'
    path.touch()
    with pytest.raises(DocumentError, match='empty'):
        loader.load(path)


def test_invalid_json(loader):
    """Test malformed JSON is a document error."""
    with pytest.raises(DocumentError, match='Invalid JSON'):
        loader.parse('{"bomFormat": ', source='broken.json')


def test_spdx_rejected(loader):
    """Test SPDX documents are rejected rather than converted."""
    with pytest.raises(DocumentError, match='SPDX'):
        loader.parse(json.dumps({'spdxVersion': 'SPDX-2.3', 'packages': []}))


def test_xml_rejected(loader):
    """Test XML input is rejected."""
    with pytest.raises(DocumentError, match='XML'):
        loader.parse('<?xml version="1.0"?><bom xmlns="http://cyclonedx.org/schema/bom/1.5"/>')


def test_not_cyclonedx(loader):
    """Test JSON without bomFormat is rejected."""
    with pytest.raises(DocumentError, match='Not a CycloneDX'):
        loader.parse('{"components": []}')
    with pytest.raises(DocumentError, match='Expected a JSON object'):
        loader.parse('[]')


def test_byte_order_mark(loader):
    """Test a leading byte order mark is ignored."""
    document = loader.parse('\ufeff{"bomFormat": "CycloneDX", "specVersion": "1.4"}')
    assert document.spec_version == '1.4'


def test_tolerates_odd_values(loader):
    """Test wrongly typed optional fields fall back to defaults."""
    document = loader.parse(json.dumps({
        'bomFormat': 'CycloneDX',
        'specVersion': 1.4,
        'version': 'one',
        'components': [{'bom-ref': 'a', 'name': 'a', 'version': 2, 'hashes': 'nope'}, 'junk'],
        'dependencies': [{'ref': 'a', 'dependsOn': ['b', 7, '']}],
        'vulnerabilities': [{'id': 'CVE-1', 'ratings': [{'score': 'high'}]}],
    }))
    assert document.spec_version == '1.4'
    assert document.version == 0
    assert len(document.components) == 1
    assert document.components[0].version == '2'
    assert document.components[0].hashes == []
    assert document.dependencies[0].depends_on == ['b']
    assert document.vulnerabilities[0].ratings[0].score is None
