from conftest import build
from conftest import component
from conftest import make_document

from sbomview.graph.builder import build_graph
from sbomview.graph.statistics import calculate_statistics
from sbomview.models.component import VulnerabilityStats
from sbomview.models.sbom import CdxDocument


class TestCalculateStatistics:
    """Tests for calculate_statistics."""

    def test_counts(self, app_document):
        """Test totals over a small document."""
        stats = calculate_statistics(build(app_document))
        assert stats.total_components == 4
        assert stats.total_dependencies == 3
        assert stats.total_vulnerabilities.total == 1
        assert stats.total_vulnerabilities.medium == 1
        assert stats.island_count == 2
        assert stats.max_depth == 1
        assert stats.max_assembly_level == 1
        assert stats.components_by_type == {'application': 1, 'library': 3}
        assert list(stats.components_by_type) == sorted(stats.components_by_type)

    def test_empty_graph(self):
        """Test an empty graph gives zeros."""
        stats = calculate_statistics(build(make_document()))
        assert stats.total_components == 0
        assert stats.max_depth == 0
        assert stats.island_count == 0

    def test_annotations_and_compositions_deduplicated(self):
        """Test global and node attached entries are counted once."""
        doc = make_document(
            primary=component('app'),
            components=[component('lib')],
            annotations=[
                {'subjects': ['app', 'lib'], 'text': 'shared'},
                {'subjects': ['nobody'], 'text': 'global only'},
            ],
            compositions=[{'aggregate': 'complete', 'assemblies': ['app', 'lib']}],
        )
        stats = calculate_statistics(build(doc))
        assert stats.total_annotations == 2
        assert stats.total_compositions == 1

    def test_depths_computed_on_demand(self):
        """Test max depth is measured without filling an empty depth cache."""
        doc = make_document(primary=component('app', components=[component('lib')]))
        graph = build_graph(CdxDocument.model_validate(doc))
        assert graph.depths == {}
        assert calculate_statistics(graph).max_depth == 1
        assert graph.depths == {}
        assert graph.expandable == set()

    def test_max_assembly_level(self):
        """Test the deepest assembly nesting level is reported."""
        doc = make_document(
            primary=component('app', components=[
                component('a', components=[component('a1', components=[component('a2')])]),
            ]),
            components=[component('loose')],
        )
        assert calculate_statistics(build(doc)).max_assembly_level == 3

    def test_camel_case_json(self, app_document):
        """Test statistics serialize with camelCase keys."""
        data = calculate_statistics(build(app_document)).model_dump(by_alias=True)
        assert data['totalComponents'] == 4
        assert data['totalVulnerabilities']['medium'] == 1
        assert 'componentsByType' in data


def test_vulnerability_stats_add_and_merge():
    """Test severities land in their bucket and unknown ones in `unknown`."""
    stats = VulnerabilityStats()
    for severity in ('CRITICAL', 'high', 'none', 'moderate', ''):
        stats.add(severity)
    assert stats.total == 5
    assert stats.critical == 1
    assert stats.none == 1
    assert stats.unknown == 2

    other = VulnerabilityStats()
    other.add('low')
    stats.merge(other)
    assert stats.total == 6
    assert stats.low == 1
