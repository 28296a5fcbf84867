import pytest

from sbomview.graph.resolver import ComponentResolver
from sbomview.graph.resolver import Resolution
from sbomview.graph.resolver import index_component
from sbomview.graph.resolver import name_version_key
from sbomview.models.component import EnrichedComponent
from sbomview.models.graph import ComponentGraph


def _graph(*nodes):
    graph = ComponentGraph()
    for node in nodes:
        graph.nodes[node.key] = node
        index_component(graph, node)
    return graph


@pytest.fixture
def resolver():
    return ComponentResolver(
        _graph(
            EnrichedComponent(key='ref-a', bom_ref='ref-a', name='alpha', version='1.0', purl='pkg:pypi/alpha@1.0'),
            EnrichedComponent(key='ref-b', bom_ref='ref-b', name='beta', cpe='cpe:2.3:a:acme:beta:2.0'),
            EnrichedComponent(key='gamma', name='gamma', version='3.1'),
            EnrichedComponent(key='ref-a2', bom_ref='ref-a2', name='alpha', version='2.0'),
        ),
    )


def test_name_version_key():
    """Test name-version keys drop the version when absent."""
    assert name_version_key('alpha', '1.0') == 'alpha-1.0'
    assert name_version_key('alpha', '') == 'alpha'


def test_resolve_by_bom_ref(resolver):
    """Test a bom-ref hit is not a fallback."""
    result = resolver.resolve('ref-a')
    assert result == Resolution(key='ref-a', resolved_by='bom-ref')
    assert not result.is_fallback


@pytest.mark.parametrize(
    'ref, key, resolved_by', [
        ('pkg:pypi/alpha@1.0', 'ref-a', 'purl'),
        ('cpe:2.3:a:acme:beta:2.0', 'ref-b', 'cpe'),
        ('gamma-3.1', 'gamma', 'name-version'),
        ('alpha@2.0', 'ref-a2', 'name-version'),
        ('beta', 'ref-b', 'name-version'),
        ('alpha', 'ref-a', 'name'),
    ],
)
def test_resolve_fallbacks(resolver, ref, key, resolved_by):
    """Test each fallback strategy in order."""
    result = resolver.resolve(ref)
    assert result.key == key
    assert result.resolved_by == resolved_by
    assert result.is_fallback


def test_node_key_without_bom_ref_is_not_a_bom_ref_hit(resolver):
    """Test a name-derived key does not count as a bom-ref match."""
    result = resolver.resolve('gamma')
    assert result.key == 'gamma'
    assert result.resolved_by == 'name'


def test_unresolvable(resolver):
    """Test unknown and empty refs give None."""
    assert resolver.resolve('pkg:npm/nothing@0.0.1') is None
    assert resolver.resolve('') is None


def test_first_registration_wins():
    """Test the first component registered for a value keeps the index entry."""
    graph = _graph(
        EnrichedComponent(key='first', bom_ref='first', name='lib', purl='pkg:npm/lib@1'),
        EnrichedComponent(key='second', bom_ref='second', name='lib', purl='pkg:npm/lib@1'),
    )
    assert graph.by_purl['pkg:npm/lib@1'] == 'first'
    assert graph.by_name['lib'] == ['first', 'second']
    assert ComponentResolver(graph).resolve('lib').key == 'first'
