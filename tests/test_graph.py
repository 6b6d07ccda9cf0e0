"""
CitationGraph のテスト
"""
import pytest
from conftest import make_ref

from lawgraph.core.graph import CitationGraph
from lawgraph.core.registry import LawRegistry
from lawgraph.models import LawRecord


@pytest.fixture
def abcd_registry():
    laws = [
        LawRecord(id='A', title='甲法', category='民事'),
        LawRecord(id='B', title='乙法'),
        LawRecord(id='C', title='丙法'),
        LawRecord(id='D', title='丁法'),
    ]
    return LawRegistry.build(laws, use_common_abbreviations=False)


@pytest.fixture
def graph(abcd_registry):
    refs = [
        make_ref('A', 'B', '第一条'),
        make_ref('A', 'B', '第二条'),
        make_ref('A', 'C'),
        make_ref('B', 'C'),
        make_ref('B', None, to_title='架空法'),
    ]
    return CitationGraph.build(refs, abcd_registry)


class TestCitationGraph:
    def test_edge_counts(self, graph):
        edges = {(e.source, e.target): e.count for e in graph.edges()}
        assert edges == {('A', 'B'): 2, ('A', 'C'): 1, ('B', 'C'): 1}

    def test_unknown_targets_excluded(self, graph):
        assert all(e.target in ('B', 'C') for e in graph.edges())

    def test_degrees(self, graph):
        assert graph.out_degree('A') == 2
        assert graph.in_degree('C') == 2
        assert graph.in_degree('A') == 0
        assert graph.out_degree('D') == 0

    def test_degree_sums_match_edge_count(self, graph):
        nodes = graph.nodes()
        edges = graph.edges()
        assert sum(n.out_degree for n in nodes) == len(edges)
        assert sum(n.in_degree for n in nodes) == len(edges)

    def test_nodes_in_registry_order(self, graph):
        assert [n.id for n in graph.nodes()] == ['A', 'B', 'C', 'D']
        assert graph.nodes()[0].category == '民事'

    def test_active_nodes(self, graph):
        assert [n.id for n in graph.active_nodes()] == ['A', 'B', 'C']

    def test_adjacency_views(self, graph):
        assert graph.forward_lists()['A'] == ['B', 'C']
        assert graph.reverse_lists()['C'] == ['A', 'B']

    def test_edge_dict_uses_from_to(self, graph):
        data = graph.edges()[0].to_dict()
        assert set(data) == {'from', 'to', 'count'}
