"""
被参照グラフのテスト
"""
import pytest
from conftest import make_ref

from lawgraph.core.backlinks import build_backlinks, top_referenced
from lawgraph.core.registry import LawRegistry
from lawgraph.models import LawRecord


@pytest.fixture
def abcd_registry():
    laws = [LawRecord(id=law_id, title=f'{law_id}法') for law_id in 'ABCD']
    return LawRegistry.build(laws, use_common_abbreviations=False)


@pytest.fixture
def references():
    return [
        make_ref('A', 'C', '第一条'),
        make_ref('A', 'C', '第二条'),
        make_ref('B', 'C', '第一条'),
        make_ref('A', 'B'),
        make_ref('D', 'B'),
        make_ref('A', None, to_title='架空法'),
        # レジストリに無い参照元
        make_ref('X', 'C'),
    ]


class TestBuildBacklinks:
    def test_every_law_seeded(self, abcd_registry, references):
        backlinks = build_backlinks(references, abcd_registry)
        assert list(backlinks) == ['A', 'B', 'C', 'D']
        assert backlinks['D'].referenced_by == []
        assert backlinks['D'].title == 'D法'

    def test_sorted_by_count_then_id(self, abcd_registry, references):
        backlinks = build_backlinks(references, abcd_registry)
        referrers = backlinks['C'].referenced_by
        assert [(r.law_id, r.count) for r in referrers] == [('A', 2), ('B', 1)]
        assert [r.law_id for r in backlinks['B'].referenced_by] == ['A', 'D']

    def test_total_count_matches_references(self, abcd_registry, references):
        backlinks = build_backlinks(references, abcd_registry)
        for law_id, entry in backlinks.items():
            expected = sum(
                1 for r in references
                if r.to_law_id == law_id and r.from_law_id in abcd_registry
            )
            assert entry.total_count == expected

    def test_unknown_referrer_skipped(self, abcd_registry, references):
        backlinks = build_backlinks(references, abcd_registry)
        assert all(r.law_id != 'X' for r in backlinks['C'].referenced_by)


class TestTopReferenced:
    def test_order_and_limit(self, abcd_registry, references):
        backlinks = build_backlinks(references, abcd_registry)
        top = top_referenced(backlinks, 1)
        assert len(top) == 1
        assert top[0].law_id in ('B', 'C')
        assert all(entry.referenced_by for entry in top_referenced(backlinks))
