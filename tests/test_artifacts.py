"""
出力ドキュメントのテスト
"""
import json
from datetime import datetime

import pytest
from conftest import make_ref

from lawgraph.core.artifacts import ArtifactWriter, load_references, utc_timestamp
from lawgraph.core.coordinator import ExtractionResult
from lawgraph.core.reachability import ReachabilityResult
from lawgraph.models import GraphEdge, GraphNode, RefType, ReachabilityEntry


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestTimestamp:
    def test_utc_iso_format(self):
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        datetime.fromisoformat(stamp[:-1])


class TestArtifactWriter:
    def test_references_document(self, tmp_path):
        refs = [
            make_ref('A', 'B', '第一条', ref_type=RefType.ARTICLE_REF),
            make_ref('A', None, to_title='架空法', ref_type=RefType.UNKNOWN_LAW),
        ]
        result = ExtractionResult(references=refs, total_found=3, failed_law_ids=['Z'])
        path = ArtifactWriter(tmp_path).write_references(result)

        data = _read(path)
        assert data["total_references"] == 2
        assert data["type_stats"] == {"article_ref": 1, "unknown_law": 1}
        assert data["failed_law_ids"] == ['Z']
        assert data["references"][0]["ref_type"] == "article_ref"
        assert data["updated_at"].endswith("Z")

    def test_references_reload(self, tmp_path):
        refs = [make_ref('A', 'B', '第一条', ref_type=RefType.ARTICLE_REF)]
        path = ArtifactWriter(tmp_path).write_references(ExtractionResult(refs, 1))
        assert load_references(path) == refs

    def test_graph_documents(self, tmp_path):
        writer = ArtifactWriter(tmp_path)
        nodes = [GraphNode(id='A', title='甲法', category='', out_degree=1)]
        edges = [GraphEdge(source='A', target='B', count=2)]
        nodes_path, edges_path = writer.write_graph(nodes, edges)

        assert nodes_path.parent == tmp_path / "graph"
        assert _read(nodes_path)["nodes"][0]["title"] == '甲法'
        assert _read(edges_path)["edges"] == [{"from": "A", "to": "B", "count": 2}]

    def test_japanese_kept_readable(self, tmp_path):
        nodes = [GraphNode(id='A', title='甲法', category='')]
        nodes_path, _ = ArtifactWriter(tmp_path).write_graph(nodes, [])
        assert '甲法' in nodes_path.read_text(encoding="utf-8")

    def test_reachability_document(self, tmp_path):
        result = ReachabilityResult(
            mode="landmark",
            max_hops=5,
            entries={'A': ReachabilityEntry('A', '甲法', {'B': 1}, {})},
        )
        data = _read(ArtifactWriter(tmp_path).write_reachability(result))
        assert data["mode"] == "landmark"
        assert data["max_hops"] == 5
        assert data["data"]["A"]["reachable_from"] == {'B': 1}


class TestLoadReferences:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError):
            load_references(tmp_path / "references.json")

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "references.json"
        path.write_text('{"items": []}', encoding="utf-8")
        with pytest.raises(ValueError):
            load_references(path)

    def test_malformed_entry(self, tmp_path):
        path = tmp_path / "references.json"
        path.write_text('{"references": [{"to_law_id": "B"}]}', encoding="utf-8")
        with pytest.raises(ValueError):
            load_references(path)
