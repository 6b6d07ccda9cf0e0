"""
CLI の通しテスト（extract → build-graph）
"""
import json

import pytest
from conftest import KAISHA_ID, KENPO_ID, MINPO_ID
from typer.testing import CliRunner

from lawgraph.cli import app

runner = CliRunner()


@pytest.fixture
def corpus_dir(tmp_path):
    corpus = tmp_path / "text"
    corpus.mkdir()
    texts = {
        KENPO_ID: '民法その他の法律の定めるところによる。',
        MINPO_ID: '会社法（平成十七年法律第八十六号）第二条',
        KAISHA_ID: '民法第三条の規定による。',
    }
    for law_id, text in texts.items():
        (corpus / f"{law_id}.txt").write_text(text, encoding="utf-8")
    return corpus


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestCli:
    def test_extract_and_build_graph(self, tmp_path, laws_file, corpus_dir):
        index_dir = tmp_path / "index"
        result = runner.invoke(app, [
            "extract",
            "--laws", str(laws_file),
            "--corpus", str(corpus_dir),
            "--abbreviations", str(tmp_path / "none.json"),
            "--out", str(index_dir),
            "--workers", "1",
        ])
        assert result.exit_code == 0, result.output

        references = _read(index_dir / "references.json")
        assert references["total_references"] == 3
        backlinks = _read(index_dir / "backlinks.json")["backlinks"]
        assert [r["law_id"] for r in backlinks[MINPO_ID]["referenced_by"]] == [KENPO_ID, KAISHA_ID]

        result = runner.invoke(app, [
            "build-graph",
            "--laws", str(laws_file),
            "--index", str(index_dir),
            "--abbreviations", str(tmp_path / "none.json"),
            "--workers", "1",
            "--exhaustive",
        ])
        assert result.exit_code == 0, result.output

        graph_dir = index_dir / "graph"
        assert len(_read(graph_dir / "edges.json")["edges"]) == 3
        reachability = _read(graph_dir / "reachability.json")
        assert reachability["mode"] == "exhaustive"
        assert reachability["data"][KENPO_ID]["reachable_from"] == {MINPO_ID: 1, KAISHA_ID: 2}
        paths = _read(graph_dir / "important_paths.json")["paths"]
        assert {"from": "日本国憲法", "to": "会社法", "path": ["日本国憲法", "民法", "会社法"], "hops": 2} in paths

    def test_run_all(self, tmp_path, laws_file, corpus_dir):
        index_dir = tmp_path / "index"
        result = runner.invoke(app, [
            "run-all",
            "--laws", str(laws_file),
            "--corpus", str(corpus_dir),
            "--abbreviations", str(tmp_path / "none.json"),
            "--out", str(index_dir),
            "--workers", "1",
            "--top-k", "1",
        ])
        assert result.exit_code == 0, result.output
        reachability = _read(index_dir / "graph" / "reachability.json")
        assert list(reachability["data"]) == [MINPO_ID]

    def test_missing_law_index(self, tmp_path, corpus_dir):
        result = runner.invoke(app, [
            "extract",
            "--laws", str(tmp_path / "missing.json"),
            "--corpus", str(corpus_dir),
            "--out", str(tmp_path / "index"),
            "--workers", "1",
        ])
        assert result.exit_code == 1

    def test_build_graph_without_references(self, tmp_path, laws_file):
        result = runner.invoke(app, [
            "build-graph",
            "--laws", str(laws_file),
            "--index", str(tmp_path / "index"),
            "--workers", "1",
        ])
        assert result.exit_code == 1
