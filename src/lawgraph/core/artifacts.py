"""
出力ドキュメントの書き出し

いずれも UTF-8 の JSON で、下流のキャッシュ無効化用にトップレベルの updated_at を持つ。
書き出しは全集計の完了後にコーディネータから1回だけ行う。

index/
  references.json      {updated_at, total_references, type_stats, failed_law_ids, references}
  backlinks.json       {updated_at, backlinks: {law_id: BacklinkEntry}}
  graph/
    nodes.json         {updated_at, nodes}
    edges.json         {updated_at, edges}
    reachability.json  {updated_at, mode, max_hops, failed_law_ids, data}
    important_paths.json {updated_at, paths}
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import BacklinkEntry, GraphEdge, GraphNode, Reference
from ..utils.fs import ensure_dir, load_json_document
from .coordinator import ExtractionResult
from .reachability import ReachabilityResult

logger = logging.getLogger(__name__)

REFERENCES_FILE = "references.json"
BACKLINKS_FILE = "backlinks.json"
NODES_FILE = "nodes.json"
EDGES_FILE = "edges.json"
REACHABILITY_FILE = "reachability.json"
IMPORTANT_PATHS_FILE = "important_paths.json"


def utc_timestamp() -> str:
    """ISO-8601（ミリ秒、UTC、末尾 Z）"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def write_json(path: Path, data: Any) -> Path:
    ensure_dir(path.parent)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    logger.debug(f"Wrote {path}")
    return path


class ArtifactWriter:
    def __init__(self, index_dir: Path, graph_dir: Optional[Path] = None):
        self.index_dir = index_dir
        self.graph_dir = graph_dir or index_dir / "graph"

    def write_references(self, result: ExtractionResult) -> Path:
        return write_json(self.index_dir / REFERENCES_FILE, {
            "updated_at": utc_timestamp(),
            "total_references": len(result.references),
            "type_stats": result.type_stats,
            "failed_law_ids": result.failed_law_ids,
            "references": [ref.to_dict() for ref in result.references],
        })

    def write_backlinks(self, backlinks: Dict[str, BacklinkEntry]) -> Path:
        return write_json(self.index_dir / BACKLINKS_FILE, {
            "updated_at": utc_timestamp(),
            "backlinks": {law_id: entry.to_dict() for law_id, entry in backlinks.items()},
        })

    def write_graph(self, nodes: List[GraphNode], edges: List[GraphEdge]) -> List[Path]:
        updated_at = utc_timestamp()
        return [
            write_json(self.graph_dir / NODES_FILE, {
                "updated_at": updated_at,
                "nodes": [node.to_dict() for node in nodes],
            }),
            write_json(self.graph_dir / EDGES_FILE, {
                "updated_at": updated_at,
                "edges": [edge.to_dict() for edge in edges],
            }),
        ]

    def write_reachability(self, result: ReachabilityResult) -> Path:
        return write_json(self.graph_dir / REACHABILITY_FILE, {
            "updated_at": utc_timestamp(),
            "mode": result.mode,
            "max_hops": result.max_hops,
            "failed_law_ids": result.failed_law_ids,
            "data": {law_id: entry.to_dict() for law_id, entry in result.entries.items()},
        })

    def write_important_paths(self, paths: List[Dict]) -> Path:
        return write_json(self.graph_dir / IMPORTANT_PATHS_FILE, {
            "updated_at": utc_timestamp(),
            "paths": paths,
        })


def load_references(path: Path) -> List[Reference]:
    """references.json を読み戻す（グラフ構築段で使用）"""
    data = load_json_document(path)
    if not isinstance(data, dict) or not isinstance(data.get("references"), list):
        raise ValueError(f"Not a references document: {path}")
    try:
        return [Reference.from_dict(entry) for entry in data["references"]]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Malformed reference in {path}: {e}") from e
