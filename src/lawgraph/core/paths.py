"""
Path Finder - 主要法令間の最短参照経路

「日本国憲法 → 民法 → 会社法」のような立法上の系譜を説明するための経路を求める。
"""
import logging
from collections import deque
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .graph import CitationGraph
from .registry import LawRegistry

logger = logging.getLogger(__name__)

# 起点となる法令名 → 経路を求める法令名
LANDMARK_PATHS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('日本国憲法', ('民法', '刑法', '商法', '行政手続法', '会社法', '借地借家法', '消費者契約法')),
    ('民法', ('会社法', '借地借家法', '消費者契約法', '金融商品取引法')),
)


def find_path(
    adjacency: Mapping[str, Mapping[str, int]],
    from_id: str,
    to_id: str,
) -> Optional[List[str]]:
    """
    順方向の参照を辿る最短経路（BFS、キュー要素が経路を保持する）

    Returns:
        法令IDの列。from_id == to_id なら [from_id]、到達不能なら None
    """
    if from_id == to_id:
        return [from_id]

    queue = deque([(from_id, [from_id])])
    visited = {from_id}

    while queue:
        node_id, path = queue.popleft()
        for neighbor_id in adjacency.get(node_id, ()):
            if neighbor_id == to_id:
                return path + [neighbor_id]
            if neighbor_id not in visited:
                visited.add(neighbor_id)
                queue.append((neighbor_id, path + [neighbor_id]))

    return None


def load_landmark_pairs(path: Optional[Path]) -> List[Tuple[str, List[str]]]:
    """
    経路定義を YAML から読み込む

    形式:
        paths:
          - from: 日本国憲法
            to: [民法, 刑法]

    ファイルが無ければ LANDMARK_PATHS を返す。
    """
    if path is None or not path.exists():
        return [(source, list(targets)) for source, targets in LANDMARK_PATHS]
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("paths", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"Landmark path file must contain a list: {path}")

    pairs = []
    for entry in entries:
        if not isinstance(entry, dict) or "from" not in entry:
            raise ValueError(f"Invalid landmark path entry in {path}: {entry!r}")
        targets = entry.get("to") or []
        if isinstance(targets, str):
            targets = [targets]
        pairs.append((str(entry["from"]), [str(t) for t in targets]))
    return pairs


def compute_important_paths(
    graph: CitationGraph,
    registry: LawRegistry,
    pairs: Sequence[Tuple[str, Sequence[str]]],
) -> List[Dict]:
    """
    主要法令間の経路を計算する

    レジストリに無い法令名・自分自身への経路・到達不能な組は出力しない。

    Returns:
        [{"from": 法令名, "to": 法令名, "path": [法令名...], "hops": int}]
    """
    important_paths = []
    for source_title, target_titles in pairs:
        source = registry.by_title(source_title)
        if source is None:
            logger.debug(f"Landmark source not in registry: {source_title}")
            continue
        for target_title in target_titles:
            target = registry.by_title(target_title)
            if target is None or target.id == source.id:
                continue
            path = find_path(graph.outgoing, source.id, target.id)
            if path is None:
                continue
            important_paths.append({
                "from": source_title,
                "to": target_title,
                "path": [
                    registry.get(law_id).title if law_id in registry else law_id
                    for law_id in path
                ],
                "hops": len(path) - 1,
            })
    return important_paths
