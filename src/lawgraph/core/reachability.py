"""
Reachability Engine - ホップ数上限付き BFS による到達可能性の事前計算

全ペアの到達可能性はコーパス規模では計算できないため、2つのモードを持つ:
- landmark（既定）: 被参照数上位 K 件の法令のみ
- exhaustive: 参照関係のある全法令

各法令について順方向（この法令から辿れる法令）と逆方向（この法令へ辿り着く法令）の
BFS を行う。法令ごとの BFS は独立しているのでワーカー間の調整は不要。
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from ..config import DEFAULT_BACKOFF_SEC, DEFAULT_MAX_HOPS, DEFAULT_RETRIES, DEFAULT_TOP_K
from ..models import GraphNode, ReachabilityEntry
from .graph import CitationGraph
from .parallel import ProgressReporter, chunk_evenly, default_worker_count, run_chunks

logger = logging.getLogger(__name__)

LANDMARK_MODE = "landmark"
EXHAUSTIVE_MODE = "exhaustive"


def bfs_distances(
    start_id: str,
    adjacency: Mapping[str, Sequence[str]],
    max_hops: int = DEFAULT_MAX_HOPS,
) -> Dict[str, int]:
    """
    start_id からの最短ホップ数

    FIFO キューと訪問済み集合により、各ノードは最初に発見されたホップ数で記録される。
    ホップ数が max_hops に達したノードはそれ以上展開しない。start_id 自身は含めない。

    Returns:
        {法令ID: ホップ数}
    """
    distances: Dict[str, int] = {}
    visited = {start_id}
    queue = deque([(start_id, 0)])

    while queue:
        node_id, dist = queue.popleft()
        if dist >= max_hops:
            continue
        for neighbor_id in adjacency.get(node_id, ()):
            if neighbor_id in visited:
                continue
            visited.add(neighbor_id)
            distances[neighbor_id] = dist + 1
            queue.append((neighbor_id, dist + 1))

    return distances


def select_important(nodes: Sequence[GraphNode], top_k: int = DEFAULT_TOP_K) -> List[GraphNode]:
    """
    被参照数（in_degree）上位 top_k 件

    同数の場合は元のリスト順（sorted は安定ソート）。
    """
    return sorted(nodes, key=lambda n: n.in_degree, reverse=True)[:top_k]


def bfs_chunk(
    law_ids: List[str],
    forward: Mapping[str, Sequence[str]],
    reverse: Mapping[str, Sequence[str]],
    max_hops: int,
    progress: Optional[ProgressReporter] = None,
) -> Dict[str, Dict[str, Dict[str, int]]]:
    """
    ワーカー本体: チャンク内の各法令について順方向・逆方向 BFS を行う

    Returns:
        {法令ID: {"reachable_from": {...}, "reachable_to": {...}}}
    """
    results = {}
    for law_id in law_ids:
        results[law_id] = {
            "reachable_from": bfs_distances(law_id, forward, max_hops),
            "reachable_to": bfs_distances(law_id, reverse, max_hops),
        }
        if progress is not None:
            progress.advance()
    return results


@dataclass
class ReachabilityResult:
    mode: str
    max_hops: int
    entries: Dict[str, ReachabilityEntry]
    failed_law_ids: List[str] = field(default_factory=list)


class ReachabilityEngine:
    def __init__(
        self,
        graph: CitationGraph,
        max_hops: int = DEFAULT_MAX_HOPS,
        top_k: int = DEFAULT_TOP_K,
        exhaustive: bool = False,
        workers: Optional[int] = None,
        retries: int = DEFAULT_RETRIES,
        backoff: float = DEFAULT_BACKOFF_SEC,
        strict: bool = False,
    ):
        if max_hops < 0:
            raise ValueError(f"max_hops must be non-negative: {max_hops}")
        self.graph = graph
        self.max_hops = max_hops
        self.top_k = top_k
        self.exhaustive = exhaustive
        self.workers = workers or default_worker_count()
        self.retries = retries
        self.backoff = backoff
        self.strict = strict

    @property
    def mode(self) -> str:
        return EXHAUSTIVE_MODE if self.exhaustive else LANDMARK_MODE

    def select_sources(self) -> List[GraphNode]:
        active = self.graph.active_nodes()
        if self.exhaustive:
            return active
        return select_important(active, self.top_k)

    def compute(self) -> ReachabilityResult:
        sources = self.select_sources()
        law_ids = [node.id for node in sources]
        logger.info(f"Computing reachability for {len(law_ids)} laws ({self.mode} mode, max {self.max_hops} hops)")

        chunks = chunk_evenly(law_ids, self.workers)
        results = run_chunks(
            bfs_chunk,
            chunks,
            shared_args=(self.graph.forward_lists(), self.graph.reverse_lists(), self.max_hops),
            workers=self.workers,
            retries=self.retries,
            backoff=self.backoff,
            strict=self.strict,
            desc="Computing reachability",
        )

        # 法令IDをキーとした単純な和集合でマージ
        merged: Dict[str, Dict[str, Dict[str, int]]] = {}
        failed_law_ids: List[str] = []
        for result in results:
            if result.failed:
                failed_law_ids.extend(chunks[result.index])
                continue
            merged.update(result.items)

        entries: Dict[str, ReachabilityEntry] = {}
        for node in sources:
            if node.id not in merged:
                continue
            entries[node.id] = ReachabilityEntry(
                law_id=node.id,
                title=node.title,
                reachable_from=merged[node.id]["reachable_from"],
                reachable_to=merged[node.id]["reachable_to"],
            )

        return ReachabilityResult(
            mode=self.mode,
            max_hops=self.max_hops,
            entries=entries,
            failed_law_ids=failed_law_ids,
        )
