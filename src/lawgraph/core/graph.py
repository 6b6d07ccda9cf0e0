"""
Citation Graph Builder - 重複除去済みの参照から隣接リストと次数を作る
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Set

from ..models import GraphEdge, GraphNode, Reference
from .registry import LawRegistry

logger = logging.getLogger(__name__)


class CitationGraph:
    """
    法令参照グラフ

    - outgoing[A][B] = A が B を参照している件数（条単位で重複除去した参照の数）
    - incoming[B] = B を参照している法令の集合
    """

    def __init__(self, registry: LawRegistry):
        self.registry = registry
        self.outgoing: Dict[str, Dict[str, int]] = {}
        self.incoming: Dict[str, Set[str]] = {}

    @classmethod
    def build(cls, references: Iterable[Reference], registry: LawRegistry) -> "CitationGraph":
        graph = cls(registry)
        outgoing: Dict[str, Dict[str, int]] = defaultdict(dict)
        incoming: Dict[str, Set[str]] = defaultdict(set)

        for ref in references:
            if not ref.from_law_id or not ref.to_law_id:
                continue
            targets = outgoing[ref.from_law_id]
            targets[ref.to_law_id] = targets.get(ref.to_law_id, 0) + 1
            incoming[ref.to_law_id].add(ref.from_law_id)

        graph.outgoing = dict(outgoing)
        graph.incoming = dict(incoming)
        return graph

    # ------------------------------------------------------------------
    # 次数・ノード・エッジ
    # ------------------------------------------------------------------

    def out_degree(self, law_id: str) -> int:
        return len(self.outgoing.get(law_id, {}))

    def in_degree(self, law_id: str) -> int:
        return len(self.incoming.get(law_id, ()))

    def nodes(self) -> List[GraphNode]:
        """レジストリの全法令のノード（レジストリ順）"""
        return [
            GraphNode(
                id=law.id,
                title=law.title,
                category=law.category,
                out_degree=self.out_degree(law.id),
                in_degree=self.in_degree(law.id),
            )
            for law in self.registry
        ]

    def active_nodes(self) -> List[GraphNode]:
        """参照関係が1件以上ある法令のみ"""
        return [n for n in self.nodes() if n.out_degree > 0 or n.in_degree > 0]

    def edges(self) -> List[GraphEdge]:
        return [
            GraphEdge(source=from_id, target=to_id, count=count)
            for from_id, targets in self.outgoing.items()
            for to_id, count in targets.items()
        ]

    # ------------------------------------------------------------------
    # ワーカー配布用のシンプルな形式
    # ------------------------------------------------------------------

    def forward_lists(self) -> Dict[str, List[str]]:
        return {from_id: list(targets) for from_id, targets in self.outgoing.items()}

    def reverse_lists(self) -> Dict[str, List[str]]:
        return {to_id: sorted(sources) for to_id, sources in self.incoming.items()}
