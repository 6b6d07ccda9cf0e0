"""
Backlink Aggregator - 被参照グラフ（どの法令から何回参照されているか）
"""
from collections import defaultdict
from typing import Dict, Iterable, List

from ..models import BacklinkEntry, Reference, Referrer
from .registry import LawRegistry


def build_backlinks(references: Iterable[Reference], registry: LawRegistry) -> Dict[str, BacklinkEntry]:
    """
    全法令について被参照リストを作る

    参照が無い法令も空リストで含める（出力スキーマを安定させるため）。
    参照元は件数の多い順、同数なら法令ID順。
    """
    backlinks: Dict[str, BacklinkEntry] = {
        law.id: BacklinkEntry(law_id=law.id, title=law.title)
        for law in registry
    }

    count_map: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for ref in references:
        if not ref.to_law_id:
            continue
        count_map[ref.to_law_id][ref.from_law_id] += 1

    for to_law_id, from_counts in count_map.items():
        entry = backlinks.get(to_law_id)
        if entry is None:
            continue
        referrers = []
        for from_law_id, count in from_counts.items():
            from_law = registry.get(from_law_id)
            if from_law is None:
                continue
            referrers.append(Referrer(law_id=from_law_id, title=from_law.title, count=count))
        referrers.sort(key=lambda r: (-r.count, r.law_id))
        entry.referenced_by = referrers

    return backlinks


def top_referenced(backlinks: Dict[str, BacklinkEntry], limit: int = 10) -> List[BacklinkEntry]:
    """参照元の法令数が多い順"""
    referenced = [b for b in backlinks.values() if b.referenced_by]
    referenced.sort(key=lambda b: len(b.referenced_by), reverse=True)
    return referenced[:limit]
