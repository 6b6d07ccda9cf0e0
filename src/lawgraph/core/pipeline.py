"""
バッチ実行の組み立て

extract: レジストリ構築 → 参照抽出 → 被参照グラフ → references.json / backlinks.json
graph:   references.json → グラフ構築 → 到達可能性・主要経路 → graph/*.json

実行ごとに全件を再計算する（差分更新は行わない）。
"""
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..config import (
    CORPUS_SUFFIX,
    DEFAULT_BACKOFF_SEC,
    DEFAULT_MAX_HOPS,
    DEFAULT_RETRIES,
    DEFAULT_TOP_K,
)
from ..models import BacklinkEntry
from ..utils.fs import discover_documents, load_abbreviation_table, load_law_index
from .artifacts import REFERENCES_FILE, ArtifactWriter, load_references
from .backlinks import build_backlinks, top_referenced
from .coordinator import ExtractionCoordinator, ExtractionResult
from .graph import CitationGraph
from .paths import compute_important_paths, load_landmark_pairs
from .reachability import ReachabilityEngine, ReachabilityResult, select_important
from .registry import LawRegistry

logger = logging.getLogger(__name__)


@dataclass
class ExtractionSummary:
    extraction: ExtractionResult
    backlinks: Dict[str, BacklinkEntry]
    outputs: List[Path]


@dataclass
class GraphSummary:
    graph: CitationGraph
    reachability: ReachabilityResult
    important_paths: List[Dict]
    outputs: List[Path]


def load_registry(laws_path: Path, abbreviations_path: Optional[Path] = None) -> LawRegistry:
    laws = load_law_index(laws_path)
    abbreviations = load_abbreviation_table(abbreviations_path)
    registry = LawRegistry.build(laws, abbreviations)
    print(f"Law index: {len(registry)} laws, {registry.abbreviation_count} abbreviations.")
    return registry


def run_extraction(
    laws_path: Path,
    corpus_dir: Path,
    index_dir: Path,
    abbreviations_path: Optional[Path] = None,
    workers: Optional[int] = None,
    retries: int = DEFAULT_RETRIES,
    backoff: float = DEFAULT_BACKOFF_SEC,
    strict: bool = False,
    suffix: str = CORPUS_SUFFIX,
) -> ExtractionSummary:
    registry = load_registry(laws_path, abbreviations_path)

    documents = discover_documents(corpus_dir, suffix)
    print(f"Found {len(documents)} documents in {corpus_dir}.")

    coordinator = ExtractionCoordinator(
        registry, workers=workers, retries=retries, backoff=backoff, strict=strict,
    )
    print(f"Extracting references with {coordinator.workers} worker(s)...")
    started = time.time()
    result = coordinator.run(documents)
    print(f"Extraction finished in {time.time() - started:.1f}s.")

    print(f"References found: {result.total_found}, after dedupe: {len(result.references)}")
    for ref_type, count in result.type_stats.items():
        print(f"  - {ref_type}: {count}")
    if result.failed_law_ids:
        print(f"WARNING: references unknown for {len(result.failed_law_ids)} laws (worker failures).")

    backlinks = build_backlinks(result.references, registry)

    writer = ArtifactWriter(index_dir)
    outputs = [writer.write_references(result), writer.write_backlinks(backlinks)]

    print("Most referenced laws:")
    for entry in top_referenced(backlinks, 10):
        print(f"  {entry.title}: {len(entry.referenced_by)} laws, {entry.total_count} references")

    return ExtractionSummary(extraction=result, backlinks=backlinks, outputs=outputs)


def run_graph(
    laws_path: Path,
    index_dir: Path,
    abbreviations_path: Optional[Path] = None,
    top_k: int = DEFAULT_TOP_K,
    max_hops: int = DEFAULT_MAX_HOPS,
    exhaustive: bool = False,
    paths_file: Optional[Path] = None,
    workers: Optional[int] = None,
    retries: int = DEFAULT_RETRIES,
    backoff: float = DEFAULT_BACKOFF_SEC,
    strict: bool = False,
) -> GraphSummary:
    registry = load_registry(laws_path, abbreviations_path)
    references = load_references(index_dir / REFERENCES_FILE)
    print(f"Loaded {len(references)} references.")

    graph = CitationGraph.build(references, registry)
    nodes = graph.active_nodes()
    edges = graph.edges()
    print(f"Graph: {len(nodes)} active nodes, {len(edges)} edges.")

    engine = ReachabilityEngine(
        graph,
        max_hops=max_hops,
        top_k=top_k,
        exhaustive=exhaustive,
        workers=workers,
        retries=retries,
        backoff=backoff,
        strict=strict,
    )
    started = time.time()
    reachability = engine.compute()
    print(f"Reachability ({reachability.mode}) for {len(reachability.entries)} laws in {time.time() - started:.1f}s.")
    if reachability.failed_law_ids:
        print(f"WARNING: reachability unknown for {len(reachability.failed_law_ids)} laws (worker failures).")

    pairs = load_landmark_pairs(paths_file)
    important_paths = compute_important_paths(graph, registry, pairs)

    # 全集計が終わってから graph/ をまとめて書き出す
    writer = ArtifactWriter(index_dir)
    outputs = writer.write_graph(nodes, edges)
    outputs.append(writer.write_reachability(reachability))
    outputs.append(writer.write_important_paths(important_paths))
    for entry in important_paths:
        print(f"  {' -> '.join(entry['path'])} ({entry['hops']} hops)")

    print("Most referenced laws:")
    for node in select_important(nodes, 10):
        print(f"  {node.title}: referenced by {node.in_degree} laws")

    return GraphSummary(
        graph=graph,
        reachability=reachability,
        important_paths=important_paths,
        outputs=outputs,
    )
