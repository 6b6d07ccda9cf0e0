"""
Extraction Coordinator - コーパス全体の参照抽出を並列に実行してマージする
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..config import DEFAULT_BACKOFF_SEC, DEFAULT_RETRIES, PROGRESS_INTERVAL
from ..models import Reference
from ..utils.fs import read_document_text
from .extractor import ReferenceExtractor
from .parallel import ProgressReporter, chunk_evenly, default_worker_count, run_chunks
from .registry import LawRegistry

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    references: List[Reference]
    total_found: int
    # 再試行を使い切ったチャンクの法令（参照は不明）
    failed_law_ids: List[str] = field(default_factory=list)

    @property
    def type_stats(self) -> Dict[str, int]:
        """参照タイプ別の件数（多い順）"""
        counts = Counter(ref.ref_type.value for ref in self.references)
        return dict(counts.most_common())


def dedupe_references(references: Iterable[Reference]) -> List[Reference]:
    """
    (参照元, 参照先ID または法令名, 条) で重複除去（最初の1件を残す）

    出力に再適用しても結果は変わらない。
    """
    seen = set()
    unique = []
    for ref in references:
        key = ref.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(ref)
    return unique


def extract_chunk(
    documents: List[Tuple[str, str]],
    registry: LawRegistry,
    progress: Optional[ProgressReporter] = None,
) -> List[Reference]:
    """
    ワーカー本体: チャンク内の文書を順に処理する

    Args:
        documents: (法令ID, 本文ファイルパス) のリスト
        registry: 起動時に渡される読み取り専用のレジストリ
        progress: 進捗通知ハンドル

    Returns:
        チャンク内で見つかった全参照
    """
    extractor = ReferenceExtractor(registry)
    references: List[Reference] = []
    pending = 0

    for law_id, path in documents:
        from_law = registry.get(law_id)
        if from_law is not None:
            text = read_document_text(Path(path))
            if text is not None:
                references.extend(extractor.extract(text, from_law))

        pending += 1
        if progress is not None and pending >= PROGRESS_INTERVAL:
            progress.advance(pending)
            pending = 0

    if progress is not None and pending:
        progress.advance(pending)
    return references


class ExtractionCoordinator:
    def __init__(
        self,
        registry: LawRegistry,
        workers: Optional[int] = None,
        retries: int = DEFAULT_RETRIES,
        backoff: float = DEFAULT_BACKOFF_SEC,
        strict: bool = False,
    ):
        self.registry = registry
        self.workers = workers or default_worker_count()
        self.retries = retries
        self.backoff = backoff
        self.strict = strict

    def run(self, documents: Mapping[str, Path]) -> ExtractionResult:
        """
        全文書から参照を抽出し、全体で重複除去する

        Args:
            documents: 法令ID → 本文ファイルパス

        Returns:
            ExtractionResult
        """
        # レジストリに無い文書は参照元になり得ない
        items = [
            (law_id, str(path))
            for law_id, path in documents.items()
            if law_id in self.registry
        ]
        skipped = len(documents) - len(items)
        if skipped:
            logger.info(f"Skipping {skipped} document(s) not in the law index")

        chunks = chunk_evenly(items, self.workers)
        logger.info(f"Extracting references from {len(items)} documents in {len(chunks)} chunk(s)")

        results = run_chunks(
            extract_chunk,
            chunks,
            shared_args=(self.registry,),
            workers=self.workers,
            retries=self.retries,
            backoff=self.backoff,
            strict=self.strict,
            desc="Extracting references",
        )

        # チャンク順に連結するので、ワーカー数によらず同じ結果になる
        all_refs: List[Reference] = []
        failed_law_ids: List[str] = []
        for result in results:
            if result.failed:
                failed_law_ids.extend(law_id for law_id, _ in chunks[result.index])
                continue
            all_refs.extend(result.items)

        unique = dedupe_references(all_refs)
        return ExtractionResult(
            references=unique,
            total_found=len(all_refs),
            failed_law_ids=failed_law_ids,
        )
