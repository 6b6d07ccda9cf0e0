"""
並列チャンク実行

参照抽出と到達可能性計算で共通の分割方式:
- 作業リストを連続したチャンクに分割し、1ワーカーに1チャンクを割り当てる
- 共有する索引（レジストリ・隣接リスト）は起動時に1回だけ渡す読み取り専用の値
- ワーカー同士は通信しない（進捗通知のみ）
- 全ワーカーの完了を待ってから、チャンク順に結果を返す

失敗したチャンクは新しいプールで指数バックオフ付きで再実行する。
再試行を使い切った場合、strict なら WorkerFailedError、そうでなければ
そのチャンクを failed として返す。
"""
import logging
import math
import multiprocessing
import os
import queue
import time
from concurrent.futures import ProcessPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from ..config import DEFAULT_BACKOFF_SEC, DEFAULT_RETRIES, env_worker_count

logger = logging.getLogger(__name__)

# 進捗キューを確認する間隔（秒）
POLL_INTERVAL_SEC = 0.2


class WorkerFailedError(RuntimeError):
    """再試行を使い切ってもチャンクが完了しなかった"""

    def __init__(self, index: int, error: str):
        super().__init__(f"Worker for chunk {index} failed: {error}")
        self.index = index
        self.error = error


@dataclass
class ChunkResult:
    """1チャンク（= 1ワーカー）の結果"""
    index: int
    items: Any = None
    failed: bool = False
    error: Optional[str] = None


class ProgressReporter:
    """
    ワーカーが進捗を通知するためのハンドル

    プロセス並列時は Manager のキューに (チャンク番号, 件数) を送る。
    同一プロセス実行時はコールバックを直接呼ぶ。
    """

    def __init__(self, index: int, progress_queue=None, callback: Optional[Callable[[int, int], None]] = None):
        self.index = index
        self._queue = progress_queue
        self._callback = callback

    def advance(self, count: int = 1) -> None:
        if self._callback is not None:
            self._callback(self.index, count)
        elif self._queue is not None:
            self._queue.put((self.index, count))


def default_worker_count() -> int:
    """利用可能な CPU 数 - 1（調整用に1つ残す）。LAWGRAPH_WORKERS で上書き可"""
    configured = env_worker_count()
    if configured:
        return configured
    return max(1, (os.cpu_count() or 2) - 1)


def chunk_evenly(items: Sequence[Any], num_chunks: int) -> List[List[Any]]:
    """
    連続したチャンクに分割する（各チャンク ceil(len / num_chunks) 件）

    Examples:
        >>> chunk_evenly([1, 2, 3, 4, 5], 2)
        [[1, 2, 3], [4, 5]]
    """
    if not items:
        return []
    num_chunks = max(1, num_chunks)
    size = math.ceil(len(items) / num_chunks)
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def _drain(progress_queue, on_progress: Callable[[int, int], None]) -> None:
    while True:
        try:
            index, count = progress_queue.get_nowait()
        except queue.Empty:
            return
        on_progress(index, count)


def _run_in_process(
    task: Callable,
    chunks: Sequence[Sequence[Any]],
    indices: List[int],
    shared_args: Tuple,
    on_progress: Callable[[int, int], None],
) -> Tuple[Dict[int, Any], Dict[int, str]]:
    outcomes: Dict[int, Any] = {}
    errors: Dict[int, str] = {}
    for index in indices:
        reporter = ProgressReporter(index, callback=on_progress)
        try:
            outcomes[index] = task(chunks[index], *shared_args, progress=reporter)
        except Exception as e:
            logger.error(f"Chunk {index} failed: {e!r}")
            errors[index] = repr(e)
    return outcomes, errors


def _run_in_pool(
    task: Callable,
    chunks: Sequence[Sequence[Any]],
    indices: List[int],
    shared_args: Tuple,
    workers: int,
    on_progress: Callable[[int, int], None],
) -> Tuple[Dict[int, Any], Dict[int, str]]:
    outcomes: Dict[int, Any] = {}
    errors: Dict[int, str] = {}

    with multiprocessing.Manager() as manager:
        progress_queue = manager.Queue()
        with ProcessPoolExecutor(max_workers=min(workers, len(indices))) as executor:
            futures = {
                executor.submit(
                    task,
                    chunks[index],
                    *shared_args,
                    progress=ProgressReporter(index, progress_queue=progress_queue),
                ): index
                for index in indices
            }

            # 全ワーカーの完了待ち（待機中に進捗を反映）
            not_done = set(futures)
            while not_done:
                _, not_done = wait(not_done, timeout=POLL_INTERVAL_SEC)
                _drain(progress_queue, on_progress)
        _drain(progress_queue, on_progress)

    for future, index in futures.items():
        try:
            outcomes[index] = future.result()
        except Exception as e:
            # BrokenProcessPool（ワーカーの異常終了）もここに来る
            logger.error(f"Chunk {index} failed: {e!r}")
            errors[index] = repr(e)
    return outcomes, errors


def run_chunks(
    task: Callable,
    chunks: Sequence[Sequence[Any]],
    shared_args: Tuple = (),
    workers: Optional[int] = None,
    retries: int = DEFAULT_RETRIES,
    backoff: float = DEFAULT_BACKOFF_SEC,
    strict: bool = False,
    desc: str = "Processing",
) -> List[ChunkResult]:
    """
    チャンクごとに task(chunk, *shared_args, progress=ProgressReporter) を実行する

    Args:
        task: モジュールレベル関数（プロセス間で pickle できること）
        chunks: chunk_evenly で分割した作業リスト
        shared_args: 全ワーカーに渡す読み取り専用の引数
        workers: プロセス数。1 以下なら同一プロセスで順に実行
        retries: 失敗チャンクの再試行回数
        backoff: 再試行待ちの基準秒数（backoff * 2 ** (n - 1)）
        strict: 再試行を使い切ったら WorkerFailedError を送出する
        desc: 進捗バーの表示名

    Returns:
        チャンク順に並んだ ChunkResult のリスト
    """
    if workers is None:
        workers = default_worker_count()

    outcomes: Dict[int, Any] = {}
    errors: Dict[int, str] = {}
    pending = list(range(len(chunks)))
    advanced = [0] * len(chunks)

    with tqdm(total=sum(len(c) for c in chunks), desc=desc) as bar:

        def on_progress(index: int, count: int) -> None:
            advanced[index] += count
            bar.update(count)

        for attempt in range(retries + 1):
            if not pending:
                break
            if attempt > 0:
                delay = backoff * (2 ** (attempt - 1))
                logger.warning(
                    f"Retrying {len(pending)} chunk(s) in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{retries + 1})"
                )
                time.sleep(delay)
                # 失敗したチャンクの進捗を巻き戻す
                for index in pending:
                    bar.update(-advanced[index])
                    advanced[index] = 0

            if workers <= 1:
                done, errors = _run_in_process(task, chunks, pending, shared_args, on_progress)
            else:
                done, errors = _run_in_pool(task, chunks, pending, shared_args, workers, on_progress)
            outcomes.update(done)
            pending = sorted(errors)

    results: List[ChunkResult] = []
    for index in range(len(chunks)):
        if index in outcomes:
            results.append(ChunkResult(index=index, items=outcomes[index]))
            continue
        if strict:
            raise WorkerFailedError(index, errors[index])
        logger.error(f"Chunk {index} gave up after {retries + 1} attempt(s): {errors[index]}")
        results.append(ChunkResult(index=index, failed=True, error=errors[index]))
    return results
