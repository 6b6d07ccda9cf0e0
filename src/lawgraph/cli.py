import logging
from pathlib import Path
from typing import Optional

import typer

from .config import (
    ABBREVIATIONS_FILE,
    CORPUS_SUFFIX,
    DEFAULT_BACKOFF_SEC,
    DEFAULT_MAX_HOPS,
    DEFAULT_RETRIES,
    DEFAULT_TOP_K,
    INDEX_DIR,
    LAWS_FILE,
    TEXT_DIR,
)
from .core.parallel import WorkerFailedError

app = typer.Typer(add_completion=False)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    """
    Build the citation graph between laws and its derived indexes.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _abort(message: str):
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


@app.command()
def extract(
    laws: Path = typer.Option(LAWS_FILE, help="Path to laws.json"),
    corpus: Path = typer.Option(TEXT_DIR, help="Directory of <law_id>.txt documents"),
    abbreviations: Optional[Path] = typer.Option(ABBREVIATIONS_FILE, help="Path to abbreviations.json"),
    out: Path = typer.Option(INDEX_DIR, help="Output index directory"),
    workers: Optional[int] = typer.Option(None, min=1, help="Worker processes (default: CPUs - 1)"),
    retries: int = typer.Option(DEFAULT_RETRIES, min=0, help="Retries for a failed worker chunk"),
    backoff: float = typer.Option(DEFAULT_BACKOFF_SEC, min=0.0, help="Base retry delay in seconds"),
    strict: bool = typer.Option(False, help="Abort the run when a chunk still fails after retries"),
    suffix: str = typer.Option(CORPUS_SUFFIX, help="Document file suffix"),
):
    """
    Extract references from the corpus (references.json, backlinks.json).
    """
    from .core.pipeline import run_extraction

    try:
        run_extraction(
            laws, corpus, out,
            abbreviations_path=abbreviations,
            workers=workers,
            retries=retries,
            backoff=backoff,
            strict=strict,
            suffix=suffix,
        )
    except (ValueError, WorkerFailedError) as e:
        _abort(str(e))


@app.command()
def build_graph(
    laws: Path = typer.Option(LAWS_FILE, help="Path to laws.json"),
    index: Path = typer.Option(INDEX_DIR, help="Index directory containing references.json"),
    abbreviations: Optional[Path] = typer.Option(ABBREVIATIONS_FILE, help="Path to abbreviations.json"),
    top_k: int = typer.Option(DEFAULT_TOP_K, min=1, help="Number of landmark laws (by in-degree)"),
    max_hops: int = typer.Option(DEFAULT_MAX_HOPS, min=0, help="BFS hop cap"),
    exhaustive: bool = typer.Option(False, help="Compute reachability for every active law"),
    paths: Optional[Path] = typer.Option(None, help="YAML file of landmark path pairs"),
    workers: Optional[int] = typer.Option(None, min=1, help="Worker processes (default: CPUs - 1)"),
    retries: int = typer.Option(DEFAULT_RETRIES, min=0, help="Retries for a failed worker chunk"),
    backoff: float = typer.Option(DEFAULT_BACKOFF_SEC, min=0.0, help="Base retry delay in seconds"),
    strict: bool = typer.Option(False, help="Abort the run when a chunk still fails after retries"),
):
    """
    Build nodes/edges, reachability and landmark paths from references.json.
    """
    from .core.pipeline import run_graph

    try:
        run_graph(
            laws, index,
            abbreviations_path=abbreviations,
            top_k=top_k,
            max_hops=max_hops,
            exhaustive=exhaustive,
            paths_file=paths,
            workers=workers,
            retries=retries,
            backoff=backoff,
            strict=strict,
        )
    except (ValueError, WorkerFailedError) as e:
        _abort(str(e))


@app.command()
def run_all(
    laws: Path = typer.Option(LAWS_FILE, help="Path to laws.json"),
    corpus: Path = typer.Option(TEXT_DIR, help="Directory of <law_id>.txt documents"),
    abbreviations: Optional[Path] = typer.Option(ABBREVIATIONS_FILE, help="Path to abbreviations.json"),
    out: Path = typer.Option(INDEX_DIR, help="Output index directory"),
    top_k: int = typer.Option(DEFAULT_TOP_K, min=1, help="Number of landmark laws (by in-degree)"),
    max_hops: int = typer.Option(DEFAULT_MAX_HOPS, min=0, help="BFS hop cap"),
    exhaustive: bool = typer.Option(False, help="Compute reachability for every active law"),
    paths: Optional[Path] = typer.Option(None, help="YAML file of landmark path pairs"),
    workers: Optional[int] = typer.Option(None, min=1, help="Worker processes (default: CPUs - 1)"),
    strict: bool = typer.Option(False, help="Abort the run when a chunk still fails after retries"),
):
    """
    Run extraction and graph building in one go.
    """
    from .core.pipeline import run_extraction, run_graph

    try:
        run_extraction(
            laws, corpus, out,
            abbreviations_path=abbreviations,
            workers=workers,
            strict=strict,
        )
        run_graph(
            laws, out,
            abbreviations_path=abbreviations,
            top_k=top_k,
            max_hops=max_hops,
            exhaustive=exhaustive,
            paths_file=paths,
            workers=workers,
            strict=strict,
        )
    except (ValueError, WorkerFailedError) as e:
        _abort(str(e))


if __name__ == "__main__":
    app()
