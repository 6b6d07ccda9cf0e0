from pathlib import Path
import json
import logging
from typing import Any, Dict, List, Optional

from ..models import AbbreviationEntry, LawRecord

logger = logging.getLogger(__name__)


def load_json_document(path: Path) -> Any:
    """
    Load a UTF-8 JSON input document.
    Raises ValueError (with the path) if the file is missing or malformed.
    """
    if not path.exists():
        raise ValueError(f"Input document not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON in {path}: {e}") from e


def load_law_index(path: Path) -> List[LawRecord]:
    """
    Load the law registry document.
    Accepts a bare JSON array or an object with a "laws" array.
    """
    data = load_json_document(path)
    if isinstance(data, dict):
        data = data.get("laws", [])
    if not isinstance(data, list):
        raise ValueError(f"Law index must be a list: {path}")
    return [LawRecord.from_dict(entry) for entry in data]


def load_abbreviation_table(path: Optional[Path]) -> List[AbbreviationEntry]:
    """
    Load the abbreviation table produced by the abbreviation-mining pass.

    Format: {abbreviation: {full_name, law_id}}, optionally nested under
    "abbreviation_map". A missing path yields an empty table.
    """
    if path is None or not path.exists():
        return []
    data = load_json_document(path)
    if isinstance(data, dict) and "abbreviation_map" in data:
        data = data["abbreviation_map"]
    if not isinstance(data, dict):
        raise ValueError(f"Abbreviation table must be an object: {path}")

    entries = []
    for abbrev, info in data.items():
        if not isinstance(info, dict):
            logger.debug(f"Skipping malformed abbreviation entry: {abbrev}")
            continue
        entries.append(AbbreviationEntry(
            abbreviation=abbrev,
            full_name=info.get("full_name") or "",
            law_id=info.get("law_id"),
        ))
    return entries


def discover_documents(corpus_dir: Path, suffix: str = ".txt") -> Dict[str, Path]:
    """
    Map law id (file stem) -> document path, searching corpus_dir recursively.
    The result is ordered by law id so chunking is reproducible.
    """
    if not corpus_dir.exists():
        logger.warning(f"Corpus directory not found: {corpus_dir}")
        return {}
    found = {}
    for path in corpus_dir.rglob(f"*{suffix}"):
        if path.is_file():
            found[path.stem] = path
    return {law_id: found[law_id] for law_id in sorted(found)}


def read_document_text(path: Path) -> Optional[str]:
    """
    Read one document of the corpus.
    Returns None (and logs) if the file cannot be read or decoded.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (IOError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping unreadable document {path}: {e}")
        return None


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
