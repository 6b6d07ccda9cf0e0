import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if exists
load_dotenv()

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = Path(os.getenv("LAWGRAPH_DATA_DIR", str(PROJECT_ROOT / "data")))
INDEX_DIR = DATA_DIR / "index"
TEXT_DIR = DATA_DIR / "text"

# Input documents
LAWS_FILE = INDEX_DIR / "laws.json"
ABBREVIATIONS_FILE = INDEX_DIR / "abbreviations.json"
CORPUS_SUFFIX = ".txt"

# Reference extraction
MIN_NAME_LENGTH = 2
LOOKAHEAD_WINDOW = 50
PROGRESS_INTERVAL = 100

# Reachability
DEFAULT_TOP_K = 100
DEFAULT_MAX_HOPS = 50

# Worker retry policy
DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_SEC = 1.0


def env_worker_count() -> Optional[int]:
    """Worker count from LAWGRAPH_WORKERS, or None when unset/invalid."""
    value = os.getenv("LAWGRAPH_WORKERS")
    if not value:
        return None
    try:
        count = int(value)
    except ValueError:
        return None
    return count if count > 0 else None
