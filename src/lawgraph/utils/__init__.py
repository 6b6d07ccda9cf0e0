"""
lawgraph ユーティリティモジュール
"""

from .patterns import (
    CitationToken,
    TokenKind,
    format_article,
    is_preceded_by_cjk,
    match_lookahead,
    iter_citation_tokens,
)
from .fs import (
    load_json_document,
    load_law_index,
    load_abbreviation_table,
    discover_documents,
    read_document_text,
    ensure_dir,
)

__all__ = [
    # patterns
    'CitationToken',
    'TokenKind',
    'format_article',
    'is_preceded_by_cjk',
    'match_lookahead',
    'iter_citation_tokens',
    # fs
    'load_json_document',
    'load_law_index',
    'load_abbreviation_table',
    'discover_documents',
    'read_document_text',
    'ensure_dir',
]
