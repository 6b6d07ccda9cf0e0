"""
引用文法の正規表現パターン定義

法令本文中の引用を構成するトークン（法令名、元号付き法令番号、条・項・号の序数）を
一元管理する薄いユーティリティ。

設計方針:
- パターンとシンプルなヘルパ関数のみを提供
- ビジネスロジック（法令の解決・重複除去）は持たない
- 走査状態を共有しない（iter_citation_tokens は呼び出しごとに独立）
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

# ==============================================================================
# 文法トークン
# ==============================================================================

# 条・項・号の序数（漢数字・全角/半角数字）
ORDINAL = r'[一二三四五六七八九十百千〇０-９0-9]+'

# 元号付き法令番号: 明治二十九年法律第八十九号
ERA_LAW_NUMBER = r'(?:明治|大正|昭和|平成|令和)[^（）\n]{3,50}?号'

# 法令名を構成する文字（漢字・かな・英字・中黒）
LAW_NAME_CHARS = r'[一-龠々〆ぁ-んァ-ヶーａ-ｚＡ-Ｚa-zA-Z・]'

# 法令名: 末尾が 法/令/規則/条例 の文字列（最短一致でバックトラックを抑制）
LAW_NAME = LAW_NAME_CHARS + r'{1,50}?(?:法|令|規則|条例)'

# 条文参照: 第N条[のM][第N項][第N号]
ARTICLE_REF = (
    rf'第(?P<article>{ORDINAL})条'
    rf'(?:の(?P<branch>{ORDINAL}))?'
    rf'(?:第(?P<paragraph>{ORDINAL})項)?'
    rf'(?:第(?P<item>{ORDINAL})号)?'
)

# 改正法の題名: ○○の一部を改正する法律
AMENDMENT_SUFFIX = r'の一部を改正する(?P<amend_kind>法律|政令|省令|規則)'

# ==============================================================================
# コンパイル済みパターン
# ==============================================================================

# 既知法令名の直後（先読み窓）: 任意の（法令番号）に続く任意の条文参照
LOOKAHEAD_PATTERN = re.compile(
    rf'(?:（(?P<law_num>{ERA_LAW_NUMBER})）)?(?:{ARTICLE_REF})?'
)

# 未知法令フォールバック用の統合トークン
#   法令名（法令番号） | 法令名第N条… | 法令名の一部を改正する法律
CITATION_TOKEN_PATTERN = re.compile(
    rf'(?P<name>{LAW_NAME})'
    rf'(?:（(?P<law_num>{ERA_LAW_NUMBER})）|{ARTICLE_REF}|{AMENDMENT_SUFFIX})'
)

# 部分一致判定用: 法令名の直前にこれらの文字があれば、より長い語の一部とみなす
CJK_OR_KANA_PATTERN = re.compile(r'[一-龠々〆ぁ-んァ-ヶー]')


class TokenKind(str, Enum):
    """統合トークンの種類"""
    LAW_NUM = "law_num"        # 法令名（法令番号）
    ARTICLE = "article"        # 法令名第N条
    AMENDMENT = "amendment"    # 法令名の一部を改正する法律


@dataclass(frozen=True)
class CitationToken:
    kind: TokenKind
    name: str
    start: int
    law_num: Optional[str] = None
    article: Optional[str] = None
    paragraph: Optional[str] = None
    item: Optional[str] = None


def format_article(number: str, branch: Optional[str] = None) -> str:
    """
    条番号を表記に戻す

    Examples:
        >>> format_article('三')
        '第三条'
        >>> format_article('三', '二')
        '第三条の二'
    """
    article = f'第{number}条'
    if branch:
        article += f'の{branch}'
    return article


def _article_parts(match: re.Match) -> tuple:
    """マッチから (article, paragraph, item) を取り出す"""
    if not match.group('article'):
        return (None, None, None)
    article = format_article(match.group('article'), match.group('branch'))
    paragraph = f"第{match.group('paragraph')}項" if match.group('paragraph') else None
    item = f"第{match.group('item')}号" if match.group('item') else None
    return (article, paragraph, item)


def is_preceded_by_cjk(text: str, position: int) -> bool:
    """
    position の直前の文字が漢字・かなかどうか

    「改正前民法」中の「民法」のように、より長い語の部分文字列として
    出現している場合に True を返す。
    """
    if position <= 0:
        return False
    return CJK_OR_KANA_PATTERN.match(text[position - 1]) is not None


def match_lookahead(text: str, end: int, window: int) -> Optional[dict]:
    """
    法令名の直後 window 文字以内にある（法令番号）と条文参照を取り出す

    Returns:
        law_num, article, paragraph, item のキーを持つ dict、
        どちらも無ければ None
    """
    m = LOOKAHEAD_PATTERN.match(text[end:end + window])
    if not m or not m.group(0):
        return None
    article, paragraph, item = _article_parts(m)
    return {
        'law_num': m.group('law_num'),
        'article': article,
        'paragraph': paragraph,
        'item': item,
    }


def iter_citation_tokens(text: str) -> Iterator[CitationToken]:
    """
    本文を1回走査して引用トークンを出現順に返す

    Args:
        text: 法令本文

    Yields:
        CitationToken
    """
    for m in CITATION_TOKEN_PATTERN.finditer(text):
        if m.group('law_num'):
            yield CitationToken(
                kind=TokenKind.LAW_NUM,
                name=m.group('name'),
                start=m.start(),
                law_num=m.group('law_num'),
            )
        elif m.group('article'):
            article, paragraph, item = _article_parts(m)
            yield CitationToken(
                kind=TokenKind.ARTICLE,
                name=m.group('name'),
                start=m.start(),
                article=article,
                paragraph=paragraph,
                item=item,
            )
        else:
            yield CitationToken(
                kind=TokenKind.AMENDMENT,
                name=m.group('name'),
                start=m.start(),
            )
