"""
Reference Extractor - 法令本文から他法令への参照を抽出する

検出方式:
1. 既知の法令名・略称 → 長い順に文字列検索（フェーズ1）
2. 未知の法令名 → 引用文法トークンの1回走査（フェーズ2）

検出パターン:
- 「○○法第○条」「○○法第○条の○第○項第○号」
- 「○○法（元号○年法律第○号）」
- 「○○法の一部を改正する法律」
- 法令名そのもの（既知のもののみ）
"""
import logging
from typing import List, Optional, Set, Tuple

from ..config import LOOKAHEAD_WINDOW, MIN_NAME_LENGTH
from ..models import LawRecord, RefType, Reference
from ..utils.patterns import (
    CitationToken,
    TokenKind,
    is_preceded_by_cjk,
    iter_citation_tokens,
    match_lookahead,
)
from .registry import LawRegistry

logger = logging.getLogger(__name__)

# 法令名トークン内の区切り語
# 「この法律は民法」「刑法及び民法」のように、トークンが前方の語を巻き込んだ場合に
# 区切り語の後ろを法令名候補として試す
NAME_SEPARATORS: Tuple[str, ...] = (
    '若しくは', '並びに', '及び', '又は',
    'は', 'が', 'を', 'に', 'と', 'で', '、',
)

# 未知法令名の切り詰めに使う区切り語
# 助詞は「…に関する法律」のように正式名称の内部にも現れるため含めない
UNKNOWN_NAME_SEPARATORS: Tuple[str, ...] = (
    '若しくは', '並びに', '及び', '又は', 'は', '、',
)

# 照応語・総称など、単独では特定の法令を指さない名前
NON_LAW_NAMES: Tuple[str, ...] = (
    '同法', '本法', '前法', '新法', '旧法', '改正法', '当該法',
    '同令', '本令', '新令', '旧令', '施行令', '基本法', '通則法', '整備法',
)


def name_suffixes(name: str, separators: Tuple[str, ...] = NAME_SEPARATORS) -> List[str]:
    """
    区切り語の直後から始まる部分文字列を長い順に返す

    Examples:
        >>> name_suffixes('この法律は民法')
        ['民法']
        >>> name_suffixes('刑法及び民法')
        ['民法']
    """
    starts = set()
    for sep in separators:
        pos = name.find(sep)
        while pos >= 0:
            starts.add(pos + len(sep))
            pos = name.find(sep, pos + 1)
    return [name[s:] for s in sorted(starts) if 0 < s < len(name)]


def trim_unknown_name(name: str) -> Optional[str]:
    """
    未知法令名を最後の区切り語より後ろに切り詰める

    空・「法」のみ・2文字未満・照応語は無効として None を返す。
    """
    suffixes = name_suffixes(name, UNKNOWN_NAME_SEPARATORS)
    trimmed = suffixes[-1] if suffixes else name
    if len(trimmed) < 2 or trimmed == '法':
        return None
    if trimmed in NON_LAW_NAMES:
        return None
    return trimmed


class ReferenceExtractor:
    """
    1文書分の参照抽出器

    同一文書内では参照先ごとに最大1件（最初に条件を満たした出現）を記録する。
    未知法令は法令名ごとに1件。
    """

    def __init__(
        self,
        registry: LawRegistry,
        min_name_length: int = MIN_NAME_LENGTH,
        lookahead_window: int = LOOKAHEAD_WINDOW,
    ):
        self.registry = registry
        self.min_name_length = min_name_length
        self.lookahead_window = lookahead_window

    def extract(self, text: str, from_law: LawRecord) -> List[Reference]:
        """
        本文から参照を抽出する

        Args:
            text: 法令本文（プレーンテキスト）
            from_law: この本文を持つ法令

        Returns:
            Reference のリスト（出現順ではなく、フェーズ1の候補順 → フェーズ2の出現順）
        """
        references: List[Reference] = []
        seen: Set[str] = set()

        self._scan_known_names(text, from_law, references, seen)
        self._scan_tokens(text, from_law, references, seen)
        return references

    # =========================================================================
    # フェーズ1: 既知の法令名を長い順に検索
    # =========================================================================

    def _scan_known_names(
        self,
        text: str,
        from_law: LawRecord,
        references: List[Reference],
        seen: Set[str],
    ) -> None:
        for name, law in self.registry.candidates:
            if law.id == from_law.id:
                continue
            if law.id in seen:
                continue
            if len(name) < self.min_name_length:
                continue

            pos = text.find(name)
            if pos == -1:
                continue

            # 部分一致を避ける（「旧民法」中の「民法」など）
            # 参照先は seen に入れないので、より短い別名での検出は妨げない
            if is_preceded_by_cjk(text, pos):
                continue

            seen.add(law.id)

            after = match_lookahead(text, pos + len(name), self.lookahead_window) or {}
            law_num = after.get('law_num')
            article = after.get('article')

            if article:
                ref_type = RefType.ARTICLE_REF
            elif law_num:
                ref_type = RefType.LAW_NUM_REF
            else:
                ref_type = RefType.LAW_NAME

            references.append(Reference(
                from_law_id=from_law.id,
                from_law_title=from_law.title,
                to_law_id=law.id,
                to_law_title=name,
                to_law_num=law_num or law.promulgation_number,
                article=article,
                paragraph=after.get('paragraph'),
                item=after.get('item'),
                ref_type=ref_type,
            ))

    # =========================================================================
    # フェーズ2: 引用文法トークン（未知の法令・見逃した既知の法令）
    # =========================================================================

    def _resolve_token_name(self, name: str) -> Tuple[Optional[LawRecord], str]:
        """
        トークンの法令名を解決する

        Returns:
            (解決できた LawRecord または None, 記録に使う法令名)
        """
        law = self.registry.resolve_name(name)
        if law is not None:
            return law, name
        for suffix in name_suffixes(name):
            law = self.registry.resolve_name(suffix)
            if law is not None:
                return law, suffix
        return None, trim_unknown_name(name) or ''

    def _embeds_known_name(self, name: str) -> bool:
        """
        未解決の法令名が、漢字・かなの直後に既知の法令名で終わっているか

        「改正前民法」のようにフェーズ1で部分一致として退けた出現を、
        未知法令として拾い直さないための判定。
        """
        for start in range(1, len(name) - self.min_name_length + 1):
            if self.registry.resolve_name(name[start:]) is not None:
                return is_preceded_by_cjk(name, start)
        return False

    def _scan_tokens(
        self,
        text: str,
        from_law: LawRecord,
        references: List[Reference],
        seen: Set[str],
    ) -> None:
        for token in iter_citation_tokens(text):
            law, name = self._resolve_token_name(token.name)
            if not name:
                continue

            # 自法令名は参照として扱わない（レジストリ解決とは独立に判定）
            if token.kind == TokenKind.ARTICLE and from_law.title in (token.name, name):
                continue

            if token.kind == TokenKind.LAW_NUM and law is None:
                law = self.registry.by_number(token.law_num)

            if law is not None:
                if law.id == from_law.id or law.id in seen:
                    continue
                seen.add(law.id)
                references.append(self._known_token_reference(token, law, name, from_law))
            elif token.kind != TokenKind.AMENDMENT:
                if self._embeds_known_name(token.name):
                    continue
                key = f'unknown:{name}'
                if key in seen:
                    continue
                seen.add(key)
                references.append(Reference(
                    from_law_id=from_law.id,
                    from_law_title=from_law.title,
                    to_law_id=None,
                    to_law_title=name,
                    to_law_num=token.law_num,
                    article=token.article,
                    paragraph=token.paragraph,
                    item=token.item,
                    ref_type=RefType.UNKNOWN_LAW,
                ))

    @staticmethod
    def _known_token_reference(
        token: CitationToken,
        law: LawRecord,
        name: str,
        from_law: LawRecord,
    ) -> Reference:
        if token.kind == TokenKind.LAW_NUM:
            ref_type = RefType.LAW_NUM_REF
        elif token.kind == TokenKind.ARTICLE:
            ref_type = RefType.ARTICLE_REF
        else:
            ref_type = RefType.AMENDMENT_REF

        return Reference(
            from_law_id=from_law.id,
            from_law_title=from_law.title,
            to_law_id=law.id,
            to_law_title=name,
            to_law_num=token.law_num or law.promulgation_number,
            article=token.article,
            paragraph=token.paragraph,
            item=token.item,
            ref_type=ref_type,
        )
