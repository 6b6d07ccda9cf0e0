"""
データモデル定義

法令・略称・参照・グラフ要素の dataclass と、JSON 入出力用の変換を提供する。
派生エンティティ（GraphNode, GraphEdge, ReachabilityEntry, BacklinkEntry）は
実行ごとに全件再計算され、実行をまたいで保持されるのは LawRecord.id のみ。
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class RefType(str, Enum):
    """参照の検出方法"""
    LAW_NAME = "law_name"            # 法令名のみ
    ARTICLE_REF = "article_ref"      # 法令名＋第N条
    LAW_NUM_REF = "law_num_ref"      # 法令名（法令番号）
    UNKNOWN_LAW = "unknown_law"      # レジストリに存在しない法令
    AMENDMENT_REF = "amendment_ref"  # ○○の一部を改正する法律


@dataclass(frozen=True)
class LawRecord:
    """法令インデックスの1件（実行中は不変）"""
    id: str
    title: str
    promulgation_number: Optional[str] = None
    category: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LawRecord":
        """laws.json の1要素（id, lawNum, title, category）から生成"""
        law_id = data.get("id")
        title = data.get("title")
        if not law_id or not title:
            raise ValueError(f"Law entry requires id and title: {data!r}")
        return cls(
            id=str(law_id),
            title=str(title),
            promulgation_number=data.get("lawNum") or data.get("promulgation_number") or None,
            category=data.get("category") or "",
        )


@dataclass(frozen=True)
class AbbreviationEntry:
    """略称テーブルの1件"""
    abbreviation: str
    full_name: str
    law_id: Optional[str] = None


@dataclass
class Reference:
    """
    ある法令本文から他法令への参照1件

    to_law_id が設定されている場合、from_law_id とは必ず異なる（自己参照は記録しない）。
    """
    from_law_id: str
    from_law_title: str
    to_law_id: Optional[str]
    to_law_title: str
    to_law_num: Optional[str] = None
    article: Optional[str] = None
    paragraph: Optional[str] = None
    item: Optional[str] = None
    ref_type: RefType = RefType.LAW_NAME

    @property
    def dedupe_key(self) -> Tuple[str, str, str]:
        """全体重複除去のキー: (参照元, 参照先ID または法令名, 条)"""
        return (self.from_law_id, self.to_law_id or self.to_law_title, self.article or "")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["ref_type"] = self.ref_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reference":
        return cls(
            from_law_id=data["from_law_id"],
            from_law_title=data.get("from_law_title", ""),
            to_law_id=data.get("to_law_id"),
            to_law_title=data.get("to_law_title", ""),
            to_law_num=data.get("to_law_num"),
            article=data.get("article"),
            paragraph=data.get("paragraph"),
            item=data.get("item"),
            ref_type=RefType(data.get("ref_type", RefType.LAW_NAME.value)),
        )


@dataclass
class GraphNode:
    id: str
    title: str
    category: str
    out_degree: int = 0  # この法令が参照している法令数
    in_degree: int = 0   # この法令を参照している法令数

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GraphEdge:
    source: str
    target: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        # from は予約語のため出力時に変換
        return {"from": self.source, "to": self.target, "count": self.count}


@dataclass
class ReachabilityEntry:
    law_id: str
    title: str
    # この法令から到達可能な法令: {法令ID: ホップ数}
    reachable_from: Dict[str, int] = field(default_factory=dict)
    # この法令に到達可能な法令: {法令ID: ホップ数}
    reachable_to: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Referrer:
    law_id: str
    title: str
    count: int


@dataclass
class BacklinkEntry:
    law_id: str
    title: str
    referenced_by: List[Referrer] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return sum(r.count for r in self.referenced_by)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
