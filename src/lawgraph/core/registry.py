"""
Law Registry - 法令名・法令番号・略称から法令を引く読み取り専用の索引

抽出器が使う候補リスト（法令名と略称を長い順に並べたもの）もここで生成する。
レジストリは構築後に変更しない値として扱い、ワーカーには起動時に1回だけ渡す。
"""
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..models import AbbreviationEntry, LawRecord

logger = logging.getLogger(__name__)

# ==============================================================================
# 定番略称（略称 → 正式な法令名）
# ==============================================================================
# 外部の略称抽出で得られる動的テーブルと併用する。
# 同じ略称が動的テーブルにあれば動的テーブルが優先される。
COMMON_ABBREVIATIONS: Dict[str, str] = {
    # 基本法
    '憲法': '日本国憲法',
    '民訴法': '民事訴訟法',
    '刑訴法': '刑事訴訟法',
    '民執法': '民事執行法',
    '民保法': '民事保全法',
    '民再法': '民事再生法',
    '人訴法': '人事訴訟法',
    '家事法': '家事事件手続法',
    '非訟法': '非訟事件手続法',
    # 行政法
    '行訴法': '行政事件訴訟法',
    '行手法': '行政手続法',
    '行審法': '行政不服審査法',
    '国賠法': '国家賠償法',
    '地自法': '地方自治法',
    '情報公開法': '行政機関の保有する情報の公開に関する法律',
    '個人情報保護法': '個人情報の保護に関する法律',
    '番号法': '行政手続における特定の個人を識別するための番号の利用等に関する法律',
    # 労働法
    '労基法': '労働基準法',
    '労契法': '労働契約法',
    '労組法': '労働組合法',
    '派遣法': '労働者派遣事業の適正な運営の確保及び派遣労働者の保護等に関する法律',
    '均等法': '雇用の分野における男女の均等な機会及び待遇の確保等に関する法律',
    '育介法': '育児休業、介護休業等育児又は家族介護を行う労働者の福祉に関する法律',
    '最賃法': '最低賃金法',
    '安衛法': '労働安全衛生法',
    '労災法': '労働者災害補償保険法',
    '雇保法': '雇用保険法',
    # 知的財産
    '不競法': '不正競争防止法',
    # 経済法・消費者法
    '独禁法': '私的独占の禁止及び公正取引の確保に関する法律',
    '独占禁止法': '私的独占の禁止及び公正取引の確保に関する法律',
    '下請法': '下請代金支払遅延等防止法',
    '景表法': '不当景品類及び不当表示防止法',
    '景品表示法': '不当景品類及び不当表示防止法',
    '消契法': '消費者契約法',
    '特商法': '特定商取引に関する法律',
    '特定商取引法': '特定商取引に関する法律',
    '割販法': '割賦販売法',
    'PL法': '製造物責任法',
    # 金融
    '金商法': '金融商品取引法',
    '資金決済法': '資金決済に関する法律',
    '犯収法': '犯罪による収益の移転防止に関する法律',
    # 不動産・建築
    '宅建業法': '宅地建物取引業法',
    '建基法': '建築基準法',
    '都計法': '都市計画法',
    '区分所有法': '建物の区分所有等に関する法律',
    '不登法': '不動産登記法',
    # 税法
    '国通法': '国税通則法',
    '租特法': '租税特別措置法',
    # 入管・交通
    '入管法': '出入国管理及び難民認定法',
    '道交法': '道路交通法',
    '自賠法': '自動車損害賠償保障法',
    # 刑事関連
    '組織犯罪処罰法': '組織的な犯罪の処罰及び犯罪収益の規制等に関する法律',
    '通信傍受法': '犯罪捜査のための通信傍受に関する法律',
    '裁判員法': '裁判員の参加する刑事裁判に関する法律',
    '刑事収容施設法': '刑事収容施設及び被収容者等の処遇に関する法律',
    'ストーカー規制法': 'ストーカー行為等の規制等に関する法律',
    'DV防止法': '配偶者からの暴力の防止及び被害者の保護等に関する法律',
    '風営法': '風俗営業等の規制及び業務の適正化等に関する法律',
    '銃刀法': '銃砲刀剣類所持等取締法',
    '暴対法': '暴力団員による不当な行為の防止等に関する法律',
    # 法人
    '一般法人法': '一般社団法人及び一般財団法人に関する法律',
    'NPO法': '特定非営利活動促進法',
}


class LawRegistry:
    """
    法令インデックス

    - title → LawRecord
    - promulgation_number → LawRecord
    - abbreviation → LawRecord
    - candidates: (候補名, LawRecord) を名前の長い順に並べたタプル

    candidates の順序は抽出器との契約であり、長い正式名称が短い部分文字列や
    略称に負けないことを保証する。同じ長さの候補は挿入順
    （レジストリ順の法令名 → 略称）を保つ。
    """

    def __init__(
        self,
        laws: List[LawRecord],
        by_title: Dict[str, LawRecord],
        by_number: Dict[str, LawRecord],
        by_abbreviation: Dict[str, LawRecord],
    ):
        self._laws = tuple(laws)
        self._by_id = {law.id: law for law in laws}
        self._by_title = by_title
        self._by_number = by_number
        self._by_abbreviation = by_abbreviation
        self.candidates = self._build_candidates()

    @classmethod
    def build(
        cls,
        laws: Iterable[LawRecord],
        abbreviations: Optional[Iterable[AbbreviationEntry]] = None,
        use_common_abbreviations: bool = True,
    ) -> "LawRegistry":
        """
        法令リストと略称テーブルから索引を構築する

        Args:
            laws: 法令インデックス
            abbreviations: 外部から与えられる動的略称テーブル
            use_common_abbreviations: 定番略称（COMMON_ABBREVIATIONS）を併用するか

        Returns:
            LawRegistry
        """
        law_list: List[LawRecord] = []
        seen_ids = set()
        by_title: Dict[str, LawRecord] = {}
        by_number: Dict[str, LawRecord] = {}

        for law in laws:
            if law.id in seen_ids:
                logger.warning(f"Duplicate law id in registry: {law.id}")
                continue
            seen_ids.add(law.id)
            law_list.append(law)

            # 同名の法令は先に登録されたものを優先
            if law.title in by_title:
                logger.debug(f"Duplicate title ignored: {law.title} ({law.id})")
            else:
                by_title[law.title] = law
            if law.promulgation_number and law.promulgation_number not in by_number:
                by_number[law.promulgation_number] = law

        by_id = {law.id: law for law in law_list}
        by_abbreviation: Dict[str, LawRecord] = {}

        if use_common_abbreviations:
            for abbrev, full_title in COMMON_ABBREVIATIONS.items():
                law = by_title.get(full_title)
                if law is not None:
                    by_abbreviation[abbrev] = law

        for entry in abbreviations or ():
            law = by_id.get(entry.law_id) if entry.law_id else None
            if law is None and entry.full_name:
                law = by_title.get(entry.full_name)
            if law is None:
                # レジストリに存在しない法令への略称は捨てる
                continue
            by_abbreviation[entry.abbreviation] = law

        return cls(law_list, by_title, by_number, by_abbreviation)

    def _build_candidates(self) -> Tuple[Tuple[str, LawRecord], ...]:
        pairs: List[Tuple[str, LawRecord]] = list(self._by_title.items())
        for abbrev, law in self._by_abbreviation.items():
            # 正式名称と同じ文字列は法令名側で扱う
            if abbrev in self._by_title:
                continue
            pairs.append((abbrev, law))
        # sorted は安定ソートなので同じ長さの候補は挿入順を保つ
        return tuple(sorted(pairs, key=lambda pair: len(pair[0]), reverse=True))

    # ------------------------------------------------------------------
    # 参照系
    # ------------------------------------------------------------------

    def get(self, law_id: str) -> Optional[LawRecord]:
        return self._by_id.get(law_id)

    def by_title(self, title: str) -> Optional[LawRecord]:
        return self._by_title.get(title)

    def by_number(self, number: str) -> Optional[LawRecord]:
        return self._by_number.get(number)

    def by_abbreviation(self, abbreviation: str) -> Optional[LawRecord]:
        return self._by_abbreviation.get(abbreviation)

    def resolve_name(self, name: str) -> Optional[LawRecord]:
        """法令名 → 略称の順に解決"""
        return self._by_title.get(name) or self._by_abbreviation.get(name)

    @property
    def abbreviation_count(self) -> int:
        return len(self._by_abbreviation)

    def __contains__(self, law_id: object) -> bool:
        return law_id in self._by_id

    def __len__(self) -> int:
        return len(self._laws)

    def __iter__(self) -> Iterator[LawRecord]:
        return iter(self._laws)
