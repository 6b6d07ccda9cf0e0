import json

import pytest

from lawgraph.core.registry import LawRegistry
from lawgraph.models import LawRecord, RefType, Reference

MINPO_ID = "129AC0000000089"
KAISHA_ID = "417AC0000000086"
KEIHO_ID = "140AC0000000045"
KENPO_ID = "321CONSTITUTION"
SHOHISHA_ID = "412AC0000000061"
SHOHO_ID = "132AC0000000048"

LAWS = [
    {"id": MINPO_ID, "lawNum": "明治二十九年法律第八十九号", "title": "民法", "category": "民事"},
    {"id": KAISHA_ID, "lawNum": "平成十七年法律第八十六号", "title": "会社法", "category": "商事"},
    {"id": KEIHO_ID, "lawNum": "明治四十年法律第四十五号", "title": "刑法", "category": "刑事"},
    {"id": KENPO_ID, "lawNum": None, "title": "日本国憲法", "category": "憲法"},
    {"id": SHOHISHA_ID, "lawNum": "平成十二年法律第六十一号", "title": "消費者契約法", "category": "民事"},
    {"id": SHOHO_ID, "lawNum": "明治三十二年法律第四十八号", "title": "商法", "category": "商事"},
]


@pytest.fixture
def law_records():
    return [LawRecord.from_dict(entry) for entry in LAWS]


@pytest.fixture
def registry(law_records):
    return LawRegistry.build(law_records)


@pytest.fixture
def laws_file(tmp_path):
    path = tmp_path / "laws.json"
    path.write_text(json.dumps(LAWS, ensure_ascii=False), encoding="utf-8")
    return path


def make_ref(from_id, to_id, article=None, to_title=None, ref_type=RefType.LAW_NAME):
    """テスト用の Reference を簡潔に作る"""
    return Reference(
        from_law_id=from_id,
        from_law_title=from_id,
        to_law_id=to_id,
        to_law_title=to_title or to_id or "",
        article=article,
        ref_type=ref_type,
    )
