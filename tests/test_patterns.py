"""
引用文法パターンのテスト
"""
from lawgraph.utils.patterns import (
    TokenKind,
    format_article,
    is_preceded_by_cjk,
    iter_citation_tokens,
    match_lookahead,
)


class TestFormatArticle:
    def test_plain(self):
        assert format_article('三') == '第三条'

    def test_branch(self):
        """枝番号付き"""
        assert format_article('三', '二') == '第三条の二'


class TestIsPrecededByCjk:
    def test_start_of_text(self):
        assert is_preceded_by_cjk('民法', 0) is False

    def test_preceded_by_kanji(self):
        """「改正前民法」中の「民法」"""
        assert is_preceded_by_cjk('改正前民法', 3) is True

    def test_preceded_by_kana(self):
        assert is_preceded_by_cjk('この民法', 2) is True
        assert is_preceded_by_cjk('カタカナ民法', 4) is True

    def test_preceded_by_punctuation(self):
        assert is_preceded_by_cjk('「民法」', 1) is False
        assert is_preceded_by_cjk('及び、民法', 3) is False
        assert is_preceded_by_cjk(' 民法', 1) is False


class TestMatchLookahead:
    def test_article_only(self):
        text = '民法第三条の規定'
        after = match_lookahead(text, 2, 50)
        assert after['article'] == '第三条'
        assert after['law_num'] is None

    def test_law_num_then_article(self):
        """法令番号の括弧を挟んで条文が続く"""
        text = '民法（明治二十九年法律第八十九号）第九十条'
        after = match_lookahead(text, 2, 50)
        assert after['law_num'] == '明治二十九年法律第八十九号'
        assert after['article'] == '第九十条'

    def test_paragraph_and_item(self):
        text = '会社法第二条第一項第三号'
        after = match_lookahead(text, 3, 50)
        assert after['article'] == '第二条'
        assert after['paragraph'] == '第一項'
        assert after['item'] == '第三号'

    def test_branch_article(self):
        after = match_lookahead('民法第三条の二第一項', 2, 50)
        assert after['article'] == '第三条の二'
        assert after['paragraph'] == '第一項'

    def test_nothing_follows(self):
        assert match_lookahead('民法の規定', 2, 50) is None
        assert match_lookahead('民法', 2, 50) is None

    def test_window_limits_match(self):
        """窓の外の条文は拾わない"""
        text = '民法' + '第三条'
        assert match_lookahead(text, 2, 2) is None


class TestIterCitationTokens:
    def test_article_token(self):
        tokens = list(iter_citation_tokens('架空振興法第三条第二項の規定'))
        assert len(tokens) == 1
        token = tokens[0]
        assert token.kind == TokenKind.ARTICLE
        assert token.name == '架空振興法'
        assert token.article == '第三条'
        assert token.paragraph == '第二項'
        assert token.item is None

    def test_law_num_token(self):
        tokens = list(iter_citation_tokens('商事特別法（明治三十二年法律第四十八号）'))
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.LAW_NUM
        assert tokens[0].law_num == '明治三十二年法律第四十八号'

    def test_amendment_token(self):
        tokens = list(iter_citation_tokens('刑法及び民法の一部を改正する法律'))
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.AMENDMENT
        assert tokens[0].name == '刑法及び民法'

    def test_tokens_in_order(self):
        text = '甲法第一条及び乙令第二条'
        tokens = list(iter_citation_tokens(text))
        assert [t.start for t in tokens] == sorted(t.start for t in tokens)
        assert tokens[0].name == '甲法'
        assert tokens[1].name.endswith('乙令')

    def test_bare_name_is_not_a_token(self):
        """条文・法令番号・改正のいずれも続かない法令名はトークンにならない"""
        assert list(iter_citation_tokens('民法の規定による')) == []
