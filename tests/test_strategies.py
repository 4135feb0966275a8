from __future__ import annotations

import time

import pytest

from conftest import make_page, make_structure
from ramp_ctf.core.config import PatternSettings
from ramp_ctf.core.errors import ExtractionError
from ramp_ctf.core.strategies import (
    CssSelectorStrategy,
    RegexStrategy,
    XPathStrategy,
    build_default_strategies,
)

ALL_STRATEGIES = [XPathStrategy, CssSelectorStrategy, RegexStrategy]
TREE_STRATEGIES = [XPathStrategy, CssSelectorStrategy]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_values_come_back_in_document_order(strategy_cls) -> None:
    values = ["h", "t", "t", "p", "s"]
    html = make_page(*(make_structure(v) for v in values))
    assert strategy_cls().extract(html) == values


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
@pytest.mark.parametrize("data_id", ["x92y", "920", "92"])
def test_section_data_id_is_a_substring_match(strategy_cls, data_id: str) -> None:
    html = make_page(make_structure("a", data_id=data_id))
    assert strategy_cls().extract(html) == ["a"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_section_without_the_substring_is_ignored(strategy_cls) -> None:
    html = make_page(make_structure("a", data_id="91"))
    assert strategy_cls().extract(html) == []


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_inner_levels_are_substring_matches(strategy_cls) -> None:
    html = make_page(
        make_structure("a", data_class="45", data_tag="178"),
        make_structure("x", data_class="44", data_tag="78"),
        make_structure("y", data_class="45", data_tag="87"),
    )
    assert strategy_cls().extract(html) == ["a"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_b_class_must_equal_ref(strategy_cls) -> None:
    assert strategy_cls().extract(make_page(make_structure("a", b_class="reference"))) == []
    assert strategy_cls().extract(make_page(make_structure("a", b_class="ref"))) == ["a"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_empty_value_is_kept(strategy_cls) -> None:
    html = make_page(make_structure(""), make_structure("z"))
    assert strategy_cls().extract(html) == ["", "z"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_missing_value_is_skipped(strategy_cls) -> None:
    html = make_page(make_structure(None), make_structure("z"))
    assert strategy_cls().extract(html) == ["z"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_levels_may_be_nested_at_any_depth(strategy_cls) -> None:
    html = make_page(
        '<section data-id="92">'
        "<div>"
        '<article data-class="45">'
        '<div class="wrapper">'
        '<div data-tag="78"><span><b class="ref" value="q"></b></span></div>'
        "</div>"
        "</article>"
        "</div>"
        "</section>"
    )
    assert strategy_cls().extract(html) == ["q"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_unrelated_markup_around_matches_is_ignored(strategy_cls) -> None:
    html = make_page(
        '<section data-id="10"><article data-class="45"><div data-tag="78">'
        '<b class="ref" value="no"></b></div></article></section>',
        make_structure("a"),
        '<p>noise <b class="ref" value="nope"></b></p>',
        make_structure("b"),
    )
    assert strategy_cls().extract(html) == ["a", "b"]


@pytest.mark.parametrize("strategy_cls", ALL_STRATEGIES)
def test_non_string_input_raises_extraction_error(strategy_cls) -> None:
    with pytest.raises(ExtractionError) as exc:
        strategy_cls().extract(b"<html></html>")  # type: ignore[arg-type]
    assert exc.value.strategy == strategy_cls.name


@pytest.mark.parametrize("strategy_cls", TREE_STRATEGIES)
def test_tree_strategies_keep_document_order_across_scopes(strategy_cls) -> None:
    html = make_page(
        '<section data-id="92">'
        '<article data-class="45"><div data-tag="78"><b class="ref" value="a"></b></div></article>'
        '<article data-class="45"><div data-tag="78">'
        '<b class="ref" value="b"></b><b class="ref" value="c"></b>'
        "</div></article>"
        "</section>",
        make_structure("d"),
    )
    assert strategy_cls().extract(html) == ["a", "b", "c", "d"]


@pytest.mark.parametrize("strategy_cls", TREE_STRATEGIES)
def test_nested_matching_sections_report_each_b_once(strategy_cls) -> None:
    html = make_page(
        '<section data-id="92"><section data-id="192">'
        '<article data-class="45"><div data-tag="78"><b class="ref" value="n"></b></div></article>'
        "</section></section>"
    )
    assert strategy_cls().extract(html) == ["n"]


@pytest.mark.parametrize("strategy_cls", TREE_STRATEGIES)
def test_tree_strategies_ignore_attribute_order(strategy_cls) -> None:
    html = make_page(
        '<section data-id="92"><article data-class="45"><div data-tag="78">'
        '<b value="q" class="ref"></b></div></article></section>'
    )
    assert strategy_cls().extract(html) == ["q"]


def test_regex_depends_on_attribute_order() -> None:
    html = make_page(
        '<section data-id="92"><article data-class="45"><div data-tag="78">'
        '<b value="q" class="ref"></b></div></article></section>'
    )
    assert RegexStrategy().extract(html) == []


def test_regex_reports_one_b_per_section() -> None:
    html = make_page(
        '<section data-id="92"><article data-class="45"><div data-tag="78">'
        '<b class="ref" value="x"></b><b class="ref" value="y"></b>'
        "</div></article></section>"
    )
    assert RegexStrategy().extract(html) == ["x"]
    assert XPathStrategy().extract(html) == ["x", "y"]


def test_regex_does_not_confuse_similar_tags_and_attributes() -> None:
    html = (
        '<html><body class="ref" value="body">'
        '<section data-id="92"><article data-class="45"><div data-tag="78">'
        '<br class="ref" value="br"><b data-class="ref" class="ref" value="ok"></b>'
        "</div></article></section></body></html>"
    )
    assert RegexStrategy().extract(html) == ["ok"]


def test_regex_is_case_insensitive_on_tag_names() -> None:
    html = (
        '<SECTION data-id="92"><ARTICLE data-class="45"><DIV data-tag="78">'
        '<B class="ref" value="k"></B></DIV></ARTICLE></SECTION>'
    )
    assert RegexStrategy().extract(html) == ["k"]


def test_xpath_empty_document_raises_extraction_error() -> None:
    with pytest.raises(ExtractionError):
        XPathStrategy().extract("")


def test_xpath_rejects_str_with_encoding_declaration() -> None:
    html = '<?xml version="1.0" encoding="UTF-8"?>' + make_page(make_structure("a"))
    with pytest.raises(ExtractionError):
        XPathStrategy().extract(html)


def test_xpath_expression_quotes_pattern_values() -> None:
    pattern = PatternSettings(section_data_id="it's", b_class='say "hi"')
    expr = XPathStrategy(pattern).expression()
    assert "contains(@data-id, \"it's\")" in expr
    assert "@class='say \"hi\"'" in expr

    both = XPathStrategy(PatternSettings(section_data_id="a'b\"c")).expression()
    assert "concat('a', \"'\", 'b\"c')" in both


def test_css_selectors_follow_pattern_settings() -> None:
    selectors = CssSelectorStrategy().selectors()
    assert selectors == [
        'section[data-id*="92"]',
        'article[data-class*="45"]',
        'div[data-tag*="78"]',
        'b[class="ref"]',
    ]


def test_custom_pattern_changes_what_matches() -> None:
    pattern = PatternSettings(section_data_id="aa", article_data_class="bb", div_data_tag="cc", b_class="hit")
    html = make_page(
        make_structure("1", data_id="xaax", data_class="bb", data_tag="cc", b_class="hit"),
        make_structure("2"),
    )
    for strategy in build_default_strategies(pattern):
        assert strategy.extract(html) == ["1"]


def test_default_strategy_order() -> None:
    names = [s.name for s in build_default_strategies()]
    assert names == ["XPath Strategy", "CSS Selector Strategy", "Regex Strategy"]


@pytest.mark.parametrize("near_miss", [
        {"b_class": "reference"},
        {"data_tag": "c77d"},
        {"data_class": "a44b"},
    ],
)
def test_regex_stays_fast_on_many_near_miss_structures(near_miss: dict) -> None:
    html = make_page(*(make_structure(str(i % 10), **near_miss) for i in range(150)))
    started = time.perf_counter()
    assert RegexStrategy().extract(html) == []
    assert time.perf_counter() - started < 2.0


def test_regex_does_not_reach_into_a_later_section() -> None:
    html = make_page(
        '<section data-id="92"><article data-class="45"><div data-tag="77">'
        '<b class="ref" value="no"></b></div></article></section>'
        '<section data-id="11"><article data-class="45"><div data-tag="78">'
        '<b class="ref" value="leak"></b></div></article></section>'
    )
    assert RegexStrategy().extract(html) == []


def test_css_programming_errors_are_not_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(self, soup):
        raise KeyError("bug")

    monkeypatch.setattr(CssSelectorStrategy, "_select", broken)
    with pytest.raises(KeyError):
        CssSelectorStrategy().extract(make_page(make_structure("a")))


def test_css_selector_errors_become_extraction_errors() -> None:
    strategy = CssSelectorStrategy()
    strategy.selectors = lambda: ["b[class="]  # type: ignore[method-assign]
    with pytest.raises(ExtractionError) as exc:
        strategy.extract(make_page(make_structure("a")))
    assert exc.value.strategy == CssSelectorStrategy.name
