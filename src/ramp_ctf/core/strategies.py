from __future__ import annotations

import logging
import re
from typing import Protocol

import lxml.etree
import lxml.html
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from soupsieve import SelectorSyntaxError

from ramp_ctf.core.config import PatternSettings
from ramp_ctf.core.errors import ExtractionError


class ExtractionStrategy(Protocol):
    """One way of finding the nested pattern in a document.

    `extract` returns the `value` attributes of every matching `b` element in
    document order. An empty list means "no match". `ExtractionError` means
    the document could not be processed at all.
    """

    name: str

    def extract(self, document: str) -> list[str]:
        ...


def _require_text(name: str, document: object) -> str:
    if not isinstance(document, str):
        raise ExtractionError(name, f"expected str document, got {type(document).__name__}")
    return document


def _css_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


class CssSelectorStrategy:
    name = "CSS Selector Strategy"

    def __init__(self, pattern: PatternSettings | None = None, *, logger: logging.Logger | None = None) -> None:
        self._pattern = pattern or PatternSettings()
        self._log = logger if logger is not None else logging.getLogger(__name__)

    def selectors(self) -> list[str]:
        p = self._pattern
        return [
            f"section[data-id*={_css_string(p.section_data_id)}]",
            f"article[data-class*={_css_string(p.article_data_class)}]",
            f"div[data-tag*={_css_string(p.div_data_tag)}]",
            f"b[class={_css_string(p.b_class)}]",
        ]

    def extract(self, document: str) -> list[str]:
        text = _require_text(self.name, document)
        try:
            soup = BeautifulSoup(text, "lxml")
            matches = self._select(soup)
        except (ParserRejectedMarkup, SelectorSyntaxError, lxml.etree.LxmlError, ValueError) as e:
            raise ExtractionError(self.name, str(e) or type(e).__name__) from e

        attr = self._pattern.value_attribute
        characters: list[str] = []
        for b in matches:
            value = b.get(attr)
            if value is None:
                continue
            if isinstance(value, list):
                value = " ".join(value)
            characters.append(value)
            self._log.debug("Found character: %r", value)

        self._log.info("Extracted %d characters using %s", len(characters), self.name)
        return characters

    def _select(self, soup: BeautifulSoup) -> list[Tag]:
        # Walk the levels one at a time; nested matches at an outer level can
        # reach the same `b` twice, so keep the first sighting only.
        current: list[Tag] = [soup]
        for selector in self.selectors():
            found: list[Tag] = []
            seen: set[int] = set()
            for scope in current:
                for el in scope.select(selector):
                    if id(el) in seen:
                        continue
                    seen.add(id(el))
                    found.append(el)
            self._log.debug("%s matched %d elements", selector, len(found))
            if not found:
                return []
            current = found

        # Per-scope gathering can interleave sibling scopes; put back in source order.
        order = {id(el): i for i, el in enumerate(soup.find_all(True))}
        return sorted(current, key=lambda el: order.get(id(el), 0))


class XPathStrategy:
    name = "XPath Strategy"

    def __init__(self, pattern: PatternSettings | None = None, *, logger: logging.Logger | None = None) -> None:
        self._pattern = pattern or PatternSettings()
        self._log = logger if logger is not None else logging.getLogger(__name__)

    def expression(self) -> str:
        p = self._pattern
        return (
            f"//section[contains(@data-id, {_xpath_literal(p.section_data_id)})]"
            f"//article[contains(@data-class, {_xpath_literal(p.article_data_class)})]"
            f"//div[contains(@data-tag, {_xpath_literal(p.div_data_tag)})]"
            f"//b[@class={_xpath_literal(p.b_class)}]"
        )

    def extract(self, document: str) -> list[str]:
        text = _require_text(self.name, document)
        expr = self.expression()
        self._log.debug("XPath expression: %s", expr)
        try:
            root = lxml.html.document_fromstring(text)
            # libxml2 sorts node-sets into document order.
            nodes = root.xpath(expr)
        except (lxml.etree.ParserError, lxml.etree.XPathError, ValueError) as e:
            raise ExtractionError(self.name, str(e) or type(e).__name__) from e

        attr = self._pattern.value_attribute
        characters: list[str] = []
        for idx, node in enumerate(nodes, start=1):
            value = node.get(attr)
            if value is None:
                continue
            characters.append(value)
            self._log.debug("Character %d: %r", idx, value)

        self._log.info("Found %d matching elements, extracted %d characters using %s", len(nodes), len(characters), self.name)
        return characters


class RegexStrategy:
    """Scan the raw markup with one regular expression.

    Only works when attributes appear in the expected order inside each tag.
    Each level is searched no further than the close tag of the level above
    it, and one matching `section` yields at most one `b`. Run it last.
    """

    name = "Regex Strategy"

    def __init__(self, pattern: PatternSettings | None = None, *, logger: logging.Logger | None = None) -> None:
        self._pattern = pattern or PatternSettings()
        self._log = logger if logger is not None else logging.getLogger(__name__)
        self._regex = self._build()

    def _build(self) -> re.Pattern[str]:
        p = self._pattern

        def contains(attr: str, needle: str) -> str:
            return rf'\s{attr}="[^"]*{re.escape(needle)}[^"]*"'

        def within(tag: str) -> str:
            # Lazy filler that cannot run past the enclosing element's close tag.
            return rf"(?:(?!</{tag}\b)[\s\S])*?"

        section = rf"<section\b[^>]*{contains('data-id', p.section_data_id)}[^>]*>"
        article = within("section") + rf"<article\b[^>]*{contains('data-class', p.article_data_class)}[^>]*>"
        div = within("article") + rf"<div\b[^>]*{contains('data-tag', p.div_data_tag)}[^>]*>"
        b = (
            within("div")
            + rf'<b\b[^>]*\sclass="{re.escape(p.b_class)}"'
            + rf'[^>]*\s{re.escape(p.value_attribute)}="([^"]*)"[^>]*>'
        )
        return re.compile(section + article + div + b, flags=re.IGNORECASE)

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def extract(self, document: str) -> list[str]:
        text = _require_text(self.name, document)
        characters: list[str] = []
        for count, m in enumerate(self._regex.finditer(text), start=1):
            value = m.group(1)
            characters.append(value)
            self._log.debug("Match %d: %r", count, value)

        self._log.info("Extracted %d characters using %s", len(characters), self.name)
        return characters


DEFAULT_STRATEGY_ORDER: tuple[type, ...] = (XPathStrategy, CssSelectorStrategy, RegexStrategy)


def build_default_strategies(
    pattern: PatternSettings | None = None,
    *,
    logger: logging.Logger | None = None,
) -> list[ExtractionStrategy]:
    return [cls(pattern, logger=logger) for cls in DEFAULT_STRATEGY_ORDER]
