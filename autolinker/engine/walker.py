"""HTML traversal that feeds text nodes to the keyword replacer."""

from __future__ import annotations

import re
from typing import Callable, List

from bs4 import BeautifulSoup, FeatureNotFound, NavigableString, Tag  # type: ignore

from .config import ProcessingConfig

# A document starts with <html>, <head> or <body>, optionally preceded by an
# XML declaration, a doctype and comments. Markup further in (script text,
# attribute values) never counts.
_DOCUMENT_RE = re.compile(
    r"\s*(?:(?:<\?xml[^>]*>|<!doctype[^>]*>|<!--.*?-->)\s*)*<(?:html|head|body)[\s/>]",
    re.IGNORECASE | re.DOTALL,
)


class HtmlTreeWalker:
    """Rewrite the text nodes of an HTML tree in place.

    Elements whose tag is excluded by the :class:`ProcessingConfig` are
    skipped together with everything below them, so existing anchors, code
    samples and scripts are never touched. Only the content of text nodes
    changes; element structure and attributes are preserved.
    """

    def __init__(self, config: ProcessingConfig, replace: Callable[[str], str]) -> None:
        self.config = config
        self.replace = replace

    def walk(self, html: str) -> str:
        """Return ``html`` with the replacer applied to every eligible text node.

        Fragments are parsed with ``html.parser`` so no ``<html>``/``<body>``
        wrapper is invented; documents (input opening with ``<html>``,
        ``<head>`` or ``<body>``) go through ``lxml`` and only
        their body is walked. When nothing changed the input string itself
        is returned.
        """

        if _DOCUMENT_RE.match(html):
            soup = _parse_document(html)
            root = soup.body or soup
        else:
            soup = BeautifulSoup(html, "html.parser")
            root = soup

        if not self._process_element(root, is_root=True):
            return html
        return str(soup)

    def _process_element(self, element: Tag, is_root: bool = False) -> int:
        if not is_root and self.config.is_excluded_tag(element.name):
            return 0

        children = list(element.children)
        changed = 0
        for child in children:
            if _is_text(child):
                changed += self._process_text_node(child)
        for child in children:
            if isinstance(child, Tag):
                changed += self._process_element(child)
        return changed

    def _process_text_node(self, node: NavigableString) -> int:
        original = str(node)
        if not original.strip():
            return 0
        processed = self.replace(original)
        if processed == original:
            return 0
        fragment = BeautifulSoup(processed, "html.parser")
        replacements: List = list(fragment.contents)
        node.replace_with(*replacements)
        return 1


def _is_text(node) -> bool:
    # Comments, CDATA, doctypes and the like subclass NavigableString too.
    return type(node) is NavigableString


def _parse_document(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "lxml")
    except FeatureNotFound:
        # Fallback to html.parser if lxml isn't installed
        return BeautifulSoup(html, "html.parser")
