"""Turn keyword occurrences in plain text into anchor markup."""

from __future__ import annotations

import bisect
import html
from typing import List, Tuple

from .cache import ResultCache
from .store import KeywordStore
from .types import KeywordMapping, Match


class TextReplacer:
    """Match the store's patterns against text and render the links.

    ``replace_keywords`` returns its input unchanged when nothing matched.
    Otherwise the result is HTML: the surrounding text is escaped and each
    match is replaced by the anchor built for its mapping.
    """

    def __init__(self, store: KeywordStore, fragment_cache: ResultCache, link_cache: ResultCache) -> None:
        self.store = store
        self.fragment_cache = fragment_cache
        self.link_cache = link_cache

    def replace_keywords(self, text: str) -> str:
        cache_key = self._fragment_key(text)
        cached = self.fragment_cache.get(cache_key)
        if cached is not None:
            return cached

        matches = self.find_matches(text)
        if matches:
            result = self._splice(text, matches)
        else:
            result = text

        self.fragment_cache.put(cache_key, result)
        return result

    def find_matches(self, text: str) -> List[Match]:
        """Return non-overlapping matches ordered by position.

        Pattern groups run longest keyword first; a match that overlaps a
        span claimed by an earlier one is discarded, so the longest keyword
        wins and ties go to the leftmost occurrence.
        """

        claimed: List[Tuple[int, int]] = []
        matches: List[Match] = []
        for group in self.store.patterns:
            for found in group.pattern.finditer(text):
                start, end = found.span()
                if start == end or _overlaps(claimed, start, end):
                    continue
                mapping = self.store.mapping(group.key_for(found))
                if mapping is None:
                    continue
                bisect.insort(claimed, (start, end))
                matches.append(Match(start=start, end=end, text=found.group(0), mapping=mapping))
        matches.sort(key=lambda match: match.start)
        return matches

    def build_link(self, matched_text: str, mapping: KeywordMapping) -> str:
        cache_key = f"{matched_text}\x00{mapping.fingerprint}"
        cached = self.link_cache.get(cache_key)
        if cached is not None:
            return cached

        parts = [f'<a href="{html.escape(mapping.url)}"']
        for name, value in mapping.attributes:
            parts.append(f' {name}="{html.escape(value)}"')
        parts.append(f">{html.escape(matched_text, quote=False)}</a>")
        link = "".join(parts)

        self.link_cache.put(cache_key, link)
        return link

    def _splice(self, text: str, matches: List[Match]) -> str:
        pieces: List[str] = []
        position = 0
        for match in matches:
            pieces.append(html.escape(text[position:match.start], quote=False))
            pieces.append(self.build_link(match.text, match.mapping))
            position = match.end
        pieces.append(html.escape(text[position:], quote=False))
        return "".join(pieces)

    def _fragment_key(self, text: str) -> str:
        return f"{self.store.config.version}:{self.store.revision}:{text}"


def _overlaps(claimed: List[Tuple[int, int]], start: int, end: int) -> bool:
    # ``claimed`` is sorted and its spans never overlap each other, so only
    # the neighbours of the insertion point need checking.
    index = bisect.bisect_left(claimed, (start, end))
    if index < len(claimed) and claimed[index][0] < end:
        return True
    if index > 0 and claimed[index - 1][1] > start:
        return True
    return False
