"""Live keyword to link mapping used by the replacer."""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from typing import Dict, Iterator, List, Mapping, Optional

from .config import ProcessingConfig
from .patterns import compile_patterns
from .types import KeywordMapping, KeywordPattern

MINIMUM_KEYWORD_LENGTH = 2

# Shared by every store so revisions are unique within the process; stores
# may share a cache backend.
_revisions = itertools.count(1)


class KeywordStore:
    """Normalized keyword keys mapped to the link they should become.

    The store is not locked; :class:`~autolinker.engine.processor.KeywordLinkProcessor`
    serialises writers against readers.
    """

    def __init__(self, config: ProcessingConfig) -> None:
        self.config = config
        self._mappings: Dict[str, KeywordMapping] = {}
        # Store key -> spelling as last registered; patterns are compiled from these.
        self._spellings: Dict[str, str] = {}
        self._patterns: List[KeywordPattern] = []
        self._batch_depth = 0
        self.revision = next(_revisions)

    def __len__(self) -> int:
        return len(self._mappings)

    def __contains__(self, keyword: str) -> bool:
        return self.config.normalize(keyword) in self._mappings

    @property
    def patterns(self) -> List[KeywordPattern]:
        return self._patterns

    def add_keywords(
        self,
        url: str,
        *keywords: Optional[str],
        attributes: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Register ``keywords`` as aliases of one shared link mapping.

        Keywords that are empty or shorter than two characters are dropped.
        A keyword that is already known is overwritten.
        """

        mapping = KeywordMapping.create(url, attributes)
        for keyword in keywords:
            if not keyword or len(keyword) < MINIMUM_KEYWORD_LENGTH:
                continue
            key = self.config.normalize(keyword)
            self._mappings[key] = mapping
            self._spellings[key] = keyword
        self._changed()

    def lookup(self, matched_text: str) -> Optional[KeywordMapping]:
        return self._mappings.get(self.config.normalize(matched_text))

    def mapping(self, key: str) -> Optional[KeywordMapping]:
        """Return the mapping stored under an already normalized ``key``."""

        return self._mappings.get(key)

    def clear(self) -> None:
        self._mappings.clear()
        self._spellings.clear()
        self._patterns = []
        self.revision = next(_revisions)

    def recompile(self) -> None:
        self._patterns = compile_patterns(self._spellings.values(), self.config)

    @contextmanager
    def batch(self) -> Iterator["KeywordStore"]:
        """Compile patterns once at the end of a bulk load instead of per call."""

        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self.recompile()

    def _changed(self) -> None:
        self.revision = next(_revisions)
        if self._batch_depth == 0:
            self.recompile()
