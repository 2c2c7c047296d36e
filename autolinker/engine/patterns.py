"""Compile the keyword store into ordered regex alternations."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Dict, Iterable, List

from .config import ProcessingConfig
from .types import KeywordPattern

# Lookarounds instead of \b so keywords starting or ending with punctuation
# ("C++", ".NET") still require a non-word neighbour.
WORD_BOUNDARY = r"(?<!\w)(?:{alternation})(?!\w)"


def compile_patterns(keywords: Iterable[str], config: ProcessingConfig) -> List[KeywordPattern]:
    """Return one pattern per keyword length, longest first.

    ``keywords`` are the spellings as registered. Each alternative is its
    own capturing group, and ``KeywordPattern.keys`` maps the group that
    matched back to the store key, so a match never has to be normalized
    again. Running the groups longest first gives longer keywords the first
    claim on a span of text, which the replacer relies on to resolve
    overlaps.
    """

    by_length: Dict[int, List[str]] = defaultdict(list)
    for keyword in keywords:
        if keyword:
            by_length[len(keyword)].append(keyword)

    flags = 0 if config.case_sensitive else re.IGNORECASE
    patterns: List[KeywordPattern] = []
    for length in sorted(by_length, reverse=True):
        spellings = sorted(by_length[length])
        alternation = "|".join(f"({re.escape(spelling)})" for spelling in spellings)
        if config.whole_words_only:
            source = WORD_BOUNDARY.format(alternation=alternation)
        else:
            source = f"(?:{alternation})"
        patterns.append(
            KeywordPattern(
                pattern=re.compile(source, flags),
                length=length,
                keys=tuple(config.normalize(spelling) for spelling in spellings),
            )
        )
    return patterns
