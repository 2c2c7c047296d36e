"""Typed data structures shared by the keyword linking engine."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

Attributes = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Keyword:
    """A link target together with the keyword aliases that point to it."""

    url: str
    keywords: Tuple[str, ...]
    attributes: Attributes = ()

    @classmethod
    def create(
        cls,
        url: str,
        keywords,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> "Keyword":
        return cls(
            url=url,
            keywords=tuple(keywords),
            attributes=tuple((attributes or {}).items()),
        )


@dataclass(frozen=True)
class KeywordMapping:
    """URL and anchor attributes that one or more keywords resolve to."""

    url: str
    attributes: Attributes = ()
    fingerprint: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        digest = hashlib.sha1(self.url.encode("utf-8"))
        for name, value in self.attributes:
            digest.update(b"\x00")
            digest.update(name.encode("utf-8"))
            digest.update(b"=")
            digest.update(value.encode("utf-8"))
        object.__setattr__(self, "fingerprint", digest.hexdigest())

    @classmethod
    def create(cls, url: str, attributes: Optional[Mapping[str, str]] = None) -> "KeywordMapping":
        pairs = tuple((str(name), str(value)) for name, value in (attributes or {}).items())
        return cls(url=url, attributes=pairs)


@dataclass(frozen=True)
class KeywordPattern:
    """Alternation of all keywords sharing one length.

    ``keys[i]`` is the store key of the keyword captured by group ``i + 1``.
    """

    pattern: re.Pattern[str]
    length: int
    keys: Tuple[str, ...] = ()

    def key_for(self, found: re.Match[str]) -> str:
        return self.keys[found.lastindex - 1]


@dataclass(frozen=True)
class Match:
    """A keyword occurrence inside a text fragment."""

    start: int
    end: int
    text: str
    mapping: KeywordMapping
