"""Configuration helpers for the keyword linking engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List

import yaml

from .types import Keyword

DEFAULT_EXCLUDED_TAGS: FrozenSet[str] = frozenset({"a", "script", "style", "code", "pre"})

# Values assumed for fields missing from the keyword configuration file.
DEFAULTS: Dict[str, Any] = {
    "caseSensitive": True,
    "wholeWordsOnly": True,
    "excludeTags": sorted(DEFAULT_EXCLUDED_TAGS),
    "replacements": [],
}


class ConfigurationError(Exception):
    """Raised when the keyword configuration file cannot be used."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


@dataclass
class ProcessingConfig:
    """Matching options shared by the pattern compiler and the tree walker.

    ``version`` is bumped on every change and is part of every fragment
    cache key, so cached output never outlives the options it was built
    with.
    """

    excluded_tags: set[str] = field(default_factory=lambda: set(DEFAULT_EXCLUDED_TAGS))
    case_sensitive: bool = False
    whole_words_only: bool = True
    version: int = 0

    def __post_init__(self) -> None:
        self.excluded_tags = {tag.lower() for tag in self.excluded_tags}

    def is_excluded_tag(self, tag: str | None) -> bool:
        return bool(tag) and tag.lower() in self.excluded_tags

    def normalize(self, keyword: str) -> str:
        """Return the store key for ``keyword`` under the current case policy."""

        return keyword if self.case_sensitive else keyword.lower()

    def update(
        self,
        *,
        case_sensitive: bool | None = None,
        whole_words_only: bool | None = None,
        excluded_tags: Iterable[str] | None = None,
    ) -> None:
        if case_sensitive is not None:
            self.case_sensitive = case_sensitive
        if whole_words_only is not None:
            self.whole_words_only = whole_words_only
        if excluded_tags is not None:
            self.excluded_tags = {str(tag).lower() for tag in excluded_tags}
        self.version += 1


@dataclass(frozen=True)
class KeywordFile:
    """Parsed content of a keyword configuration file."""

    case_sensitive: bool
    whole_words_only: bool
    excluded_tags: List[str]
    keywords: List[Keyword]


def load_keyword_file(path: str | Path) -> KeywordFile:
    """Parse the YAML keyword file at ``path``, merging it over ``DEFAULTS``.

    Raises :class:`ConfigurationError` when the file cannot be read or does
    not have the expected shape. Callers are expected to check for the
    file's existence first; a missing file is not an error at their level.
    """

    path = Path(path)
    data: Dict[str, Any] = dict(DEFAULTS)
    try:
        with path.open("r", encoding="utf-8") as stream:
            user = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in keyword configuration {path}: {exc}", path) from exc
    except OSError as exc:
        raise ConfigurationError(f"Failed to load keyword configuration from {path}", path) from exc

    if user is None:
        user = {}
    if not isinstance(user, dict):
        raise ConfigurationError(f"Keyword configuration {path} must be a mapping", path)
    merge_into(data, user)

    for flag in ("caseSensitive", "wholeWordsOnly"):
        if not isinstance(data[flag], bool):
            raise ConfigurationError(f"'{flag}' in {path} must be true or false", path)

    excluded = data["excludeTags"] or []
    if not isinstance(excluded, list) or not all(isinstance(tag, str) for tag in excluded):
        raise ConfigurationError(f"'excludeTags' in {path} must be a list of tag names", path)

    return KeywordFile(
        case_sensitive=data["caseSensitive"],
        whole_words_only=data["wholeWordsOnly"],
        excluded_tags=[tag.lower() for tag in excluded],
        keywords=_parse_replacements(data["replacements"] or [], path),
    )


def _parse_replacements(entries: Any, path: Path) -> List[Keyword]:
    if not isinstance(entries, list):
        raise ConfigurationError(f"'replacements' in {path} must be a list", path)

    keywords: List[Keyword] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Replacement {index} in {path} must be a mapping", path)
        link = entry.get("link")
        if not isinstance(link, str) or not link.strip():
            raise ConfigurationError(f"Replacement {index} in {path} is missing a link", path)
        terms = entry.get("keywords") or []
        if not isinstance(terms, list):
            raise ConfigurationError(f"Replacement {index} in {path} needs a list of keywords", path)
        attributes = entry.get("attributes") or {}
        if not isinstance(attributes, dict):
            raise ConfigurationError(f"Replacement {index} in {path} has invalid attributes", path)
        keywords.append(
            Keyword.create(
                link.strip(),
                [str(term) for term in terms if term is not None],
                {str(name): str(value) for name, value in attributes.items()},
            )
        )
    return keywords


def merge_into(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base dict."""

    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value
