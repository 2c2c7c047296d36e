"""Shared fixtures for keyword engine tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import pytest
import yaml

from autolinker.engine import KeywordLinkProcessor, ProcessingConfig


@pytest.fixture()
def processing_config():
    """Case-insensitive, whole-word configuration used by most tests."""

    return ProcessingConfig(case_sensitive=False, whole_words_only=True)


@pytest.fixture()
def processor(processing_config):
    return KeywordLinkProcessor(processing_config)


class FakeRepository:
    """In-memory stand-in for the content repository."""

    def __init__(self, declarations: Iterable[Tuple[str, Any]] = ()) -> None:
        self.declarations: List[Tuple[str, Any]] = list(declarations)
        self.calls = 0

    def find_keyword_declarations(self):
        self.calls += 1
        return list(self.declarations)


def write_keyword_file(path: Path, content: Dict[str, Any] | str, *, bump: int = 0) -> Path:
    """Write a keyword file and optionally push its mtime ``bump`` seconds ahead."""

    text = content if isinstance(content, str) else yaml.safe_dump(content, sort_keys=False)
    path.write_text(text, encoding="utf-8")
    if bump:
        stat = path.stat()
        later = stat.st_mtime_ns + bump * 1_000_000_000
        os.utime(path, ns=(later, later))
    return path
