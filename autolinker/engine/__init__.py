"""Keyword to hyperlink engine used by the autolinker app."""

from .config import ConfigurationError, ProcessingConfig
from .processor import KeywordLinkProcessor
from .types import Keyword, KeywordMapping

__all__ = [
    "ConfigurationError",
    "Keyword",
    "KeywordLinkProcessor",
    "KeywordMapping",
    "ProcessingConfig",
]
