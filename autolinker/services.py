"""Service functions connecting the keyword engine to the site's content.

The engine itself knows nothing about Django. This module supplies the
pieces it consumes from the host: a repository that reports keyword
declarations stored on content items, and a factory that builds the
engine from settings.
"""

from __future__ import annotations

from typing import Any, Iterator, Tuple

from django.conf import settings
from django.core.cache import caches
from django.db import close_old_connections

from .engine import KeywordLinkProcessor, ProcessingConfig
from .engine.cache import ResultCache
from .engine.config import DEFAULT_EXCLUDED_TAGS
from .models import ContentItem


class ContentRepository:
    """Keyword declarations of :class:`ContentItem` rows."""

    def find_keyword_declarations(self) -> Iterator[Tuple[str, Any]]:
        """Yield ``(absolute url, declared keywords)`` for each declaring item.

        Declarations are passed through untouched; validating their shape is
        left to the engine so that one bad item only skips itself.
        """

        items = (
            ContentItem.objects
            .filter(seo__autolink__has_key='keywords')
            .only('path', 'seo')
            .order_by('path')
        )
        for item in items.iterator():
            yield item.get_absolute_url(), item.autolink_keywords


def build_processor() -> KeywordLinkProcessor:
    """Create the site's processor from the ``AUTOLINK_*`` settings."""

    config = ProcessingConfig(
        excluded_tags=set(getattr(settings, 'AUTOLINK_EXCLUDED_TAGS', DEFAULT_EXCLUDED_TAGS)),
        case_sensitive=getattr(settings, 'AUTOLINK_CASE_SENSITIVE', False),
        whole_words_only=getattr(settings, 'AUTOLINK_WHOLE_WORDS_ONLY', True),
    )
    return KeywordLinkProcessor(
        config,
        config_file=getattr(settings, 'AUTOLINK_CONFIG_FILE', None),
        repository=ContentRepository(),
        fragment_cache=ResultCache(
            'fragments',
            backend=caches[getattr(settings, 'AUTOLINK_FRAGMENT_CACHE', 'autolink_fragments')],
        ),
        link_cache=ResultCache(
            'links',
            backend=caches[getattr(settings, 'AUTOLINK_LINK_CACHE', 'autolink_links')],
        ),
    )


def refresh_outside_requests(processor: KeywordLinkProcessor) -> bool:
    """Refresh ``processor`` from a thread that never serves requests.

    Django only recycles database connections around requests, so the
    background refresh drops unusable or expired connections itself before
    and after each reload.
    """

    close_old_connections()
    try:
        return processor.refresh()
    finally:
        close_old_connections()
