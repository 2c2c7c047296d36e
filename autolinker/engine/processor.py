"""Keyword link processor: the engine's public entry point."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Mapping, Optional

from .cache import ResultCache
from .config import ProcessingConfig
from .loader import KeywordConfiguration, KeywordRepository
from .locks import ReadWriteLock
from .replacer import TextReplacer
from .store import MINIMUM_KEYWORD_LENGTH, KeywordStore
from .types import Keyword
from .walker import HtmlTreeWalker

logger = logging.getLogger(__name__)


class KeywordLinkProcessor:
    """Link keyword occurrences in HTML content.

    A single instance is meant to be shared by every request of a process.
    Reads (``process``) run concurrently; reloading the keywords and
    registering new ones take an exclusive lock.

    Parameters
    ----------
    config:
        Matching options. A default :class:`ProcessingConfig` is used when
        omitted. A keyword file, when present, overrides its values.
    config_file:
        Optional path to the YAML keyword file. A missing file is allowed.
    repository:
        Optional content repository providing per-item keyword declarations.
    fragment_cache, link_cache:
        Result caches for processed text fragments and rendered anchors.
    """

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        *,
        config_file: str | Path | None = None,
        repository: Optional[KeywordRepository] = None,
        fragment_cache: Optional[ResultCache] = None,
        link_cache: Optional[ResultCache] = None,
    ) -> None:
        self.config = config or ProcessingConfig()
        self.store = KeywordStore(self.config)
        self.fragment_cache = fragment_cache or ResultCache("fragments")
        self.link_cache = link_cache or ResultCache("links")
        self.replacer = TextReplacer(self.store, self.fragment_cache, self.link_cache)
        self.walker = HtmlTreeWalker(self.config, self.replacer.replace_keywords)
        self._lock = ReadWriteLock()

        self.keyword_config: Optional[KeywordConfiguration] = None
        if config_file is not None or repository is not None:
            self.keyword_config = KeywordConfiguration(
                config_file,
                self._register,
                self.config,
                repository=repository,
            )
        self._stale = self.keyword_config is not None

    @property
    def keyword_count(self) -> int:
        return len(self.store)

    def add_keywords(
        self,
        url: str,
        *keywords: Optional[str],
        attributes: Optional[Mapping[str, str]] = None,
    ) -> None:
        with self._lock.write():
            self.store.add_keywords(url, *keywords, attributes=attributes)

    def accept(self, keyword: Keyword) -> None:
        """Register a :class:`Keyword` record."""

        self.add_keywords(keyword.url, *keyword.keywords, attributes=dict(keyword.attributes))

    def clear(self) -> None:
        with self._lock.write():
            self._clear()

    def mark_stale(self) -> None:
        """Force a reload of the keyword sources before the next ``process``."""

        self._stale = True

    def is_stale(self) -> bool:
        if self.keyword_config is None:
            return False
        return self._stale or self.keyword_config.is_update_necessary()

    def refresh(self, force: bool = True) -> bool:
        """Reload from the configured sources; return True when a reload ran.

        With ``force`` false the reload only happens when the sources are
        stale. :class:`~autolinker.engine.config.ConfigurationError`
        propagates; the store is left empty in that case.
        """

        if self.keyword_config is None:
            return False
        with self._lock.write():
            if not force and not self.is_stale():
                return False
            self._clear()
            self._stale = False
            try:
                with self.store.batch():
                    count = self.keyword_config.update()
            except Exception:
                self._stale = True
                raise
        logger.info("Keyword links reloaded: %d records, %d keywords", count, len(self.store))
        return True

    def start_periodic_refresh(
        self,
        interval: float,
        task: Optional[Callable[[], object]] = None,
    ) -> threading.Event:
        """Run ``task`` (default :meth:`refresh`) every ``interval`` seconds on a daemon thread.

        Set the returned event to stop the thread.
        """

        run = task or self.refresh
        stop = threading.Event()

        def _loop() -> None:
            while not stop.wait(interval):
                try:
                    run()
                except Exception:
                    logger.exception("Periodic keyword refresh failed")

        thread = threading.Thread(target=_loop, name="autolinker-refresh", daemon=True)
        thread.start()
        return stop

    def process(self, html_content: Optional[str]) -> Optional[str]:
        """Return ``html_content`` with keyword occurrences turned into links."""

        if html_content is None or len(html_content) < MINIMUM_KEYWORD_LENGTH:
            return html_content

        if self.is_stale():
            self.refresh(force=False)

        with self._lock.read():
            if not len(self.store):
                return html_content
            try:
                return self.walker.walk(html_content)
            except Exception:
                logger.exception("Keyword linking failed; returning content unchanged")
                return html_content

    def _register(self, keyword: Keyword) -> None:
        # Called by the loader while the write lock is already held.
        self.store.add_keywords(keyword.url, *keyword.keywords, attributes=dict(keyword.attributes))

    def _clear(self) -> None:
        self.store.clear()
        self.fragment_cache.invalidate_all()
        self.link_cache.invalidate_all()
