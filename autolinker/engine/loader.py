"""Sources that feed keyword declarations into the engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol, Tuple

from .config import ProcessingConfig, load_keyword_file
from .types import Keyword

logger = logging.getLogger(__name__)


class KeywordRepository(Protocol):
    """Content store able to report per-item keyword declarations."""

    def find_keyword_declarations(self) -> Iterable[Tuple[str, Any]]:
        """Yield ``(url, declared keywords)`` for every item declaring any."""


class KeywordConfiguration:
    """Keyword file plus content repository, pushed into a consumer on update.

    The file is polled by modification time. The repository has no change
    signal of its own and is therefore re-read on every :meth:`update`.
    """

    def __init__(
        self,
        config_file: str | Path | None,
        consumer: Callable[[Keyword], None],
        config: ProcessingConfig,
        repository: Optional[KeywordRepository] = None,
    ) -> None:
        self.config_file = Path(config_file) if config_file is not None else None
        self.consumer = consumer
        self.config = config
        self.repository = repository
        self.last_modified: Optional[int] = None

    def is_update_necessary(self) -> bool:
        """Return True when the keyword file appeared or changed since the last read."""

        if self.config_file is None:
            return False
        try:
            if not self.config_file.exists():
                return False
            modified = self.config_file.stat().st_mtime_ns
        except OSError:
            logger.debug("Could not stat keyword file %s", self.config_file, exc_info=True)
            return False
        return self.last_modified is None or modified != self.last_modified

    def update(self) -> int:
        """Load both sources into the consumer and return the records pushed."""

        count = self._update_from_file()
        count += self._update_from_repository()
        return count

    def _update_from_file(self) -> int:
        if self.config_file is None or not self.config_file.exists():
            return 0

        try:
            modified = self.config_file.stat().st_mtime_ns
        except FileNotFoundError:
            return 0
        parsed = load_keyword_file(self.config_file)
        self.config.update(
            case_sensitive=parsed.case_sensitive,
            whole_words_only=parsed.whole_words_only,
            excluded_tags=parsed.excluded_tags,
        )
        for keyword in parsed.keywords:
            self.consumer(keyword)
        self.last_modified = modified

        logger.info("Loaded %d keyword entries from %s", len(parsed.keywords), self.config_file)
        return len(parsed.keywords)

    def _update_from_repository(self) -> int:
        if self.repository is None:
            return 0

        count = 0
        for url, declared in self.repository.find_keyword_declarations():
            keywords = _valid_declaration(declared)
            if keywords is None:
                logger.warning("Skipping malformed autolink keywords declared by %s: %r", url, declared)
                continue
            self.consumer(Keyword.create(url, keywords))
            count += 1
        if count:
            logger.info("Loaded %d keyword entries from the content repository", count)
        return count


def _valid_declaration(declared: Any) -> Optional[Tuple[str, ...]]:
    if not isinstance(declared, (list, tuple)):
        return None
    if not all(isinstance(keyword, str) for keyword in declared):
        return None
    return tuple(declared)
