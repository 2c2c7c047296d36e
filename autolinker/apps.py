from functools import partial

from django.apps import AppConfig
from django.conf import settings
from django.db.models.signals import post_delete, post_save


class AutolinkerConfig(AppConfig):
    """Configuration for the autolinker Django app.

    Owns the process-wide :class:`~autolinker.engine.KeywordLinkProcessor`;
    callers reach it through ``apps.get_app_config('autolinker').processor``.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'autolinker'
    processor = None

    def ready(self) -> None:
        from .models import ContentItem
        from .services import build_processor, refresh_outside_requests

        self.processor = build_processor()
        post_save.connect(self._content_changed, sender=ContentItem, dispatch_uid='autolinker-content-saved')
        post_delete.connect(self._content_changed, sender=ContentItem, dispatch_uid='autolinker-content-deleted')

        interval = getattr(settings, 'AUTOLINK_REFRESH_INTERVAL', 0)
        if interval > 0:
            self.processor.start_periodic_refresh(
                interval,
                task=partial(refresh_outside_requests, self.processor),
            )

    def _content_changed(self, sender, **kwargs) -> None:
        if self.processor is not None:
            self.processor.mark_stale()
