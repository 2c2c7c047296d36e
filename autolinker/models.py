"""Database models for the autolinker app.

Content items are the pages served by the site. Each one may declare, in
its ``seo`` metadata, keywords that other pages should link to it with::

    {"autolink": {"keywords": ["Widget", "widgets"]}}
"""

from __future__ import annotations

from django.db import models
from django.urls import reverse


class ContentItem(models.Model):
    """A page of HTML content addressed by its path."""

    path = models.CharField(max_length=255, unique=True)
    title = models.CharField(max_length=300)
    body = models.TextField(blank=True)
    seo = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['path']

    def __str__(self) -> str:  # pragma: no cover - convenience display
        return self.path

    def get_absolute_url(self) -> str:
        return reverse('autolinker:page', kwargs={'path': self.path})

    @property
    def autolink_keywords(self):
        """Raw value declared under ``seo.autolink.keywords`` (may be malformed)."""

        autolink = self.seo.get('autolink') if isinstance(self.seo, dict) else None
        if not isinstance(autolink, dict):
            return None
        return autolink.get('keywords')
