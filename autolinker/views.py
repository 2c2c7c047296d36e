"""Django views for the autolinker app.

Pages are rendered plainly here; keyword links are added afterwards by
:class:`~autolinker.middleware.KeywordLinkMiddleware` for the routes listed
in ``AUTOLINKED_ROUTES``.
"""

from __future__ import annotations

from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, render

from .models import ContentItem


def home(request: HttpRequest) -> HttpResponse:
    """List every content item."""

    return render(request, 'autolinker/home.html', {'items': ContentItem.objects.all()})


def page(request: HttpRequest, path: str) -> HttpResponse:
    """Render a single content item by its path."""

    item = get_object_or_404(ContentItem, path=path)
    return render(request, 'autolinker/page.html', {'item': item})
