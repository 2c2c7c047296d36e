from __future__ import annotations

import logging
from typing import Callable, Iterable

from django.apps import apps
from django.conf import settings
from django.http import HttpRequest, HttpResponse

from .engine import KeywordLinkProcessor

logger = logging.getLogger(__name__)

DEFAULT_AUTOLINKED_ROUTES = ['autolinker:page']


class KeywordLinkMiddleware:
    """Content filter that links keywords in HTML responses of selected routes."""

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
        *,
        processor: KeywordLinkProcessor | None = None,
        routes: Iterable[str] | None = None,
    ) -> None:
        self.get_response = get_response
        self.processor = processor or apps.get_app_config('autolinker').processor
        if routes is None:
            routes = getattr(settings, 'AUTOLINKED_ROUTES', DEFAULT_AUTOLINKED_ROUTES)
        self.routes = set(routes)

    def __call__(self, request: HttpRequest) -> HttpResponse:
        response = self.get_response(request)

        resolved = getattr(request, 'resolver_match', None)
        if resolved is None:
            return response

        route_name = f"{resolved.namespace}:{resolved.url_name}" if resolved.namespace else resolved.url_name
        if route_name not in self.routes:
            return response

        if response.status_code != 200 or response.streaming:
            return response
        if 'text/html' not in response.get('Content-Type', ''):
            return response

        return self._link(response, route_name)

    def _link(self, response: HttpResponse, route_name: str) -> HttpResponse:
        charset = response.charset
        content = response.content.decode(charset)
        linked = self.processor.process(content)
        if linked == content:
            return response

        response.content = linked.encode(charset)
        if response.has_header('Content-Length'):
            response['Content-Length'] = str(len(response.content))
        logger.debug('Keyword links applied to %s response', route_name)
        return response


def keyword_link_middleware(get_response: Callable[[HttpRequest], HttpResponse]) -> KeywordLinkMiddleware:
    return KeywordLinkMiddleware(get_response)
