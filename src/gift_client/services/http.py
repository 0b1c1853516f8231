"""
Shared HTTP session for the GIFT API.

Requests go through an ``HTTPAdapter`` that retries throttled (429) and
gateway (502/503/504) responses with exponential backoff and applies the
configured timeout to every call that does not pass its own.

Usage::

    from gift_client.services.http import get_session

    resp = get_session().get("https://gift.uni-goettingen.de/api/index.php")
    resp.raise_for_status()
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from gift_client import __version__
from gift_client.config import Settings, get_settings

RETRY_STATUSES = (429, 502, 503, 504)


def build_retry(total: int, backoff_factor: float) -> Retry:
    """Retry policy for idempotent GIFT queries (GET only)."""
    return Retry(
        total=total,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,  # resp.raise_for_status() reports the final status
    )


class TimeoutHTTPAdapter(HTTPAdapter):
    """``HTTPAdapter`` with a default timeout."""

    def __init__(self, *args: Any, timeout: float, **kwargs: Any) -> None:
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(  # type: ignore[override]
        self, request: requests.PreparedRequest, **kwargs: Any
    ) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def create_session(
    settings: Settings | None = None,
    retry: Retry | None = None,
) -> requests.Session:
    """
    Build a session configured from ``settings``.

    Args:
        settings: Timeout and retry settings (default: ``get_settings()``).
        retry: Overrides the retry policy built from ``settings``.
    """
    settings = settings or get_settings()
    adapter = TimeoutHTTPAdapter(
        max_retries=retry or build_retry(settings.retry_total, settings.retry_backoff),
        timeout=settings.request_timeout,
    )
    s = requests.Session()
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers.update({"User-Agent": f"gift-client/{__version__}", "Accept": "application/json"})
    return s


@lru_cache
def get_session() -> requests.Session:
    """Process-wide session, created on first use."""
    return create_session()
