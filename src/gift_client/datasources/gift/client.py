"""GIFT API client: endpoint construction, version resolution and transport.

API: https://gift.uni-goettingen.de/api/extended/index{version}.php?query=...

Every fetch needs an explicit, already-resolved version string. ``"latest"``
is resolved once by calling ``resolve_version()``; passing it straight to a
fetch function is a ``ValidationError`` so nothing triggers a hidden lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import pandas as pd
import requests

from gift_client.config import get_settings
from gift_client.errors import TransportError, ValidationError
from gift_client.services.http import get_session

logger = logging.getLogger(__name__)

GIFT_API = "https://gift.uni-goettingen.de/api/extended/"
VERSIONS_URL = "https://gift.uni-goettingen.de/api/index.php"

#: Rows returned per page by the paginated queries.
DEFAULT_PAGE_SIZE = 10000

LATEST = "latest"
BETA = "beta"


def endpoint(version: str, api: str | None = None) -> str:
    """URL of the versioned index script. ``beta`` is the unversioned one."""
    if not version or version == LATEST:
        raise ValidationError(
            "GIFT version must be resolved before querying; call resolve_version() first"
        )
    api = api or get_settings().api_url
    if not api.endswith("/"):
        api += "/"
    suffix = "" if version == BETA else version
    return f"{api}index{suffix}.php"


def _encode(params: dict[str, Any]) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, Iterable) and not isinstance(value, str | bytes):
            value = ",".join(str(v) for v in value)
        encoded[key] = value
    return encoded


def get_json(url: str, params: dict[str, Any]) -> list[dict[str, Any]]:
    """GET ``url`` and return the decoded rows.

    Raises:
        TransportError: On network/HTTP failure or a body that is not JSON rows.
    """
    logger.debug("GET %s %s", url, params)
    try:
        resp = get_session().get(url, params=params)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise TransportError(f"GIFT request {params.get('query')!r} failed: {exc}") from exc

    if payload is None:
        return []
    if isinstance(payload, dict):
        return [payload]
    if not isinstance(payload, list):
        raise TransportError(
            f"GIFT request {params.get('query')!r} returned {type(payload).__name__}, "
            "expected a list of rows"
        )
    return payload


def fetch_json(
    query: str,
    params: dict[str, Any] | None = None,
    *,
    version: str,
    api: str | None = None,
) -> list[dict[str, Any]]:
    """Run one GIFT query and return its rows as dicts."""
    full = {"query": query, **_encode(params or {})}
    return get_json(endpoint(version, api), full)


def fetch_table(
    query: str,
    params: dict[str, Any] | None = None,
    *,
    version: str,
    api: str | None = None,
    paginate: bool = False,
    page_size: int | None = None,
) -> pd.DataFrame:
    """Run a GIFT query and return the rows as a DataFrame.

    With ``paginate=True`` the query is repeated with an increasing
    ``startat`` offset until a page shorter than ``page_size`` comes back.
    """
    if not paginate:
        return pd.DataFrame(fetch_json(query, params, version=version, api=api))

    page_size = page_size or get_settings().page_size
    rows: list[dict[str, Any]] = []
    startat = 0
    while True:
        page = fetch_json(query, {**(params or {}), "startat": startat}, version=version, api=api)
        rows.extend(page)
        logger.debug("query=%s startat=%d -> %d rows", query, startat, len(page))
        if len(page) < page_size:
            break
        startat += page_size
    return pd.DataFrame(rows)


def to_numeric(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Return a copy with the given (present) columns coerced to numbers.

    Values that cannot be parsed become NaN.
    """
    out = df.copy()
    for col in columns:
        if col in out.columns:
            out[col] = pd.to_numeric(out[col], errors="coerce")
    return out


# =============================================================================
# Versions
# =============================================================================


def fetch_versions(url: str | None = None) -> pd.DataFrame:
    """Published GIFT database versions, oldest first."""
    url = url or get_settings().versions_url
    return pd.DataFrame(get_json(url, {"query": "versions"}))


def resolve_version(requested: str = LATEST, versions: pd.DataFrame | None = None) -> str:
    """Turn a user-facing version (``latest``, ``beta`` or ``"3.2"``) into a concrete one.

    Args:
        requested: Version asked for.
        versions: Output of ``fetch_versions()``; fetched when omitted and needed.

    Raises:
        ValidationError: Unknown version.
    """
    if not isinstance(requested, str) or not requested:
        raise ValidationError("GIFT version must be a non-empty string")
    if requested == BETA:
        logger.warning(
            "Using the beta version of GIFT, which is subject to edits; "
            "prefer 'latest' for a stable version."
        )
        return BETA

    if versions is None:
        versions = fetch_versions()
    if versions.empty or "version" not in versions.columns:
        raise TransportError("GIFT returned no version list")
    available = [str(v) for v in versions["version"]]

    if requested == LATEST:
        resolved = available[-1]
        logger.info("Resolved GIFT version 'latest' -> %s", resolved)
        return resolved
    if requested not in available:
        raise ValidationError(
            f"Unknown GIFT version {requested!r}. Available: latest, beta, {', '.join(available)}"
        )
    return requested
