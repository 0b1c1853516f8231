"""Tests for the GIFT transport: endpoints, pagination, versions, errors."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from gift_client.datasources.gift import client
from gift_client.errors import TransportError, ValidationError

API = "https://gift.uni-goettingen.de/api/extended/"

VERSIONS = pd.DataFrame({"version": ["1.0", "2.0", "3.2"]})


def _patch_get(**kwargs: Any) -> Any:
    return patch.object(client.get_session(), "get", **kwargs)


def _response(payload: object, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


class TestEndpoint:
    """URL construction for versioned index scripts."""

    def test_versioned(self) -> None:
        assert client.endpoint("3.2", API) == f"{API}index3.2.php"

    def test_beta_is_unversioned(self) -> None:
        assert client.endpoint("beta", API) == f"{API}index.php"

    def test_adds_trailing_slash(self) -> None:
        assert client.endpoint("3.2", API.rstrip("/")) == f"{API}index3.2.php"

    def test_latest_must_be_resolved(self) -> None:
        with pytest.raises(ValidationError, match="resolve_version"):
            client.endpoint("latest", API)


class TestFetchJson:
    """Single-request transport."""

    def test_returns_rows_and_sends_query(self) -> None:
        rows = [{"entity_ID": "1"}, {"entity_ID": "2"}]
        with _patch_get(return_value=_response(rows)) as mock_get:
            result = client.fetch_json("lists", version="3.2", api=API)

        assert result == rows
        url = mock_get.call_args[0][0]
        params = mock_get.call_args[1]["params"]
        assert url == f"{API}index3.2.php"
        assert params["query"] == "lists"

    def test_joins_list_params(self) -> None:
        with _patch_get(return_value=_response([])) as mock_get:
            client.fetch_json("geoentities_env_misc", {"envvar": ["area", "biome"]}, version="3.2")

        assert mock_get.call_args[1]["params"]["envvar"] == "area,biome"

    def test_drops_none_params(self) -> None:
        with _patch_get(return_value=_response([])) as mock_get:
            client.fetch_json("lists", {"envvar": None}, version="3.2")

        assert "envvar" not in mock_get.call_args[1]["params"]

    def test_null_body_is_empty(self) -> None:
        with _patch_get(return_value=_response(None)):
            assert client.fetch_json("lists", version="3.2") == []

    def test_http_error_becomes_transport_error(self) -> None:
        with (
            _patch_get(return_value=_response([], status=500)),
            pytest.raises(TransportError, match="lists"),
        ):
            client.fetch_json("lists", version="3.2")

    def test_connection_error_becomes_transport_error(self) -> None:
        with (
            _patch_get(side_effect=requests.ConnectionError("down")),
            pytest.raises(TransportError),
        ):
            client.fetch_json("lists", version="3.2")

    def test_invalid_json_becomes_transport_error(self) -> None:
        resp = _response(None)
        resp.json.side_effect = ValueError("not json")
        with (
            _patch_get(return_value=resp),
            pytest.raises(TransportError),
        ):
            client.fetch_json("lists", version="3.2")

    def test_scalar_body_rejected(self) -> None:
        with (
            _patch_get(return_value=_response("oops")),
            pytest.raises(TransportError, match="expected a list"),
        ):
            client.fetch_json("lists", version="3.2")


class TestFetchTable:
    """DataFrame wrapper and startat pagination."""

    def test_single_page(self) -> None:
        with patch.object(client, "fetch_json", return_value=[{"a": 1}, {"a": 2}]) as mock_fetch:
            df = client.fetch_table("taxonomy", version="3.2")

        assert list(df["a"]) == [1, 2]
        mock_fetch.assert_called_once()

    def test_paginates_until_short_page(self) -> None:
        pages = [[{"a": 1}, {"a": 2}], [{"a": 3}, {"a": 4}], [{"a": 5}]]
        with patch.object(client, "fetch_json", side_effect=pages) as mock_fetch:
            df = client.fetch_table("overlap", version="3.2", paginate=True, page_size=2)

        assert list(df["a"]) == [1, 2, 3, 4, 5]
        offsets = [c.args[1]["startat"] for c in mock_fetch.call_args_list]
        assert offsets == [0, 2, 4]

    def test_pagination_stops_on_empty_page(self) -> None:
        pages = [[{"a": 1}, {"a": 2}], []]
        with patch.object(client, "fetch_json", side_effect=pages):
            df = client.fetch_table("overlap", version="3.2", paginate=True, page_size=2)

        assert len(df) == 2

    def test_transport_error_propagates(self) -> None:
        with (
            patch.object(client, "fetch_json", side_effect=TransportError("boom")),
            pytest.raises(TransportError),
        ):
            client.fetch_table("overlap", version="3.2", paginate=True)


class TestToNumeric:
    """Numeric coercion of API string columns."""

    def test_coerces_present_columns_only(self) -> None:
        df = pd.DataFrame({"entity_ID": ["1", "2"], "suit_geo": ["1", None], "name": ["a", "b"]})
        out = client.to_numeric(df, ["entity_ID", "suit_geo", "missing"])

        assert list(out["entity_ID"]) == [1, 2]
        assert out["suit_geo"].iloc[0] == 1
        assert pd.isna(out["suit_geo"].iloc[1])
        assert df["entity_ID"].iloc[0] == "1"  # input untouched


class TestResolveVersion:
    """Explicit version resolution."""

    def test_latest_is_last_published(self) -> None:
        assert client.resolve_version("latest", VERSIONS) == "3.2"

    def test_known_version_passes_through(self) -> None:
        assert client.resolve_version("2.0", VERSIONS) == "2.0"

    def test_unknown_version(self) -> None:
        with pytest.raises(ValidationError, match="9.9"):
            client.resolve_version("9.9", VERSIONS)

    def test_beta_skips_lookup(self) -> None:
        with patch.object(client, "fetch_versions") as mock_versions:
            assert client.resolve_version("beta") == "beta"
            mock_versions.assert_not_called()

    def test_fetches_versions_when_not_given(self) -> None:
        with patch.object(client, "fetch_versions", return_value=VERSIONS) as mock_versions:
            assert client.resolve_version("latest") == "3.2"
            mock_versions.assert_called_once()

    def test_empty_string_rejected(self) -> None:
        with pytest.raises(ValidationError):
            client.resolve_version("", VERSIONS)
