"""GIFT polygons: class/area metadata and precomputed pairwise overlaps."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from gift_client.datasources.gift import client
from gift_client.datasources.gift.env import fetch_env_misc
from gift_client.datasources.gift.lists import fetch_lists

OVERLAP_NUMERIC = ["entity1", "entity2", "overlap12", "overlap21"]


def fetch_overlap(version: str) -> pd.DataFrame:
    """
    Fetch precomputed overlaps between GIFT polygons.

    Returns:
        DataFrame with ``entity1, entity2, overlap12, overlap21`` where
        ``overlap12`` is the share of entity1's area covered by entity2 and
        ``overlap21`` the reverse.
    """
    raw = client.fetch_table("overlap", version=version, paginate=True)
    if raw.empty:
        return pd.DataFrame(columns=OVERLAP_NUMERIC)
    return client.to_numeric(raw, OVERLAP_NUMERIC)


def fetch_polygons(version: str, entity_ids: Iterable[int] | None = None) -> pd.DataFrame:
    """
    Polygon metadata needed to arbitrate overlaps.

    Combines the polygon class published with the checklist metadata and the
    ``area`` miscellaneous variable (km^2).

    Returns:
        DataFrame with ``entity_ID, geo_entity, entity_class, area``, one row
        per polygon.
    """
    lists = fetch_lists(version)
    classes = lists[["entity_ID", "entity_class"]].drop_duplicates("entity_ID")

    areas = fetch_env_misc(["area"], version)
    areas = areas[["entity_ID", "geo_entity", "area"]]

    polygons = areas.merge(classes, on="entity_ID", how="inner")
    if entity_ids is not None:
        polygons = polygons[polygons["entity_ID"].isin(list(entity_ids))]
    return polygons.sort_values("entity_ID").reset_index(drop=True)
