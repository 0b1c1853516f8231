"""GIFT checklist metadata: one row per (reference, list, polygon, taxon)."""

from __future__ import annotations

import pandas as pd

from gift_client.datasources.gift import client

#: Columns the API sends as strings but which hold IDs or 0/1 flags.
LIST_NUMERIC = [
    "ref_ID",
    "list_ID",
    "entity_ID",
    "taxon_ID",
    "native_indicated",
    "natural_indicated",
    "end_ref",
    "end_list",
    "restricted",
    "suit_geo",
]


def fetch_lists(version: str) -> pd.DataFrame:
    """
    Fetch the metadata of every checklist.

    Args:
        version: Resolved GIFT version.

    Returns:
        DataFrame with ``ref_ID, type, subset, native_indicated,
        natural_indicated, end_ref, restricted, taxon_ID, list_ID, end_list,
        entity_ID, geo_entity, suit_geo, entity_class, entity_type``.
    """
    raw = client.fetch_table("lists", version=version)
    return client.to_numeric(raw, LIST_NUMERIC)
