"""GIFT taxonomy table (nested-set bounds for every higher taxon)."""

from __future__ import annotations

import pandas as pd

from gift_client.datasources.gift import client

TAXONOMY_NUMERIC = ["taxon_ID", "lft", "rgt"]


def fetch_taxonomy(version: str) -> pd.DataFrame:
    """
    Fetch the taxonomy table.

    Args:
        version: Resolved GIFT version.

    Returns:
        DataFrame with ``taxon_ID, taxon_name, taxon_author, taxon_lvl, lft, rgt``.
    """
    raw = client.fetch_table("taxonomy", version=version)
    return client.to_numeric(raw, TAXONOMY_NUMERIC)
