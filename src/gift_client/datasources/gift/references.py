"""GIFT reference metadata (one row per source publication/database)."""

from __future__ import annotations

import pandas as pd

from gift_client.datasources.gift import client

REFERENCE_NUMERIC = [
    "ref_ID",
    "taxon_ID",
    "checklist",
    "native_indicated",
    "natural_indicated",
    "end_ref",
    "traits",
    "restricted",
]


def fetch_references(version: str) -> pd.DataFrame:
    """
    Fetch the metadata of every reference accessible in GIFT.

    Args:
        version: Resolved GIFT version.

    Returns:
        DataFrame with ``ref_ID, ref_long, geo_entity_ref, type, subset,
        taxon_ID, taxon_name, checklist, native_indicated, natural_indicated,
        end_ref, traits, restricted, proc_date``. ``restricted`` is only
        present in versions that publish it.
    """
    raw = client.fetch_table("references", version=version)
    return client.to_numeric(raw, REFERENCE_NUMERIC)
