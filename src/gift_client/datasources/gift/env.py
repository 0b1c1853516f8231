"""GIFT environmental data: variable/layer metadata and per-polygon values.

Two kinds of variables exist:
  - miscellaneous: one value per polygon (area, perimeter, biome, ...)
  - raster: summary statistics of a raster layer over each polygon
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from gift_client.datasources.gift import client
from gift_client.schemas import RasterSpec


def fetch_env_meta_misc(version: str) -> pd.DataFrame:
    """Metadata of miscellaneous variables (``variable`` column holds the names)."""
    return client.fetch_table("env_misc", version=version)


def fetch_env_meta_raster(version: str) -> pd.DataFrame:
    """Metadata of raster layers (``layer_name`` column holds the names)."""
    return client.fetch_table("env_raster", version=version)


def fetch_env_misc(variables: Sequence[str] | None, version: str) -> pd.DataFrame:
    """
    Miscellaneous variables for every polygon.

    Args:
        variables: Variable names; ``None`` or empty returns all of them.
        version: Resolved GIFT version.

    Returns:
        DataFrame with ``entity_ID, geo_entity`` and one column per variable.
    """
    params = {"envvar": list(variables)} if variables else None
    raw = client.fetch_table("geoentities_env_misc", params, version=version)
    out = client.to_numeric(raw, ["entity_ID"])
    if variables:
        # numeric-looking variables come back as strings
        for var in variables:
            if var in out.columns:
                converted = pd.to_numeric(out[var], errors="coerce")
                if converted.notna().sum() == out[var].notna().sum():
                    out[var] = converted
    return out


def fetch_env_raster(spec: RasterSpec, version: str) -> pd.DataFrame:
    """
    Summary statistics of one raster layer for every polygon.

    Returns:
        Long-format rows as sent by the API: ``entity_ID, layer_name`` and one
        column per requested statistic. See
        ``analysis.env_aggregation.widen_raster_table`` for the wide form.
    """
    params = {"layername": spec.layer, "sumstat": [str(s) for s in spec.statistics]}
    raw = client.fetch_table("geoentities_env_raster", params, version=version)
    return client.to_numeric(raw, ["entity_ID"])
