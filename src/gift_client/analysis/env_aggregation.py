"""Merge miscellaneous and raster environmental tables per polygon."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from functools import reduce
from typing import Any

import pandas as pd

from gift_client.errors import ValidationError
from gift_client.schemas import ENV_ID_COLUMNS, RasterSpec

logger = logging.getLogger(__name__)


def normalize_raster_specs(
    layers: Sequence[str] | None,
    sumstat: str | Sequence[str] | Sequence[Sequence[str]] = "mean",
) -> list[RasterSpec]:
    """
    Pair every raster layer with its summary statistics.

    ``sumstat`` is either one statistic / one list shared by all layers, or a
    list of lists with one entry per layer (in layer order).

    Raises:
        ValidationError: Unknown statistics or a per-layer list of the wrong length.
    """
    if not layers:
        return []
    if isinstance(sumstat, str):
        per_layer: list[Any] = [[sumstat]] * len(layers)
    elif sumstat and all(not isinstance(s, str) for s in sumstat):
        per_layer = list(sumstat)
        if len(per_layer) != len(layers):
            raise ValidationError(
                f"sumstat has {len(per_layer)} entries but {len(layers)} raster layers were given"
            )
    else:
        per_layer = [list(sumstat)] * len(layers)
    return [
        RasterSpec.from_options(layer, stats)
        for layer, stats in zip(layers, per_layer, strict=True)
    ]


def validate_env_request(
    miscellaneous: Sequence[str] | None,
    raster_specs: Sequence[RasterSpec],
    misc_meta: pd.DataFrame,
    raster_meta: pd.DataFrame,
) -> None:
    """Check requested variable and layer names against the env metadata.

    Raises:
        ValidationError: A name is not published by GIFT.
    """
    if miscellaneous:
        known = set(misc_meta["variable"]) if "variable" in misc_meta else set()
        unknown = [v for v in miscellaneous if v not in known]
        if unknown:
            raise ValidationError(
                f"Unknown miscellaneous variable(s): {', '.join(unknown)}; "
                "see fetch_env_meta_misc() for the available ones"
            )
    if raster_specs:
        known = set(raster_meta["layer_name"]) if "layer_name" in raster_meta else set()
        unknown = [s.layer for s in raster_specs if s.layer not in known]
        if unknown:
            raise ValidationError(
                f"Unknown raster layer(s): {', '.join(unknown)}; "
                "see fetch_env_meta_raster() for the available ones"
            )


def widen_raster_table(raw: pd.DataFrame, spec: RasterSpec) -> pd.DataFrame:
    """
    Long raster rows into one numeric column per statistic.

    Returns:
        DataFrame with ``entity_ID`` and ``<stat>_<layer>`` columns, one row
        per polygon.
    """
    columns = ["entity_ID", *spec.column_names]
    if raw.empty:
        return pd.DataFrame(columns=columns)

    rows = raw
    if "layer_name" in rows.columns:
        rows = rows[rows["layer_name"] == spec.layer]
    stats = [str(s) for s in spec.statistics]
    absent = [s for s in stats if s not in rows.columns]
    if absent:
        raise ValidationError(
            f"raster table for {spec.layer!r} lacks statistic column(s): {', '.join(absent)}"
        )

    renames = dict(zip(stats, spec.column_names, strict=True))
    wide = rows[["entity_ID", *stats]].rename(columns=renames)
    wide = wide.assign(entity_ID=pd.to_numeric(wide["entity_ID"], errors="coerce"))
    for col in spec.column_names:
        wide[col] = pd.to_numeric(wide[col], errors="coerce")
    return wide.drop_duplicates("entity_ID").reset_index(drop=True)


def drop_empty_rows(table: pd.DataFrame) -> pd.DataFrame:
    """Drop rows whose only non-null values are identifier columns."""
    data_cols = [c for c in table.columns if c not in ENV_ID_COLUMNS]
    if not data_cols:
        return table.iloc[0:0].copy()
    return table[table[data_cols].notna().any(axis=1)]


def aggregate_env(
    entity_ids: Iterable[int] | None,
    misc_table: pd.DataFrame,
    raster_tables: Sequence[pd.DataFrame] = (),
) -> pd.DataFrame:
    """
    Join environmental tables on ``entity_ID``.

    Args:
        entity_ids: Polygons to keep; ``None`` keeps every polygon.
        misc_table: Miscellaneous variables (``entity_ID, geo_entity, ...``).
        raster_tables: Wide raster tables (see ``widen_raster_table``), in the
            order their columns should appear.

    Returns:
        One row per polygon: miscellaneous columns first, then raster columns
        in the given order. Polygons missing from a table get nulls there;
        polygons without any value are dropped.
    """
    if misc_table.empty and "entity_ID" not in misc_table.columns:
        # no misc rows: raster tables alone decide the polygons
        misc_table = pd.DataFrame(
            {"entity_ID": pd.Series(dtype="float64"), "geo_entity": pd.Series(dtype="object")}
        )
    if "entity_ID" not in misc_table.columns:
        raise ValidationError("miscellaneous table has no entity_ID column")
    tables = [misc_table.assign(entity_ID=pd.to_numeric(misc_table["entity_ID"], errors="coerce"))]
    for raster in raster_tables:
        # names come from the misc table
        raster = raster.drop(columns=[c for c in ("geo_entity",) if c in raster.columns])
        tables.append(raster.assign(entity_ID=pd.to_numeric(raster["entity_ID"], errors="coerce")))

    merged = reduce(lambda left, right: left.merge(right, on="entity_ID", how="outer"), tables)
    merged = drop_empty_rows(merged)

    if entity_ids is not None:
        merged = merged[merged["entity_ID"].isin(list(entity_ids))]

    merged = merged.sort_values("entity_ID").reset_index(drop=True)
    logger.debug(
        "Aggregated %d table(s) into %d polygons x %d columns",
        len(tables),
        len(merged),
        merged.shape[1],
    )
    return merged
