"""Removal of overlapping polygons.

When two candidate polygons overlap by at least ``overlap_th`` (in either
direction) only one of them is kept:

  - the smaller polygon is kept if its area reaches the area threshold of
    its class (``area_th_island`` for islands, ``area_th_mainland`` for every
    other class) - it is informative enough on its own;
  - otherwise the larger polygon is kept;
  - equal areas keep the lower ``entity_ID``.

Pairs are resolved from an explicit worklist until no conflicting pair is
left among the retained polygons.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

import geopandas as gpd
import pandas as pd

from gift_client import geometry
from gift_client.errors import NotFoundError, ValidationError
from gift_client.schemas import EntityClass, OverlapPair

logger = logging.getLogger(__name__)

DEFAULT_AREA_TH_MAINLAND = 100.0
DEFAULT_AREA_TH_ISLAND = 0.0
DEFAULT_OVERLAP_TH = 0.1

OVERLAP_COLUMNS = ["entity1", "entity2", "overlap12", "overlap21"]


@dataclass
class OverlapResolution:
    """Outcome of ``remove_overlap``."""

    retained: list[int]
    removed: list[int]
    #: removed entity_ID -> entity_ID it lost against
    replaced_by: dict[int, int] = field(default_factory=dict)


def check_thresholds(area_th_mainland: float, area_th_island: float, overlap_th: float) -> None:
    """Raise ``ValidationError`` for negative areas or an overlap share outside [0, 1]."""
    for name, value in (("area_th_mainland", area_th_mainland), ("area_th_island", area_th_island)):
        if pd.isna(value) or value < 0:
            raise ValidationError(f"{name} must be a non-negative number, got {value!r}")
    if pd.isna(overlap_th) or not 0 <= overlap_th <= 1:
        raise ValidationError(f"overlap_th must lie in [0, 1], got {overlap_th!r}")


def overlap_pairs(
    overlaps: pd.DataFrame, entity_ids: Iterable[int] | None = None
) -> list[OverlapPair]:
    """Split the wide overlap table into directional pairs.

    Shares are coerced to numbers and clipped to [0, 1].
    Rows with a missing share are skipped for that direction. With
    ``entity_ids`` only rows between two of those polygons are kept.
    """
    missing = [c for c in OVERLAP_COLUMNS if c not in overlaps.columns]
    if missing:
        raise ValidationError(f"overlap table is missing columns: {', '.join(missing)}")

    table = overlaps[OVERLAP_COLUMNS].apply(pd.to_numeric, errors="coerce")
    if entity_ids is not None:
        ids = list(entity_ids)
        table = table[table["entity1"].isin(ids) & table["entity2"].isin(ids)]
    table = table.assign(
        overlap12=table["overlap12"].clip(0, 1), overlap21=table["overlap21"].clip(0, 1)
    )

    pairs: list[OverlapPair] = []
    for e1, e2, o12, o21 in table.itertuples(index=False):
        if pd.isna(e1) or pd.isna(e2) or e1 == e2:
            continue
        if not pd.isna(o12):
            pairs.append(OverlapPair(entity_a=int(e1), entity_b=int(e2), overlap_pct=float(o12)))
        if not pd.isna(o21):
            pairs.append(OverlapPair(entity_a=int(e2), entity_b=int(e1), overlap_pct=float(o21)))
    return pairs


def _conflicts(
    pairs: Iterable[OverlapPair], candidates: set[int], overlap_th: float
) -> list[tuple[int, int]]:
    """Unordered pairs ``(low, high)`` of candidates overlapping by >= ``overlap_th``."""
    found: set[tuple[int, int]] = set()
    for pair in pairs:
        if pair.entity_a not in candidates or pair.entity_b not in candidates:
            continue
        if pair.overlap_pct >= overlap_th:
            found.add((min(pair.entity_a, pair.entity_b), max(pair.entity_a, pair.entity_b)))
    return sorted(found)


def _polygon_info(polygons: pd.DataFrame, ids: list[int]) -> dict[int, tuple[float, str]]:
    missing_cols = [c for c in ("entity_ID", "area", "entity_class") if c not in polygons.columns]
    if missing_cols:
        raise ValidationError(f"polygon table is missing columns: {', '.join(missing_cols)}")

    table = polygons.assign(entity_ID=pd.to_numeric(polygons["entity_ID"], errors="coerce"))
    table = table.dropna(subset=["entity_ID"]).drop_duplicates("entity_ID")
    info: dict[int, tuple[float, str]] = {}
    for entity_id, area, entity_class in table[["entity_ID", "area", "entity_class"]].itertuples(
        index=False
    ):
        info[int(entity_id)] = (float(pd.to_numeric(area, errors="coerce")), str(entity_class))

    unknown = [i for i in ids if i not in info or pd.isna(info[i][0])]
    if unknown:
        raise NotFoundError(f"No area/class for entity_ID(s): {', '.join(map(str, unknown))}")
    return info


def _loser(
    a: int,
    b: int,
    info: dict[int, tuple[float, str]],
    area_th_mainland: float,
    area_th_island: float,
) -> int:
    area_a, area_b = info[a][0], info[b][0]
    if area_a == area_b:
        return max(a, b)
    smaller, larger = (a, b) if area_a < area_b else (b, a)
    area_small, class_small = info[smaller]
    threshold = area_th_island if class_small == EntityClass.ISLAND else area_th_mainland
    return larger if area_small >= threshold else smaller


def remove_overlap(
    entity_ids: Iterable[int],
    polygons: pd.DataFrame,
    overlaps: pd.DataFrame,
    area_th_mainland: float = DEFAULT_AREA_TH_MAINLAND,
    area_th_island: float = DEFAULT_AREA_TH_ISLAND,
    overlap_th: float = DEFAULT_OVERLAP_TH,
) -> OverlapResolution:
    """
    Drop redundant polygons from ``entity_ids``.

    Args:
        entity_ids: Candidate polygons.
        polygons: Table with ``entity_ID, area, entity_class``.
        overlaps: Table with ``entity1, entity2, overlap12, overlap21``;
            pairs involving non-candidates are ignored.
        area_th_mainland: Minimum area for a smaller non-island polygon to be kept.
        area_th_island: Minimum area for a smaller island to be kept.
        overlap_th: Share of either polygon's area that makes a pair conflict.

    Returns:
        ``OverlapResolution`` with sorted retained and removed IDs.

    Raises:
        ValidationError: Invalid thresholds or tables.
        NotFoundError: A candidate has no area/class in ``polygons``.
    """
    check_thresholds(area_th_mainland, area_th_island, overlap_th)
    ids = sorted({int(i) for i in entity_ids})
    info = _polygon_info(polygons, ids)
    pairs = overlap_pairs(overlaps, ids)

    candidates = set(ids)
    replaced_by: dict[int, int] = {}
    rounds = 0
    while True:
        queue = deque(_conflicts(pairs, candidates, overlap_th))
        if not queue:
            break
        rounds += 1
        while queue:
            a, b = queue.popleft()
            if a not in candidates or b not in candidates:
                continue
            loser = _loser(a, b, info, area_th_mainland, area_th_island)
            winner = b if loser == a else a
            candidates.discard(loser)
            replaced_by[loser] = winner
            logger.debug(
                "entity %d (area %.1f) dropped in favour of %d (area %.1f)",
                loser,
                info[loser][0],
                winner,
                info[winner][0],
            )

    removed = sorted(replaced_by)
    if removed:
        logger.info(
            "Removed %d overlapping polygon(s) in %d round(s): %s",
            len(removed),
            rounds,
            ", ".join(map(str, removed)),
        )
    return OverlapResolution(retained=sorted(candidates), removed=removed, replaced_by=replaced_by)


def compute_overlap_pairs(polygons: gpd.GeoDataFrame) -> pd.DataFrame:
    """
    Overlap table computed from geometries.

    Use when no precomputed table is available. ``polygons`` needs an
    ``entity_ID`` column and should be in an equal-area CRS.

    Returns:
        DataFrame with ``entity1, entity2, overlap12, overlap21`` for every
        intersecting pair (``entity1 < entity2``).
    """
    if polygons.empty:
        return pd.DataFrame(columns=OVERLAP_COLUMNS)

    gdf = polygons.reset_index(drop=True)
    left, right = gdf.sindex.query(gdf.geometry, predicate="intersects")
    rows = []
    for i, j in zip(left, right, strict=True):
        if i >= j:
            continue
        geom_i, geom_j = gdf.geometry.iloc[i], gdf.geometry.iloc[j]
        shared = geometry.intersection_area(geom_i, geom_j)
        area_i, area_j = geometry.area(geom_i), geometry.area(geom_j)
        e_i, e_j = int(gdf["entity_ID"].iloc[i]), int(gdf["entity_ID"].iloc[j])
        o_ij = min(shared / area_i, 1.0) if area_i > 0 else 0.0
        o_ji = min(shared / area_j, 1.0) if area_j > 0 else 0.0
        if e_i > e_j:
            e_i, e_j, o_ij, o_ji = e_j, e_i, o_ji, o_ij
        rows.append({"entity1": e_i, "entity2": e_j, "overlap12": o_ij, "overlap21": o_ji})

    return (
        pd.DataFrame(rows, columns=OVERLAP_COLUMNS)
        .sort_values(["entity1", "entity2"])
        .reset_index(drop=True)
    )
