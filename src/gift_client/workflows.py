"""
Top-level retrieval workflows: fetch from GIFT, then apply the analysis.

Every workflow takes an already-resolved GIFT version (see
``datasources.gift.resolve_version``). Tables the caller already holds can
be passed in to skip the corresponding fetch.

Example::

    from gift_client import workflows
    from gift_client.datasources.gift import resolve_version

    version = resolve_version("latest")
    lists = workflows.checklist_conditional({"taxon_name": "Angiospermae"}, version)
    env = workflows.get_env(lists["entity_ID"].unique(), ["area"], [], version)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import geopandas as gpd
import pandas as pd
from shapely.geometry.base import BaseGeometry

from gift_client.analysis.checklist_filter import filter_checklists
from gift_client.analysis.deoverlap import (
    DEFAULT_AREA_TH_ISLAND,
    DEFAULT_AREA_TH_MAINLAND,
    DEFAULT_OVERLAP_TH,
    OverlapResolution,
    check_thresholds,
    remove_overlap,
)
from gift_client.analysis.env_aggregation import (
    aggregate_env,
    validate_env_request,
    widen_raster_table,
)
from gift_client.analysis.overlap_classifier import select_entities
from gift_client.config import get_settings
from gift_client.datasources.gift import env as gift_env
from gift_client.datasources.gift import geoentities, lists, taxonomy
from gift_client.errors import DataConsistencyError
from gift_client.schemas import ChecklistCriteria, OverlapMode, RasterSpec

logger = logging.getLogger(__name__)


def _report_empty(what: str, requested: Sequence[int], strict: bool) -> None:
    message = f"{what}: none of the {len(requested)} requested entity_ID(s) matched"
    if strict:
        raise DataConsistencyError(message)
    logger.warning(message)


def checklist_conditional(
    criteria: ChecklistCriteria | Mapping[str, Any],
    version: str,
    *,
    list_set: pd.DataFrame | None = None,
    taxonomy_table: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """
    Checklists of the polygons jointly fulfilling ``criteria``.

    Args:
        criteria: Filters (see ``ChecklistCriteria``).
        version: Resolved GIFT version.
        list_set: Checklist metadata; fetched when omitted.
        taxonomy_table: Taxonomy; fetched when omitted.
    """
    # Validate before touching the network
    if not isinstance(criteria, ChecklistCriteria):
        criteria = ChecklistCriteria.from_options(**dict(criteria))

    if list_set is None:
        list_set = lists.fetch_lists(version)
    if taxonomy_table is None:
        taxonomy_table = taxonomy.fetch_taxonomy(version)
    return filter_checklists(list_set, criteria, taxonomy_table)


def get_env(
    entity_ids: Iterable[int] | None,
    miscellaneous: Sequence[str] | None,
    raster_specs: Sequence[RasterSpec],
    version: str,
    *,
    max_workers: int | None = None,
    strict: bool = False,
) -> pd.DataFrame:
    """
    Environmental variables per polygon.

    Raster layers are fetched concurrently; a failure of any one of them
    aborts the whole call.

    Args:
        entity_ids: Polygons to return; ``None`` returns all of them.
        miscellaneous: Miscellaneous variable names (``None``/empty: all).
        raster_specs: Raster layers with their statistics, in output order.
        version: Resolved GIFT version.
        max_workers: Thread pool size for raster fetches (default from settings).
        strict: Raise ``DataConsistencyError`` instead of warning when
            requested polygons yield no rows.

    Raises:
        ValidationError: Unknown variable, layer or statistic.
        TransportError: Any fetch failed.
    """
    requested = None if entity_ids is None else sorted({int(i) for i in entity_ids})
    specs = list(raster_specs)

    validate_env_request(
        miscellaneous,
        specs,
        gift_env.fetch_env_meta_misc(version) if miscellaneous else pd.DataFrame(),
        gift_env.fetch_env_meta_raster(version) if specs else pd.DataFrame(),
    )

    misc = gift_env.fetch_env_misc(miscellaneous, version)

    raster_tables: list[pd.DataFrame] = []
    if specs:
        workers = min(max_workers or get_settings().max_workers, len(specs))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(gift_env.fetch_env_raster, spec, version) for spec in specs]
            # result() re-raises the first failure in layer order
            raw_tables = [f.result() for f in futures]
        raster_tables = [
            widen_raster_table(raw, spec) for raw, spec in zip(raw_tables, specs, strict=True)
        ]

    result = aggregate_env(requested, misc, raster_tables)
    if requested and result.empty:
        _report_empty("get_env", requested, strict)
    return result


def spatial_entities(
    query_shape: BaseGeometry,
    polygons: gpd.GeoDataFrame,
    mode: OverlapMode | str = OverlapMode.SHAPE_INTERSECT,
) -> list[int]:
    """``entity_ID``s of the polygons kept for ``query_shape`` under ``mode``."""
    kept = select_entities(polygons, query_shape, mode)
    return sorted(int(i) for i in kept["entity_ID"])


def no_overlap(
    entity_ids: Iterable[int],
    version: str,
    *,
    area_th_mainland: float = DEFAULT_AREA_TH_MAINLAND,
    area_th_island: float = DEFAULT_AREA_TH_ISLAND,
    overlap_th: float = DEFAULT_OVERLAP_TH,
    polygons: pd.DataFrame | None = None,
    overlaps: pd.DataFrame | None = None,
) -> OverlapResolution:
    """
    Remove overlapping polygons from ``entity_ids`` using GIFT's precomputed overlaps.

    ``polygons`` (``entity_ID, area, entity_class``) and ``overlaps`` are
    fetched when omitted.
    """
    check_thresholds(area_th_mainland, area_th_island, overlap_th)
    ids = sorted({int(i) for i in entity_ids})
    if polygons is None:
        polygons = geoentities.fetch_polygons(version, ids)
    if overlaps is None:
        overlaps = geoentities.fetch_overlap(version)
    return remove_overlap(
        ids,
        polygons,
        overlaps,
        area_th_mainland=area_th_mainland,
        area_th_island=area_th_island,
        overlap_th=overlap_th,
    )
