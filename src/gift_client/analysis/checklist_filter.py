"""Checklist metadata filters.

Every criterion is an independent row subset (logical AND). The only
ordered step is the complete-coverage filter, which runs last on the
taxon-restricted rows joined with their nested-set bounds.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd

from gift_client.analysis.subtree import check_taxonomy, resolve_subtree, subtree_span
from gift_client.errors import ValidationError
from gift_client.schemas import TAXONOMY_COLUMNS, ChecklistCriteria

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("ref_ID", "list_ID", "entity_ID", "taxon_ID", "subset", "type", "entity_class")

#: Columns coerced to numbers on output.
NUMERIC_COLUMNS = [
    "ref_ID",
    "native_indicated",
    "natural_indicated",
    "end_ref",
    "restricted",
    "taxon_ID",
    "list_ID",
    "end_list",
    "entity_ID",
    "suit_geo",
]

# Taxonomy columns only needed while filtering.
_JOIN_HELPERS = ["taxon_author", "taxon_lvl", "lft", "rgt"]


def flag_is_set(values: pd.Series) -> pd.Series:
    """True where a 0/1 flag equals 1. Missing or unparsable values count as unset."""
    return pd.to_numeric(values, errors="coerce").eq(1)


def complete_taxon_filter(records: pd.DataFrame, span: float) -> pd.DataFrame:
    """Keep polygons with at least one checklist as broad as the target taxon.

    ``records`` must already carry ``lft``/``rgt`` of each row's taxon. For
    every ``entity_ID`` the widest ``rgt - lft`` among its rows is compared
    with ``span``; all rows of the polygon are kept or dropped together.
    """
    if records.empty:
        return records.copy()
    covered = pd.to_numeric(records["rgt"], errors="coerce") - pd.to_numeric(
        records["lft"], errors="coerce"
    )
    widest = covered.groupby(records["entity_ID"]).transform("max")
    return records[widest >= span].copy()


def filter_checklists(
    records: pd.DataFrame,
    criteria: ChecklistCriteria | Mapping[str, Any],
    taxonomy: pd.DataFrame,
) -> pd.DataFrame:
    """
    Subset checklist metadata to the lists matching ``criteria``.

    Args:
        records: Checklist metadata (see ``datasources.gift.fetch_lists``).
        criteria: ``ChecklistCriteria`` or a mapping of its options.
        taxonomy: Taxonomy table with nested-set bounds.

    Returns:
        New DataFrame with the matching rows and a ``taxon_name`` column;
        the input is left untouched.

    Raises:
        ValidationError: Unknown criteria values or malformed tables.
        NotFoundError: ``criteria.taxon_name`` is not in the taxonomy.
    """
    if not isinstance(criteria, ChecklistCriteria):
        criteria = ChecklistCriteria.from_options(**dict(criteria))
    check_taxonomy(taxonomy)
    missing = [c for c in (*REQUIRED_COLUMNS, *criteria.flag_columns) if c not in records.columns]
    if missing:
        raise ValidationError(f"checklist table is missing columns: {', '.join(missing)}")

    included_taxa = resolve_subtree(criteria.taxon_name, taxonomy)
    lists = records.copy()
    n_start = len(lists)

    def _keep(mask: pd.Series, step: str) -> None:
        nonlocal lists
        before = len(lists)
        lists = lists[mask]
        logger.debug("%s: %d -> %d lists", step, before, len(lists))

    if criteria.ref_excluded:
        ref_ids = pd.to_numeric(lists["ref_ID"], errors="coerce")
        _keep(~ref_ids.isin(criteria.ref_excluded), "ref_excluded")

    _keep(pd.to_numeric(lists["taxon_ID"], errors="coerce").isin(included_taxa), "taxon")
    _keep(lists["subset"].isin([str(v) for v in criteria.ref_included]), "ref_included")
    _keep(lists["type"].isin([str(v) for v in criteria.type_ref]), "type_ref")
    _keep(lists["entity_class"].isin([str(v) for v in criteria.entity_class]), "entity_class")
    for flag in criteria.flag_columns:
        _keep(flag_is_set(lists[flag]), flag)

    # Attach names and bounds of each list's taxon
    lists = lists.drop(columns=[c for c in TAXONOMY_COLUMNS if c != "taxon_ID" and c in lists])
    lists["taxon_ID"] = pd.to_numeric(lists["taxon_ID"], errors="coerce")
    tax = taxonomy[list(TAXONOMY_COLUMNS)].copy()
    tax["taxon_ID"] = pd.to_numeric(tax["taxon_ID"], errors="coerce")
    lists = lists.merge(tax, on="taxon_ID", how="left")

    if criteria.complete_taxon:
        before = len(lists)
        lists = complete_taxon_filter(lists, subtree_span(criteria.taxon_name, taxonomy))
        logger.debug("complete_taxon: %d -> %d lists", before, len(lists))

    lists = lists.drop(columns=_JOIN_HELPERS)
    for col in NUMERIC_COLUMNS:
        if col in lists.columns:
            lists[col] = pd.to_numeric(lists[col], errors="coerce")

    logger.info(
        "Checklists for %s: %d of %d lists kept (%d polygons)",
        criteria.taxon_name,
        len(lists),
        n_start,
        lists["entity_ID"].nunique(),
    )
    return lists.reset_index(drop=True)
