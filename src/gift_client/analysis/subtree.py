"""Taxonomic subtree lookups over a nested-set taxonomy table.

Each taxon carries ``lft``/``rgt`` bounds such that B is an ancestor of A
exactly when ``B.lft <= A.lft and A.rgt <= B.rgt``. Membership checks are
plain interval comparisons over the loaded table; no tree is built.
"""

from __future__ import annotations

import pandas as pd

from gift_client.errors import NotFoundError, ValidationError
from gift_client.schemas import TAXONOMY_COLUMNS


def check_taxonomy(taxonomy: pd.DataFrame) -> None:
    """Raise ``ValidationError`` unless ``taxonomy`` has the GIFT taxonomy columns."""
    if not isinstance(taxonomy, pd.DataFrame):
        raise ValidationError("taxonomy must be a DataFrame (see fetch_taxonomy())")
    missing = [c for c in TAXONOMY_COLUMNS if c not in taxonomy.columns]
    if missing:
        raise ValidationError(f"taxonomy is missing columns: {', '.join(missing)}")


def taxon_bounds(taxon_name: str, taxonomy: pd.DataFrame) -> tuple[int, float, float]:
    """Return ``(taxon_ID, lft, rgt)`` of the named taxon.

    Raises:
        NotFoundError: No row has this ``taxon_name``.
    """
    check_taxonomy(taxonomy)
    match = taxonomy[taxonomy["taxon_name"] == taxon_name]
    if match.empty:
        raise NotFoundError(
            f"Taxon {taxon_name!r} not found in the GIFT taxonomy; see fetch_taxonomy()"
        )
    row = match.iloc[0]
    return int(row["taxon_ID"]), float(row["lft"]), float(row["rgt"])


def resolve_subtree(taxon_name: str, taxonomy: pd.DataFrame) -> set[int]:
    """
    IDs of every taxon below or above ``taxon_name``.

    Below: intervals nested in the target's (the target included).
    Above: intervals strictly containing the target's. Ancestors are kept
    because a checklist tagged at a broader group also covers the target.
    """
    _, left, right = taxon_bounds(taxon_name, taxonomy)
    lft = pd.to_numeric(taxonomy["lft"], errors="coerce")
    rgt = pd.to_numeric(taxonomy["rgt"], errors="coerce")

    below = (lft >= left) & (rgt <= right)
    above = (lft < left) & (rgt > right)
    ids = taxonomy.loc[below | above, "taxon_ID"]
    return {int(i) for i in ids.dropna()}


def subtree_span(taxon_name: str, taxonomy: pd.DataFrame) -> int:
    """Width ``rgt - lft`` of the target's interval."""
    _, left, right = taxon_bounds(taxon_name, taxonomy)
    return int(right - left)
