"""
Domain vocabularies and request models.

The enums list the recognized values of every categorical GIFT field a caller
can filter on. Request models validate caller input up front and translate
pydantic failures into ``gift_client.errors.ValidationError`` so no network
call is made with bad parameters.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

import pydantic
from pydantic import BaseModel, Field, StrictBool, field_validator

from gift_client.errors import ValidationError

# =============================================================================
# Vocabularies
# =============================================================================


class TaxonLevel(StrEnum):
    """Levels of the GIFT taxonomy table (``taxon_lvl``)."""

    HIGHER = "higher"
    ORDER = "order"
    FAMILY = "family"
    GENUS = "genus"
    SPECIES = "species"


class RefSubset(StrEnum):
    """Status information a reference provides (``subset``)."""

    ALL = "all"
    NATIVE = "native"
    NATIVE_AND_NATURALIZED = "native and naturalized"
    NATIVE_AND_HISTORICALLY_INTRODUCED = "native and historically introduced"
    ENDANGERED = "endangered"
    ENDEMIC = "endemic"
    NATURALIZED = "naturalized"
    OTHER_SUBSET = "other subset"


class RefType(StrEnum):
    """Kind of source a reference is (``type``)."""

    ACCOUNT = "Account"
    CATALOGUE = "Catalogue"
    CHECKLIST = "Checklist"
    FLORA = "Flora"
    HERBARIUM_COLLECTION = "Herbarium collection"
    KEY = "Key"
    RED_LIST = "Red list"
    REPORT = "Report"
    SPECIES_DATABASE = "Species Database"
    SURVEY = "Survey"


class EntityClass(StrEnum):
    """Polygon classes (``entity_class``)."""

    ISLAND = "Island"
    ISLAND_MAINLAND = "Island/Mainland"
    MAINLAND = "Mainland"
    ISLAND_GROUP = "Island Group"
    ISLAND_PART = "Island Part"


class OverlapMode(StrEnum):
    """Spatial relation used to keep polygons against a query shape."""

    CENTROID_INSIDE = "centroid_inside"
    EXTENT_INTERSECT = "extent_intersect"
    SHAPE_INTERSECT = "shape_intersect"
    SHAPE_INSIDE = "shape_inside"


class SummaryStatistic(StrEnum):
    """Summary statistics available for raster layers."""

    MIN = "min"
    Q05 = "q05"
    Q10 = "q10"
    Q20 = "q20"
    Q25 = "q25"
    Q30 = "q30"
    Q40 = "q40"
    MED = "med"
    Q60 = "q60"
    Q70 = "q70"
    Q75 = "q75"
    Q80 = "q80"
    Q90 = "q90"
    Q95 = "q95"
    MAX = "max"
    MEAN = "mean"
    SD = "sd"
    MODAL = "modal"
    UNIQUE_N = "unique_n"
    H = "H"
    N = "n"


#: Columns a taxonomy table must carry.
TAXONOMY_COLUMNS = ("taxon_ID", "taxon_name", "taxon_author", "taxon_lvl", "lft", "rgt")

#: Identifier columns of environmental tables (never counted as data).
ENV_ID_COLUMNS = ("entity_ID", "geo_entity")


def _validation_error(exc: pydantic.ValidationError, what: str) -> ValidationError:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or what}: {err['msg']}" for err in exc.errors()
    )
    return ValidationError(f"Invalid {what}: {problems}")


# =============================================================================
# Requests
# =============================================================================


class ChecklistCriteria(BaseModel):
    """Which checklists to keep from the GIFT list metadata."""

    model_config = {"frozen": True, "extra": "forbid", "str_strip_whitespace": True}

    taxon_name: str = Field(default="Tracheophyta", min_length=1)
    ref_included: tuple[RefSubset, ...] = (
        RefSubset.ALL,
        RefSubset.NATIVE,
        RefSubset.NATIVE_AND_NATURALIZED,
        RefSubset.NATIVE_AND_HISTORICALLY_INTRODUCED,
    )
    ref_excluded: tuple[int, ...] = ()
    type_ref: tuple[RefType, ...] = tuple(RefType)
    entity_class: tuple[EntityClass, ...] = tuple(EntityClass)
    native_indicated: StrictBool = False
    natural_indicated: StrictBool = False
    end_ref: StrictBool = False
    end_list: StrictBool = False
    suit_geo: StrictBool = False
    complete_taxon: StrictBool = True

    @field_validator("ref_included", "ref_excluded", "type_ref", "entity_class", mode="before")
    @classmethod
    def _wrap_scalar(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str | int):
            return (value,)
        return value

    @classmethod
    def from_options(cls, **options: Any) -> ChecklistCriteria:
        """Build criteria, raising ``ValidationError`` for unknown values."""
        try:
            return cls(**options)
        except pydantic.ValidationError as exc:
            raise _validation_error(exc, "checklist criteria") from exc

    @property
    def flag_columns(self) -> list[str]:
        """Flag columns that must equal 1 under these criteria."""
        switches = {
            "native_indicated": self.native_indicated,
            "natural_indicated": self.natural_indicated,
            "end_ref": self.end_ref,
            "end_list": self.end_list,
            "suit_geo": self.suit_geo,
        }
        return [name for name, on in switches.items() if on]


class RasterSpec(BaseModel):
    """One raster layer and the statistics to summarise it with."""

    model_config = {"frozen": True}

    layer: str = Field(..., min_length=1)
    statistics: tuple[SummaryStatistic, ...] = Field(..., min_length=1)

    @classmethod
    def from_options(cls, layer: str, statistics: Any) -> RasterSpec:
        """Build a spec, raising ``ValidationError`` for unknown statistics."""
        if isinstance(statistics, str):
            statistics = [statistics]
        try:
            return cls(layer=layer, statistics=tuple(statistics))
        except pydantic.ValidationError as exc:
            raise _validation_error(exc, f"raster spec for layer {layer!r}") from exc

    @property
    def column_names(self) -> list[str]:
        """Output column per statistic, e.g. ``mean_wc2.0_bio_30s_01``."""
        return [f"{stat}_{self.layer}" for stat in self.statistics]


class OverlapPair(BaseModel):
    """Share of ``entity_a``'s area covered by ``entity_b``.

    The relation is directional: the reverse pair uses ``entity_b``'s area
    as denominator and generally has a different percentage.
    """

    model_config = {"frozen": True}

    entity_a: int
    entity_b: int
    overlap_pct: float = Field(..., ge=0, le=1)
