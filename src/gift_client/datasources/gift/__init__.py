"""GIFT (Global Inventory of Floras and Traits) data source.

Public API:
  - client: versions, endpoint URLs, paginated JSON transport
  - taxonomy: fetch_taxonomy
  - lists: fetch_lists (checklist metadata)
  - references: fetch_references
  - geoentities: fetch_polygons, fetch_overlap
  - env: fetch_env_meta_misc, fetch_env_meta_raster, fetch_env_misc, fetch_env_raster

API documentation: https://gift.uni-goettingen.de/api/
"""

from gift_client.datasources.gift.client import (
    GIFT_API,
    fetch_json,
    fetch_table,
    fetch_versions,
    resolve_version,
)
from gift_client.datasources.gift.env import (
    fetch_env_meta_misc,
    fetch_env_meta_raster,
    fetch_env_misc,
    fetch_env_raster,
)
from gift_client.datasources.gift.geoentities import fetch_overlap, fetch_polygons
from gift_client.datasources.gift.lists import fetch_lists
from gift_client.datasources.gift.references import fetch_references
from gift_client.datasources.gift.taxonomy import fetch_taxonomy

__all__ = [
    "GIFT_API",
    "fetch_env_meta_misc",
    "fetch_env_meta_raster",
    "fetch_env_misc",
    "fetch_env_raster",
    "fetch_json",
    "fetch_lists",
    "fetch_overlap",
    "fetch_polygons",
    "fetch_references",
    "fetch_table",
    "fetch_taxonomy",
    "fetch_versions",
    "resolve_version",
]
