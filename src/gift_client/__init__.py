"""gift-client - checklists, polygons and environmental data from GIFT.

Architecture::

    datasources/   GIFT JSON API (taxonomy, lists, references, polygons, env)
    analysis/      Pure table logic (subtree, checklist filters, overlap, env joins)
    workflows.py   Fetch -> analysis wiring used by the CLI and by callers
    geometry.py    Geometry primitives (shapely) used by the spatial analysis
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources -> analysis -> DataFrame handed back to the caller.

Every table is keyed on ``entity_ID`` (a GIFT polygon) or ``taxon_ID``; both
are treated as opaque identifiers coming from the API.
"""

__version__ = "0.1.0"

from gift_client.config import Settings, get_settings
from gift_client.errors import (
    DataConsistencyError,
    GiftError,
    NotFoundError,
    TransportError,
    ValidationError,
)

__all__ = [
    "DataConsistencyError",
    "GiftError",
    "NotFoundError",
    "Settings",
    "TransportError",
    "ValidationError",
    "__version__",
    "get_settings",
]
