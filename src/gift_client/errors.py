"""Exception hierarchy shared by the fetch layer and the analysis core."""

from __future__ import annotations


class GiftError(Exception):
    """Base class for every error raised by gift-client."""


class ValidationError(GiftError, ValueError):
    """A caller-supplied parameter is outside its recognized domain.

    Raised before any network access for the offending call.
    """


class NotFoundError(GiftError, LookupError):
    """A referenced taxon, polygon or layer does not exist in the metadata."""


class TransportError(GiftError):
    """The GIFT API could not be reached or returned an unusable response."""


class DataConsistencyError(GiftError):
    """A join or filter came back empty although identifiers were requested.

    Workflows only raise this when called with ``strict=True``; otherwise the
    condition is logged and an empty table is returned.
    """
