"""Select polygons by their spatial relation to a query shape.

Modes, from least to most restrictive:

    extent_intersect  bounding boxes intersect
    centroid_inside   polygon centroid lies in the query shape
    shape_intersect   geometries intersect
    shape_inside      polygon lies entirely in the query shape

``centroid_inside`` is not nested with the shape modes in general, but its
result usually sits between ``extent_intersect`` and ``shape_intersect``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from numbers import Real

import geopandas as gpd
from shapely.geometry import Point, Polygon, box
from shapely.geometry.base import BaseGeometry

from gift_client import geometry
from gift_client.errors import ValidationError
from gift_client.schemas import OverlapMode

logger = logging.getLogger(__name__)


def _mode(mode: OverlapMode | str) -> OverlapMode:
    try:
        return OverlapMode(mode)
    except ValueError as exc:
        options = ", ".join(m.value for m in OverlapMode)
        raise ValidationError(f"Unknown overlap mode {mode!r}; options: {options}") from exc


def classify(polygon: BaseGeometry, query_shape: BaseGeometry, mode: OverlapMode | str) -> bool:
    """Whether ``polygon`` is kept for ``query_shape`` under ``mode``."""
    mode = _mode(mode)
    if mode is OverlapMode.EXTENT_INTERSECT:
        return geometry.intersects(
            geometry.bounding_extent(polygon), geometry.bounding_extent(query_shape)
        )
    if mode is OverlapMode.CENTROID_INSIDE:
        return geometry.intersects(query_shape, geometry.centroid(polygon))
    if mode is OverlapMode.SHAPE_INTERSECT:
        return geometry.intersects(polygon, query_shape)
    return geometry.contains(query_shape, polygon)


def select_entities(
    polygons: gpd.GeoDataFrame,
    query_shape: BaseGeometry,
    mode: OverlapMode | str = OverlapMode.SHAPE_INTERSECT,
) -> gpd.GeoDataFrame:
    """
    Rows of ``polygons`` kept under ``mode``.

    Args:
        polygons: GeoDataFrame with an ``entity_ID`` column.
        query_shape: Shape in the same CRS as ``polygons``.
        mode: One of ``OverlapMode``.
    """
    mode = _mode(mode)
    if polygons.empty:
        return polygons.copy()
    keep = polygons.geometry.apply(
        lambda geom: geom is not None and not geom.is_empty and classify(geom, query_shape, mode)
    ).astype(bool)
    logger.debug("%s: %d of %d polygons kept", mode.value, int(keep.sum()), len(polygons))
    return polygons[keep].copy()


def query_shape_from_coordinates(
    coordinates: Sequence[float] | Sequence[Sequence[float]],
) -> BaseGeometry:
    """
    Build a query shape from plain coordinates.

    Accepted inputs:
      - ``(lon, lat)``: a point
      - ``(xmin, xmax, ymin, ymax)``: an extent
      - ``[(lon, lat), ...]`` with at least 3 vertices: a polygon (closed
        automatically)
      - ``[(xmin, ymin), (xmax, ymax)]``: an extent given by two corners

    Raises:
        ValidationError: Any other shape of input or an invalid extent.
    """
    values = list(coordinates)
    if not values:
        raise ValidationError("coordinates must not be empty")

    if all(isinstance(v, Real) for v in values):
        if len(values) == 2:
            return Point(float(values[0]), float(values[1]))
        if len(values) == 4:
            xmin, xmax, ymin, ymax = (float(v) for v in values)
            if xmin > xmax or ymin > ymax:
                raise ValidationError("extent must be ordered as (xmin, xmax, ymin, ymax)")
            return box(xmin, ymin, xmax, ymax)
        raise ValidationError("flat coordinates must be a point (2 values) or an extent (4 values)")

    try:
        vertices = [(float(x), float(y)) for x, y in values]
    except (TypeError, ValueError) as exc:
        raise ValidationError("coordinates must be (lon, lat) pairs") from exc

    if len(vertices) == 1:
        return Point(vertices[0])
    if len(vertices) == 2:
        (x0, y0), (x1, y1) = vertices
        return box(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))
    shape = Polygon(vertices)
    if not shape.is_valid:
        raise ValidationError("polygon coordinates do not form a valid shape")
    return shape
