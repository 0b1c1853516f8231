"""Geometry primitives used by the spatial analysis.

Thin wrappers over shapely so the overlap logic in ``analysis/`` only decides
*which* primitive to call. Areas are in the units of the geometries' CRS;
project to an equal-area CRS before comparing areas of lon/lat shapes.
"""

from __future__ import annotations

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry


def intersects(a: BaseGeometry, b: BaseGeometry) -> bool:
    """True when ``a`` and ``b`` share at least one point."""
    return bool(a.intersects(b))


def contains(a: BaseGeometry, b: BaseGeometry) -> bool:
    """True when ``b`` lies entirely within ``a``."""
    return bool(a.contains(b))


def centroid(a: BaseGeometry) -> Point:
    return a.centroid


def bounding_extent(a: BaseGeometry) -> BaseGeometry:
    """Axis-aligned bounding box of ``a``.

    A polygon in general; degenerates to a point or line for such inputs.
    """
    return a.envelope


def area(a: BaseGeometry) -> float:
    return float(a.area)


def intersection_area(a: BaseGeometry, b: BaseGeometry) -> float:
    """Area shared by ``a`` and ``b`` (0 for disjoint shapes)."""
    if not a.intersects(b):
        return 0.0
    return float(a.intersection(b).area)
