"""Coordinate Reference System (CRS) handling for vector layers.

Provides standardized CRS parsing, comparison and exact coordinate
transformation using pyproj. Raster warping lives in
:mod:`aquasmith.tasks.rastertask` because it needs a resampling policy.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError as PyprojCRSError

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.utils.errors import CRSError

logger = logging.getLogger(__name__)


def standardize_crs(crs: Any) -> CRS:
    """Parse any CRS input into a pyproj CRS.

    Args:
        crs: EPSG code (int or 'EPSG:xxxx'), WKT, PROJ string, or CRS object.

    Returns:
        pyproj CRS object.

    Raises:
        CRSError: If the CRS is None or cannot be parsed.
    """
    if crs is None:
        raise CRSError(
            "Coordinate reference system is not set",
            suggestion="Assign a CRS when loading the layer (e.g. crs='EPSG:4326')",
        )
    try:
        return CRS.from_user_input(crs)
    except PyprojCRSError as e:
        raise CRSError(f"Invalid coordinate reference system: {crs!r}") from e


def to_crs_string(crs: Any) -> str:
    """Canonical string for a CRS: 'EPSG:xxxx' when possible, else WKT."""
    crs_obj = standardize_crs(crs)
    epsg = crs_obj.to_epsg()
    if epsg is not None:
        return f"EPSG:{epsg}"
    return crs_obj.to_wkt()


def get_epsg_code(crs: Any) -> int | None:
    """Get EPSG code if available.

    Returns:
        EPSG code or None
    """
    if crs is None:
        return None
    return standardize_crs(crs).to_epsg()


def crs_equal(crs_a: Any, crs_b: Any) -> bool:
    """True if both CRS are set and describe the same system."""
    if crs_a is None or crs_b is None:
        return False
    return standardize_crs(crs_a) == standardize_crs(crs_b)


def require_same_crs(crs_a: Any, crs_b: Any, names: tuple[str, str] = ("left", "right")) -> None:
    """Raise CRSError unless both layers carry the same explicit CRS.

    Args:
        crs_a: CRS of the first layer.
        crs_b: CRS of the second layer.
        names: Labels used in the error message.
    """
    for crs, name in zip((crs_a, crs_b), names):
        if crs is None:
            raise CRSError(
                f"{name} layer has no coordinate reference system",
                suggestion="Set the CRS explicitly before combining layers",
            )
    if not crs_equal(crs_a, crs_b):
        raise CRSError(
            f"{names[0]} and {names[1]} layers use different coordinate reference systems",
            suggestion="Reproject one layer with reproject_to() first",
            details={names[0]: str(crs_a), names[1]: str(crs_b)},
        )


def transform_coordinates(
    coordinates: np.ndarray,
    source_crs: Any,
    target_crs: Any,
) -> np.ndarray:
    """Transform coordinates between CRS.

    Convenience function for one-off transformations. Axis order is always
    x (easting/longitude), y (northing/latitude).

    Args:
        coordinates: Input coordinates [N, 2] or [N, 3]; a third column is
            passed through unchanged.
        source_crs: Source CRS (EPSG code, CRS object, or string)
        target_crs: Target CRS (EPSG code, CRS object, or string)

    Returns:
        Transformed coordinates with the same shape as the input.

    Raises:
        CRSError: If either CRS is unset or invalid.

    Examples:
        >>> coords = np.array([[-122.4, 37.8], [-118.2, 34.1]])
        >>> coords_utm = transform_coordinates(coords, 'EPSG:4326', 'EPSG:32610')
    """
    source_crs_obj = standardize_crs(source_crs)
    target_crs_obj = standardize_crs(target_crs)
    coordinates = np.asarray(coordinates, dtype=np.float64)
    if len(coordinates) == 0:
        return coordinates.copy()

    transformer = Transformer.from_crs(source_crs_obj, target_crs_obj, always_xy=True)
    x_new, y_new = transformer.transform(coordinates[:, 0], coordinates[:, 1])
    if coordinates.shape[1] == 2:
        return np.column_stack([x_new, y_new])
    return np.column_stack([x_new, y_new, coordinates[:, 2]])


def reproject_points(points: PointSet, target_crs: Any) -> PointSet:
    """Reproject a PointSet into ``target_crs``.

    Raises:
        CRSError: If the points have no CRS or either CRS is invalid.
    """
    if points.crs is None:
        raise CRSError(
            "Cannot reproject points with unknown source CRS",
            suggestion="Pass crs= when reading the layer",
        )
    target = to_crs_string(target_crs)
    coords = transform_coordinates(points.coordinates, points.crs, target)
    logger.info(f"Reprojected {len(points)} points from {points.crs} to {target}")
    return PointSet(coordinates=coords, attributes=points.attributes, crs=target)


def reproject_polygons(polygons: PolygonSet, target_crs: Any) -> PolygonSet:
    """Reproject every ring of a PolygonSet into ``target_crs``.

    All vertices are transformed in one call and split back into rings.

    Raises:
        CRSError: If the polygons have no CRS or either CRS is invalid.
    """
    if polygons.crs is None:
        raise CRSError(
            "Cannot reproject polygons with unknown source CRS",
            suggestion="Pass crs= when reading the layer",
        )
    target = to_crs_string(target_crs)
    flat = [ring for feature in polygons.rings for ring in feature]
    if not flat:
        return PolygonSet(rings=[], attributes=polygons.attributes, crs=target)

    sizes = [len(ring) for ring in flat]
    transformed = transform_coordinates(np.vstack(flat), polygons.crs, target)
    pieces = np.split(transformed, np.cumsum(sizes)[:-1])

    rings = []
    cursor = 0
    for feature in polygons.rings:
        rings.append(pieces[cursor : cursor + len(feature)])
        cursor += len(feature)

    logger.info(
        f"Reprojected {len(polygons)} polygons ({len(flat)} rings) "
        f"from {polygons.crs} to {target}"
    )
    return PolygonSet(rings=rings, attributes=polygons.attributes, crs=target)
