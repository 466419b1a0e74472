"""Geometry primitives built on shapely.

Converts Layer 1 ring lists to shapely geometries and back, and answers
the containment questions used by the spatial join, masking and zonal
counts.
"""

import logging
from typing import Literal, Optional, Union

import numpy as np
import pandas as pd
import shapely
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.primitives.crs import require_same_crs
from aquasmith.utils.errors import ConfigError, OverlapError, raise_config_error

logger = logging.getLogger(__name__)

OVERLAP_POLICIES = ("error", "first")


def rings_to_geometry(rings: list[np.ndarray]) -> Union[Polygon, MultiPolygon]:
    """Build a shapely polygon from a feature's rings using even-odd nesting.

    A ring nested inside an even number of the other rings is an exterior;
    an odd count makes it a hole of the smallest enclosing exterior.

    Args:
        rings: Closed rings of one feature.

    Returns:
        Polygon for single-exterior features, MultiPolygon otherwise.
    """
    if len(rings) == 1:
        return Polygon(rings[0])

    shells = [Polygon(ring) for ring in rings]
    # Compare whole rings; a hole may touch its exterior at a vertex.
    inside = [
        [j for j, shell in enumerate(shells) if j != i and shell.contains(shells[i])]
        for i in range(len(rings))
    ]
    depth = [len(enclosing) for enclosing in inside]

    exteriors = [i for i in range(len(rings)) if depth[i] % 2 == 0]
    holes: dict[int, list[np.ndarray]] = {i: [] for i in exteriors}
    for i in range(len(rings)):
        if depth[i] % 2 == 0:
            continue
        parents = [j for j in inside[i] if depth[j] == depth[i] - 1]
        if not parents:
            raise ValueError("hole ring is not enclosed by any exterior ring")
        parent = min(parents, key=lambda j: shells[j].area)
        holes[parent].append(rings[i])

    polygons = [Polygon(rings[i], holes[i]) for i in exteriors]
    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)


def geometry_to_rings(geometry: BaseGeometry) -> list[np.ndarray]:
    """Flatten a Polygon or MultiPolygon into its rings (x, y only)."""
    if isinstance(geometry, Polygon):
        parts = [geometry]
    elif isinstance(geometry, MultiPolygon):
        parts = list(geometry.geoms)
    else:
        raise ValueError(f"expected Polygon or MultiPolygon, got {geometry.geom_type}")

    rings = []
    for part in parts:
        rings.append(np.asarray(part.exterior.coords)[:, :2])
        rings.extend(np.asarray(hole.coords)[:, :2] for hole in part.interiors)
    return rings


def polygonset_to_geometries(polygons: PolygonSet) -> list[BaseGeometry]:
    """Shapely geometry for every feature of a PolygonSet."""
    return [rings_to_geometry(feature) for feature in polygons.rings]


def polygonset_from_geometries(
    geometries: list[BaseGeometry],
    attributes: Optional[pd.DataFrame] = None,
    crs: Optional[str] = None,
) -> PolygonSet:
    """Build a PolygonSet from shapely polygons."""
    rings = [geometry_to_rings(geom) for geom in geometries]
    return PolygonSet(rings=rings, attributes=attributes, crs=crs)


def match_points_to_polygons(
    points: PointSet, polygons: PolygonSet
) -> tuple[np.ndarray, np.ndarray]:
    """Find every (point, polygon) pair where the point is strictly within.

    Points on a polygon boundary do not match. Pairs are ordered by point
    index, then polygon index.

    Returns:
        Tuple (point_index, polygon_index) of equal-length integer arrays.
    """
    geometries = polygonset_to_geometries(polygons)
    if len(points) == 0 or not geometries:
        empty = np.array([], dtype=np.intp)
        return empty, empty

    tree = shapely.STRtree(geometries)
    point_geoms = shapely.points(points.coordinates)
    point_idx, polygon_idx = tree.query(point_geoms, predicate="within")
    order = np.lexsort((polygon_idx, point_idx))
    return point_idx[order], polygon_idx[order]


def points_inside(
    x: np.ndarray, y: np.ndarray, geometries: list[BaseGeometry]
) -> np.ndarray:
    """True where (x, y) lies inside or on the boundary of any geometry."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    inside = np.zeros(x.shape, dtype=bool)
    for geom in geometries:
        shapely.prepare(geom)
        inside |= shapely.intersects_xy(geom, x, y)
    return inside


def spatial_join(
    points: PointSet,
    polygons: PolygonSet,
    key: str,
    on_overlap: Literal["error", "first"] = "error",
) -> PointSet:
    """Tag each point with the key of the polygon that strictly contains it.

    Args:
        points: Point layer.
        polygons: Polygon layer in the same CRS.
        key: Polygon attribute copied onto the points.
        on_overlap: What to do when a point lies inside several polygons:
            'error' raises OverlapError, 'first' keeps the polygon that comes
            first in the polygon layer.

    Returns:
        PointSet with a ``key`` column; null for points outside every polygon.

    Raises:
        CRSError: If either layer has no CRS or the CRS differ.
        ConfigError: If ``key`` is unusable or ``on_overlap`` is unknown.
        OverlapError: If polygons overlap at a point and on_overlap='error'.

    Example:
        >>> joined = spatial_join(cities, regions, key="rgn_name")
        >>> joined.attributes["rgn_name"].isna().sum()  # cities outside all regions
    """
    if on_overlap not in OVERLAP_POLICIES:
        raise_config_error("on_overlap", on_overlap, valid_values=list(OVERLAP_POLICIES))
    if key not in polygons.attributes.columns:
        raise ConfigError(
            f"Join key '{key}' not found in polygon attributes. "
            f"Available columns: {list(polygons.attributes.columns)}"
        )
    if key in points.attributes.columns:
        raise ConfigError(
            f"Point attributes already contain a column named '{key}'",
            suggestion="Rename the point column before joining",
        )
    require_same_crs(points.crs, polygons.crs, names=("point", "polygon"))

    point_idx, polygon_idx = match_points_to_polygons(points, polygons)

    if len(point_idx):
        counts = np.bincount(point_idx, minlength=len(points))
        overlapping = np.flatnonzero(counts > 1)
        if len(overlapping):
            if on_overlap == "error":
                raise OverlapError(
                    f"{len(overlapping)} point(s) fall inside more than one polygon",
                    suggestion="Dissolve overlapping polygons or use on_overlap='first'",
                    details={"point_indices": overlapping.tolist()},
                )
            logger.debug(
                f"{len(overlapping)} point(s) inside overlapping polygons; keeping first match"
            )
        first = np.unique(point_idx, return_index=True)[1]
        point_idx, polygon_idx = point_idx[first], polygon_idx[first]

    keys = pd.Series([None] * len(points), dtype=object)
    keys.iloc[point_idx] = polygons.attributes[key].to_numpy()[polygon_idx]
    attributes = points.attributes.copy()
    attributes[key] = keys.to_numpy()

    logger.info(
        f"Spatial join matched {len(point_idx)} of {len(points)} points to '{key}'"
    )
    return points.with_attributes(attributes)
