"""Layer-type dispatch for common pipeline steps.

Layer 4: Workflows - Public entry points.
"""

import logging
from typing import Any, Optional, Union

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.objects.rastergrid import RasterGrid
from aquasmith.primitives.crs import reproject_points, reproject_polygons
from aquasmith.tasks.rastertask import RasterTask

logger = logging.getLogger(__name__)

Layer = Union[PointSet, PolygonSet, RasterGrid]


def reproject_to(
    layer: Layer,
    target_crs: Any,
    resampling: str = "nearest",
    resolution: Optional[Union[float, tuple[float, float]]] = None,
) -> Layer:
    """Reproject any layer into ``target_crs``.

    Vector layers are transformed exactly. Rasters are warped onto a new
    grid with the named ``resampling`` policy (ignored for vectors).

    Args:
        layer: PointSet, PolygonSet or RasterGrid with a CRS.
        target_crs: Target CRS (EPSG code, string, or CRS object).
        resampling: Raster resampling policy name.
        resolution: Raster output cell size in target units.

    Raises:
        CRSError: If the layer has no CRS or a CRS is invalid.

    Example:
        >>> regions_utm = reproject_to(regions, "EPSG:32610")
        >>> sst_utm = reproject_to(sst, "EPSG:32610", resampling="nearest")
    """
    if isinstance(layer, PointSet):
        return reproject_points(layer, target_crs)
    if isinstance(layer, PolygonSet):
        return reproject_polygons(layer, target_crs)
    if isinstance(layer, RasterGrid):
        return RasterTask(resampling=resampling).reproject(
            layer, target_crs, resolution=resolution
        )
    raise TypeError(f"Cannot reproject object of type {type(layer).__name__}")
