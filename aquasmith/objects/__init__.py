"""Layer 1: Objects - Immutable data representations.

This layer contains only data structures. No I/O libraries, no geopandas,
no shapely, no rasterio, no matplotlib. Only standard library + numpy + pandas.
"""

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.objects.rastergrid import RasterGrid

__all__ = [
    "PointSet",
    "PolygonSet",
    "RasterGrid",
]
