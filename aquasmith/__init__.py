"""AquaSmith: vector and raster steps of a spatial suitability analysis.

Load shapefiles, point tables and GeoTIFFs; reproject them; join points to
regions and total their attributes; reclassify, combine and mask rasters.

Layers:
    objects     Immutable data (PointSet, PolygonSet, RasterGrid)
    primitives  Pure operations (CRS, geometry, aggregation, raster algebra)
    tasks       Intent-level helpers (RasterTask, JoinTask)
    workflows   File I/O, plotting and end-to-end analyses
"""

from aquasmith.objects import PointSet, PolygonSet, RasterGrid
from aquasmith.utils.errors import (
    AlignmentError,
    AquaSmithError,
    ConfigError,
    CRSError,
    FormatError,
    OverlapError,
)

__version__ = "0.1.0"

__all__ = [
    "AlignmentError",
    "AquaSmithError",
    "ConfigError",
    "CRSError",
    "FormatError",
    "OverlapError",
    "PointSet",
    "PolygonSet",
    "RasterGrid",
    "__version__",
]
