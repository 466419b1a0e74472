"""Layer 2: Primitives - Pure operations on Layer 1 objects.

This layer can import numpy, pandas, pyproj and shapely. No file I/O or
plotting.
"""

from aquasmith.primitives.aggregation import aggregate_sum, attach_summary
from aquasmith.primitives.crs import (
    crs_equal,
    get_epsg_code,
    reproject_points,
    reproject_polygons,
    require_same_crs,
    standardize_crs,
    to_crs_string,
    transform_coordinates,
)
from aquasmith.primitives.geometry import (
    geometry_to_rings,
    match_points_to_polygons,
    points_inside,
    polygonset_from_geometries,
    polygonset_to_geometries,
    rings_to_geometry,
    spatial_join,
)
from aquasmith.primitives.raster import (
    KELVIN_OFFSET,
    apply,
    cell_area,
    check_alignment,
    combine,
    crop,
    kelvin_to_celsius,
    mask,
    reclassify,
    stack_mean,
    validate_breakpoints,
    zonal_count,
)

__all__ = [
    "KELVIN_OFFSET",
    "aggregate_sum",
    "apply",
    "attach_summary",
    "cell_area",
    "check_alignment",
    "combine",
    "crop",
    "crs_equal",
    "geometry_to_rings",
    "get_epsg_code",
    "kelvin_to_celsius",
    "mask",
    "match_points_to_polygons",
    "points_inside",
    "polygonset_from_geometries",
    "polygonset_to_geometries",
    "reclassify",
    "reproject_points",
    "reproject_polygons",
    "require_same_crs",
    "rings_to_geometry",
    "spatial_join",
    "stack_mean",
    "standardize_crs",
    "to_crs_string",
    "transform_coordinates",
    "validate_breakpoints",
    "zonal_count",
]
