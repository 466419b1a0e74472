"""File loading and saving for vector, tabular and raster layers.

Layer 4: Workflows - Public entry points with file I/O.

Vector formats go through geopandas (any OGR driver: shapefile, GeoPackage,
GeoJSON). Rasters go through rasterio (any GDAL raster, GeoTIFF for
output). Every read failure is reported as :class:`FormatError`.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio
from rasterio.crs import CRS as RioCRS
from rasterio.errors import RasterioIOError
from rasterio.transform import Affine

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.objects.rastergrid import RasterGrid
from aquasmith.primitives.crs import to_crs_string
from aquasmith.primitives.geometry import polygonset_from_geometries, polygonset_to_geometries
from aquasmith.utils.errors import FormatError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
VectorLayer = Union[PointSet, PolygonSet]

DEFAULT_NODATA = -9999.0
_POLYGON_TYPES = {"Polygon", "MultiPolygon"}


def _require_file(path: PathLike) -> Path:
    path = Path(path)
    if not path.exists():
        raise FormatError(
            f"Input file not found: {path}",
            suggestion="Check the path, relative paths resolve against the working directory",
        )
    return path


def from_geodataframe(gdf: gpd.GeoDataFrame, crs: Optional[Any] = None) -> VectorLayer:
    """Convert a GeoDataFrame to a PointSet or PolygonSet.

    Args:
        gdf: Layer with only Point or only (Multi)Polygon geometries.
        crs: CRS to assign, overriding whatever the frame carries.

    Raises:
        FormatError: If the layer is empty, has null geometries or mixes
            unsupported geometry types.
    """
    if len(gdf) == 0:
        raise FormatError("Vector layer has no features")
    if gdf.geometry.isna().any() or gdf.geometry.is_empty.any():
        raise FormatError("Vector layer contains null or empty geometries")

    if crs is not None:
        layer_crs = to_crs_string(crs)
    elif gdf.crs is not None:
        layer_crs = to_crs_string(gdf.crs)
    else:
        layer_crs = None

    attributes = pd.DataFrame(gdf.drop(columns=gdf.geometry.name))
    geom_types = set(gdf.geom_type)

    if geom_types == {"Point"}:
        coords = np.column_stack([gdf.geometry.x.to_numpy(), gdf.geometry.y.to_numpy()])
        return PointSet(coordinates=coords, attributes=attributes, crs=layer_crs)
    if geom_types <= _POLYGON_TYPES:
        return polygonset_from_geometries(list(gdf.geometry), attributes=attributes, crs=layer_crs)

    raise FormatError(
        f"Unsupported geometry types {sorted(geom_types)}",
        suggestion="Layers must contain only points or only polygons",
    )


def to_geodataframe(layer: VectorLayer) -> gpd.GeoDataFrame:
    """Convert a PointSet or PolygonSet to a GeoDataFrame."""
    if isinstance(layer, PointSet):
        geometry = gpd.points_from_xy(layer.x, layer.y)
    elif isinstance(layer, PolygonSet):
        geometry = polygonset_to_geometries(layer)
    else:
        raise TypeError(f"expected PointSet or PolygonSet, got {type(layer).__name__}")
    return gpd.GeoDataFrame(layer.attributes.copy(), geometry=geometry, crs=layer.crs)


def read_vector(
    path: PathLike,
    crs: Optional[Any] = None,
    layer: Optional[str] = None,
) -> VectorLayer:
    """Read a vector file into a PointSet or PolygonSet.

    Args:
        path: Shapefile, GeoPackage, GeoJSON or any OGR-readable file.
        crs: Assign this CRS instead of the one stored in the file.
        layer: Layer name for multi-layer sources.

    Raises:
        FormatError: If the file is missing, unreadable or has unsupported
            geometries.

    Example:
        >>> regions = read_vector("data/wc_regions_clean.shp")
        >>> regions.crs
        'EPSG:4326'
    """
    path = _require_file(path)
    try:
        gdf = gpd.read_file(path, layer=layer) if layer else gpd.read_file(path)
    except Exception as e:
        raise FormatError(f"Could not read vector file {path}: {e}") from e

    result = from_geodataframe(gdf, crs=crs)
    logger.info(f"Read {len(result)} features from {path} (crs={result.crs})")
    return result


def read_points_csv(
    path: PathLike,
    x_col: str = "lon",
    y_col: str = "lat",
    crs: Optional[Any] = "EPSG:4326",
    keep_coordinates: bool = False,
    **read_csv_kwargs: Any,
) -> PointSet:
    """Read a delimited table with coordinate columns as points.

    Args:
        path: CSV (or other delimited) file.
        x_col: Column holding x / longitude.
        y_col: Column holding y / latitude.
        crs: CRS of the coordinates.
        keep_coordinates: Keep the coordinate columns in the attributes.
        **read_csv_kwargs: Passed to ``pandas.read_csv`` (e.g. ``sep``).

    Raises:
        FormatError: If the file is missing or unparsable, or the
            coordinate columns are absent, non-numeric or incomplete.
    """
    path = _require_file(path)
    try:
        df = pd.read_csv(path, **read_csv_kwargs)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise FormatError(f"Could not parse table {path}: {e}") from e

    missing = [col for col in (x_col, y_col) if col not in df.columns]
    if missing:
        raise FormatError(
            f"Coordinate column(s) {missing} not found in {path}. "
            f"Available columns: {list(df.columns)}"
        )
    try:
        x = pd.to_numeric(df[x_col])
        y = pd.to_numeric(df[y_col])
    except (TypeError, ValueError) as e:
        raise FormatError(f"Coordinate columns in {path} must be numeric") from e
    if x.isna().any() or y.isna().any():
        raise FormatError(f"Coordinate columns in {path} contain missing values")

    attributes = df if keep_coordinates else df.drop(columns=[x_col, y_col])
    points = PointSet(
        coordinates=np.column_stack([x.to_numpy(), y.to_numpy()]),
        attributes=attributes,
        crs=to_crs_string(crs) if crs is not None else None,
    )
    logger.info(f"Read {len(points)} points from {path}")
    return points


def write_vector(layer: VectorLayer, path: PathLike, driver: Optional[str] = None) -> Path:
    """Write a PointSet or PolygonSet with its attributes and CRS.

    The driver is inferred from the extension unless given. Shapefiles
    truncate column names to 10 characters.

    Returns:
        Path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    gdf = to_geodataframe(layer)
    if driver is None:
        gdf.to_file(path)
    else:
        gdf.to_file(path, driver=driver)
    logger.info(f"Wrote {len(gdf)} features to {path}")
    return path


def read_raster(path: PathLike, band: int = 1, crs: Optional[Any] = None) -> RasterGrid:
    """Read one band of a raster file.

    Nodata cells become ``NaN``; the file's nodata value is kept on the grid.

    Args:
        path: GeoTIFF or any GDAL-readable raster.
        band: 1-based band index.
        crs: Assign this CRS when the file has none (or to override it).

    Raises:
        FormatError: If the file is missing or unreadable, or the band does
            not exist.
    """
    path = _require_file(path)
    try:
        with rasterio.open(path) as src:
            if band < 1 or band > src.count:
                raise FormatError(
                    f"Band index {band} out of range for {path} with {src.count} band(s)"
                )
            data = src.read(band, masked=True).astype(np.float64).filled(np.nan)
            transform = tuple(src.transform)[:6]
            nodata = src.nodata
            file_crs = src.crs.to_string() if src.crs else None
            description = src.descriptions[band - 1]
    except RasterioIOError as e:
        raise FormatError(f"Could not read raster file {path}: {e}") from e

    layer_crs = crs if crs is not None else file_crs
    grid = RasterGrid(
        data=data,
        transform=transform,
        crs=to_crs_string(layer_crs) if layer_crs is not None else None,
        nodata=nodata,
        band_name=description or path.stem,
    )
    logger.info(f"Read raster {path}: {grid.shape} cells, crs={grid.crs}")
    return grid


def read_rasters(paths: Sequence[PathLike], band: int = 1) -> list[RasterGrid]:
    """Read the same band from several raster files."""
    if not paths:
        raise FormatError("No raster paths given")
    return [read_raster(p, band=band) for p in paths]


def write_raster(grid: RasterGrid, path: PathLike, nodata: Optional[float] = None) -> Path:
    """Write a grid as a single-band GeoTIFF.

    ``NaN`` cells are written as ``nodata``, falling back to the grid's own
    nodata value and then to -9999.

    Returns:
        Path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fill = nodata if nodata is not None else grid.nodata
    if fill is None:
        fill = DEFAULT_NODATA
    data = np.where(grid.nodata_mask, fill, grid.data)

    profile = {
        "driver": "GTiff",
        "height": grid.height,
        "width": grid.width,
        "count": 1,
        "dtype": "float64",
        "crs": RioCRS.from_user_input(to_crs_string(grid.crs)) if grid.crs else None,
        "transform": Affine(*grid.transform),
        "nodata": fill,
    }
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(data, 1)
        if grid.band_name:
            dst.set_band_description(1, grid.band_name)
    logger.info(f"Wrote raster {path}: {grid.shape} cells")
    return path
