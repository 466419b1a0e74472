"""Raster algebra on co-registered grids.

Pure cell-wise operations on :class:`RasterGrid`. "No data" is ``NaN``
throughout. Nothing here resamples: grids that do not line up are
rejected with :class:`AlignmentError` and must be warped first with
:class:`aquasmith.tasks.rastertask.RasterTask`.
"""

import logging
import math
import warnings
from collections.abc import Callable, Sequence
from typing import Optional, Union

import numpy as np
import pandas as pd

from aquasmith.objects.polygonset import PolygonSet
from aquasmith.objects.rastergrid import RasterGrid
from aquasmith.primitives.crs import crs_equal, require_same_crs
from aquasmith.primitives.geometry import points_inside, polygonset_to_geometries
from aquasmith.utils.errors import (
    AlignmentError,
    ConfigError,
    CRSError,
    format_validation_error,
    raise_config_error,
)

logger = logging.getLogger(__name__)

KELVIN_OFFSET = 273.15

BINARY_OPS: dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "multiply": np.multiply,
    "add": np.add,
    "subtract": np.subtract,
    "divide": np.divide,
    "minimum": np.minimum,
    "maximum": np.maximum,
}

Breakpoint = tuple[float, float, Optional[float]]


def check_alignment(grid_a: RasterGrid, grid_b: RasterGrid) -> None:
    """Raise unless two grids share CRS, shape and transform.

    Raises:
        CRSError: If either grid has no CRS.
        AlignmentError: If CRS, shape or transform differ.
    """
    for grid, name in ((grid_a, "first"), (grid_b, "second")):
        if grid.crs is None:
            raise CRSError(f"{name} raster has no coordinate reference system")

    if not crs_equal(grid_a.crs, grid_b.crs):
        raise AlignmentError(
            format_validation_error(
                "Rasters use different coordinate reference systems",
                expected=str(grid_a.crs),
                received=str(grid_b.crs),
            ),
            suggestion="Use RasterTask.resample_to_match() before combining",
        )
    if grid_a.shape != grid_b.shape:
        raise AlignmentError(
            format_validation_error(
                "Rasters have different extents",
                expected=f"shape {grid_a.shape}",
                received=f"shape {grid_b.shape}",
            ),
            suggestion="Use RasterTask.resample_to_match() before combining",
        )
    if not np.allclose(grid_a.transform, grid_b.transform, rtol=0.0, atol=1e-9):
        raise AlignmentError(
            format_validation_error(
                "Rasters have different origin or resolution",
                expected=str(grid_a.transform),
                received=str(grid_b.transform),
            ),
            suggestion="Use RasterTask.resample_to_match() before combining",
        )


def validate_breakpoints(breakpoints: Sequence[Sequence[Optional[float]]]) -> list[Breakpoint]:
    """Normalize reclassification rules and check their ordering.

    Each rule is ``(lo, hi, marker)`` covering ``[lo, hi)``. Rules must be
    ascending and must not overlap. ``marker`` may be None or NaN for
    "no data".

    Raises:
        ConfigError: If a rule is malformed, empty, unordered or overlapping.
    """
    rules: list[Breakpoint] = []
    for i, rule in enumerate(breakpoints):
        if len(rule) != 3:
            raise_config_error(
                f"breakpoints[{i}]", tuple(rule), constraint="expected (lo, hi, marker)"
            )
        lo, hi, marker = rule
        try:
            lo, hi = float(lo), float(hi)
            marker = np.nan if marker is None else float(marker)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"breakpoints[{i}] must hold numbers, got {tuple(rule)}") from e
        if math.isnan(lo) or math.isnan(hi) or not lo < hi:
            raise_config_error(f"breakpoints[{i}]", (lo, hi), constraint="lo < hi")
        if rules and lo < rules[-1][1]:
            raise_config_error(
                f"breakpoints[{i}]",
                (lo, hi),
                constraint=f"must start at or after {rules[-1][1]} (ascending, non-overlapping)",
            )
        rules.append((lo, hi, marker))

    if not rules:
        raise ConfigError("At least one reclassification rule is required")
    return rules


def reclassify(grid: RasterGrid, breakpoints: Sequence[Sequence[Optional[float]]]) -> RasterGrid:
    """Replace values in ``[lo, hi)`` intervals by interval markers.

    Cells outside every interval, and cells that were already no data,
    become ``NaN``.

    Args:
        grid: Input raster.
        breakpoints: Rules ``(lo, hi, marker)`` in ascending order.

    Returns:
        Reclassified raster on the same grid.

    Example:
        >>> rules = [(-np.inf, 12, None), (12, 18, 1), (18, np.inf, None)]
        >>> sst_suitable = reclassify(sst_celsius, rules)
    """
    rules = validate_breakpoints(breakpoints)
    out = np.full(grid.shape, np.nan)
    values = grid.data
    with np.errstate(invalid="ignore"):
        for lo, hi, marker in rules:
            out[(values >= lo) & (values < hi)] = marker
    logger.debug(f"Reclassified {grid.shape} grid with {len(rules)} rule(s)")
    return grid.with_data(out)


def combine(
    grid_a: RasterGrid,
    grid_b: RasterGrid,
    op: Union[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = "multiply",
    tolerate_nodata: bool = False,
) -> RasterGrid:
    """Combine two aligned grids cell by cell.

    No data in either input gives no data in the output. With
    ``tolerate_nodata=True`` a cell missing in one input takes the other
    input's value instead; cells missing in both stay missing.

    Args:
        grid_a: First raster.
        grid_b: Second raster, aligned with the first.
        op: Name from ``BINARY_OPS`` or a binary array function.
        tolerate_nodata: Fall back to the valid input where one is missing.

    Returns:
        Combined raster on the shared grid.

    Raises:
        AlignmentError: If the grids are not co-registered.
        ConfigError: If ``op`` is an unknown name.
    """
    if isinstance(op, str):
        if op not in BINARY_OPS:
            raise_config_error("op", op, valid_values=sorted(BINARY_OPS))
        func = BINARY_OPS[op]
    else:
        func = op
    check_alignment(grid_a, grid_b)

    a, b = grid_a.data, grid_b.data
    missing_a, missing_b = np.isnan(a), np.isnan(b)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.asarray(func(a, b), dtype=np.float64)

    if tolerate_nodata:
        out = np.where(missing_a & ~missing_b, b, out)
        out = np.where(missing_b & ~missing_a, a, out)
        out[missing_a & missing_b] = np.nan
    else:
        out[missing_a | missing_b] = np.nan
    return grid_a.with_data(out)


def mask(grid: RasterGrid, polygons: PolygonSet) -> RasterGrid:
    """Set cells whose centre lies outside every polygon to no data.

    A centre exactly on a polygon boundary counts as inside.

    Raises:
        CRSError: If the raster and polygons are not in the same CRS.
    """
    require_same_crs(grid.crs, polygons.crs, names=("raster", "polygon"))
    x, y = grid.cell_centers()
    inside = points_inside(x, y, polygonset_to_geometries(polygons))
    out = np.where(inside, grid.data, np.nan)
    logger.info(f"Masked raster to {len(polygons)} polygon(s): {int(inside.sum())} cells kept")
    return grid.with_data(out)


def apply(grid: RasterGrid, func: Callable[[np.ndarray], np.ndarray]) -> RasterGrid:
    """Apply a cell-wise function; no-data cells stay no data."""
    with np.errstate(invalid="ignore"):
        out = np.asarray(func(grid.data), dtype=np.float64)
    if out.shape != grid.shape:
        raise ConfigError(f"function changed grid shape from {grid.shape} to {out.shape}")
    out[grid.nodata_mask] = np.nan
    return grid.with_data(out)


def kelvin_to_celsius(grid: RasterGrid) -> RasterGrid:
    """Convert temperatures from Kelvin to degrees Celsius."""
    return apply(grid, lambda values: values - KELVIN_OFFSET)


def stack_mean(grids: Sequence[RasterGrid], skip_nodata: bool = False) -> RasterGrid:
    """Cell-wise mean of aligned layers.

    Args:
        grids: Rasters on the same grid.
        skip_nodata: If True ignore missing layers per cell; otherwise any
            missing layer makes the cell missing.

    Raises:
        ConfigError: If no grids are given.
        AlignmentError: If any grid does not line up with the first.
    """
    if not grids:
        raise ConfigError("stack_mean needs at least one raster")
    for other in grids[1:]:
        check_alignment(grids[0], other)

    stacked = np.stack([g.data for g in grids])
    if skip_nodata:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=RuntimeWarning)
            out = np.nanmean(stacked, axis=0)
    else:
        out = stacked.mean(axis=0)
    logger.info(f"Averaged {len(grids)} raster layer(s)")
    return grids[0].with_data(out, band_name="mean")


def crop(
    grid: RasterGrid,
    bounds: Union[tuple[float, float, float, float], PolygonSet],
) -> RasterGrid:
    """Cut a grid down to a bounding box, keeping whole cells.

    The window is snapped outward so every cell touching the box is kept.

    Args:
        grid: North-up raster (no rotation terms).
        bounds: (xmin, ymin, xmax, ymax) in the grid CRS, or a PolygonSet
            whose extent is used.

    Raises:
        CRSError: If a PolygonSet in another CRS is given.
        ConfigError: If the grid is rotated or the box misses the grid.
    """
    if isinstance(bounds, PolygonSet):
        require_same_crs(grid.crs, bounds.crs, names=("raster", "polygon"))
        bounds = bounds.bounds
    xmin, ymin, xmax, ymax = bounds
    a, b, c, d, e, f = grid.transform
    if b != 0 or d != 0:
        raise ConfigError("crop only supports north-up rasters without rotation")

    cols = sorted(((xmin - c) / a, (xmax - c) / a))
    rows = sorted(((ymax - f) / e, (ymin - f) / e))
    col0 = max(int(math.floor(cols[0] + 1e-9)), 0)
    col1 = min(int(math.ceil(cols[1] - 1e-9)), grid.width)
    row0 = max(int(math.floor(rows[0] + 1e-9)), 0)
    row1 = min(int(math.ceil(rows[1] - 1e-9)), grid.height)
    if col0 >= col1 or row0 >= row1:
        raise ConfigError(
            f"Crop bounds {tuple(bounds)} do not overlap raster extent {grid.bounds}"
        )

    transform = (a, b, c + col0 * a, d, e, f + row0 * e)
    return RasterGrid(
        data=grid.data[row0:row1, col0:col1].copy(),
        transform=transform,
        crs=grid.crs,
        nodata=grid.nodata,
        band_name=grid.band_name,
    )


def cell_area(grid: RasterGrid) -> float:
    """Area of one cell in squared CRS units."""
    a, b, _, d, e, _ = grid.transform
    return abs(a * e - b * d)


def zonal_count(
    grid: RasterGrid, polygons: PolygonSet, key: Optional[str] = None
) -> pd.DataFrame:
    """Count valid cells, and their area, inside each polygon.

    A cell belongs to a polygon when its centre is inside or on the polygon
    boundary; cells in overlapping polygons are counted for each.

    Args:
        grid: Raster whose non-null cells are counted.
        polygons: Zones in the raster CRS.
        key: Polygon attribute used to label rows; defaults to row position.

    Returns:
        DataFrame with columns [key or 'polygon', 'n_cells', 'area'].
    """
    require_same_crs(grid.crs, polygons.crs, names=("raster", "polygon"))
    if key is not None and key not in polygons.attributes.columns:
        raise ConfigError(f"Column '{key}' not found in polygon attributes")

    x, y = grid.cell_centers()
    valid = ~grid.nodata_mask
    counts = [
        int((points_inside(x, y, [geom]) & valid).sum())
        for geom in polygonset_to_geometries(polygons)
    ]
    label = key if key is not None else "polygon"
    labels = polygons.attributes[key].to_numpy() if key is not None else np.arange(len(polygons))
    counts_arr = np.asarray(counts, dtype=np.int64)
    return pd.DataFrame(
        {label: labels, "n_cells": counts_arr, "area": counts_arr * cell_area(grid)}
    )
