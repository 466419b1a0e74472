"""Raster reprojection and resampling task.

Layer 3: Tasks - User intent translation.

Warping a raster into another CRS moves cell centres off the original
lattice, so every call names the resampling policy that fills the new
grid. Nearest neighbour is the default because it never invents values,
which keeps categorical and derived layers intact.
"""

import logging
import math
from typing import Any, Optional, Union

import numpy as np
from rasterio.crs import CRS as RioCRS
from rasterio.enums import Resampling
from rasterio.transform import Affine
from rasterio.warp import calculate_default_transform, reproject, transform_bounds

from aquasmith.objects.rastergrid import RasterGrid
from aquasmith.primitives.crs import to_crs_string
from aquasmith.utils.errors import CRSError, raise_config_error

logger = logging.getLogger(__name__)

RESAMPLING_METHODS = tuple(r.name for r in Resampling)


def resolve_resampling(method: Union[str, Resampling]) -> Resampling:
    """Look up a rasterio resampling enum by name.

    Raises:
        ConfigError: If the name is not a rasterio resampling method.
    """
    if isinstance(method, Resampling):
        return method
    try:
        return Resampling[str(method).lower()]
    except KeyError:
        raise_config_error("resampling", method, valid_values=list(RESAMPLING_METHODS))


def _rio_crs(crs: Any, role: str) -> tuple[str, RioCRS]:
    if crs is None:
        raise CRSError(
            f"{role} raster CRS is not set",
            suggestion="Raster reprojection needs an explicit CRS on both sides",
        )
    crs_string = to_crs_string(crs)
    return crs_string, RioCRS.from_user_input(crs_string)


class RasterTask:
    """Warp rasters between coordinate systems and grids.

    Example:
        >>> from aquasmith.tasks import RasterTask
        >>>
        >>> task = RasterTask(resampling="nearest")
        >>> npp_on_sst = task.resample_to_match(npp, template=sst)
        >>> sst_utm = task.reproject(sst, "EPSG:32610", resolution=1000)
    """

    def __init__(self, resampling: Union[str, Resampling] = "nearest"):
        """Initialize raster task.

        Args:
            resampling: Default resampling policy name (e.g. 'nearest',
                'bilinear', 'average').
        """
        self.resampling = resolve_resampling(resampling)

    def _warp(
        self,
        grid: RasterGrid,
        dst_transform: Affine,
        dst_shape: tuple[int, int],
        dst_crs: RioCRS,
        dst_crs_string: str,
        resampling: Optional[Union[str, Resampling]],
    ) -> RasterGrid:
        _, src_crs = _rio_crs(grid.crs, "source")
        method = self.resampling if resampling is None else resolve_resampling(resampling)

        destination = np.full(dst_shape, np.nan, dtype=np.float64)
        reproject(
            source=grid.data,
            destination=destination,
            src_transform=Affine(*grid.transform),
            src_crs=src_crs,
            dst_transform=dst_transform,
            dst_crs=dst_crs,
            resampling=method,
            src_nodata=np.nan,
            dst_nodata=np.nan,
        )
        logger.info(
            f"Warped {grid.shape} grid from {grid.crs} to {dst_crs_string} "
            f"{dst_shape} using {method.name} resampling"
        )
        return RasterGrid(
            data=destination,
            transform=tuple(dst_transform)[:6],
            crs=dst_crs_string,
            nodata=grid.nodata,
            band_name=grid.band_name,
        )

    def reproject(
        self,
        grid: RasterGrid,
        target_crs: Any,
        resampling: Optional[Union[str, Resampling]] = None,
        resolution: Optional[Union[float, tuple[float, float]]] = None,
    ) -> RasterGrid:
        """Reproject a raster into another CRS.

        The output grid starts at the top-left corner of the transformed
        extent and has enough rows and columns to cover all of it.

        Args:
            grid: Source raster with a CRS.
            target_crs: Target CRS (EPSG code, string, or CRS object).
            resampling: Override the task's resampling policy.
            resolution: Output cell size in target units, a single value or
                an (x, y) pair; derived from the source grid if omitted.

        Returns:
            Raster in ``target_crs``.

        Raises:
            CRSError: If the source CRS is unset or either CRS is invalid.
            ConfigError: If the resampling name is unknown.
        """
        _, src_crs = _rio_crs(grid.crs, "source")
        dst_crs_string, dst_crs = _rio_crs(target_crs, "target")
        left, bottom, right, top = grid.bounds
        if resolution is None:
            default_transform, _, _ = calculate_default_transform(
                src_crs,
                dst_crs,
                grid.width,
                grid.height,
                left=left,
                bottom=bottom,
                right=right,
                top=top,
            )
            res_x, res_y = default_transform.a, -default_transform.e
        elif np.ndim(resolution) == 0:
            res_x = res_y = float(resolution)
        else:
            res_x, res_y = (float(r) for r in resolution)

        dst_left, dst_bottom, dst_right, dst_top = transform_bounds(
            src_crs, dst_crs, left, bottom, right, top, densify_pts=21
        )
        # Round up so the last row and column reach the far edge.
        width = max(int(math.ceil((dst_right - dst_left) / res_x - 1e-9)), 1)
        height = max(int(math.ceil((dst_top - dst_bottom) / res_y - 1e-9)), 1)
        dst_transform = Affine(res_x, 0.0, dst_left, 0.0, -res_y, dst_top)
        return self._warp(
            grid, dst_transform, (height, width), dst_crs, dst_crs_string, resampling
        )

    def resample_to_match(
        self,
        grid: RasterGrid,
        template: RasterGrid,
        resampling: Optional[Union[str, Resampling]] = None,
    ) -> RasterGrid:
        """Warp a raster onto exactly the grid of ``template``.

        The result shares CRS, shape and transform with the template, so it
        can be passed straight to :func:`aquasmith.primitives.raster.combine`.

        Raises:
            CRSError: If either raster has no CRS.
            ConfigError: If the resampling name is unknown.
        """
        dst_crs_string, dst_crs = _rio_crs(template.crs, "template")
        return self._warp(
            grid,
            Affine(*template.transform),
            template.shape,
            dst_crs,
            dst_crs_string,
            resampling,
        )
