"""Georeferenced single-band raster grid."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class RasterGrid:
    """A 2-D grid of cell values tied to map coordinates.

    Missing cells are stored as ``NaN`` in memory. ``nodata`` is only the
    sentinel used when the grid came from, or goes to, a file.

    Attributes:
        data: Cell values (rows, cols). Always stored as float64.
        transform: Affine coefficients ``(a, b, c, d, e, f)`` mapping
            (col, row) to (x, y): ``x = a*col + b*row + c``,
            ``y = d*col + e*row + f``. Same order as ``affine.Affine``.
        crs: CRS identifier (EPSG string, WKT or PROJ string), or None.
        nodata: File-level nodata sentinel. Defaults to None.
        band_name: Optional label for the layer.
    """

    data: np.ndarray
    transform: tuple[float, float, float, float, float, float]
    crs: Optional[str] = None
    nodata: Optional[float] = None
    band_name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate RasterGrid parameters."""
        data = np.asarray(self.data, dtype=np.float64)
        if data.ndim != 2:
            raise ValueError(f"data must be a 2-D array, got {data.ndim} dimensions")
        object.__setattr__(self, "data", data)

        transform = tuple(float(v) for v in self.transform)
        if len(transform) != 6:
            raise ValueError(
                f"transform must have 6 coefficients (a, b, c, d, e, f), got {len(transform)}"
            )
        if transform[0] == 0 or transform[4] == 0:
            raise ValueError("transform has zero cell size")
        object.__setattr__(self, "transform", transform)

    @property
    def shape(self) -> tuple[int, int]:
        """Grid shape as (rows, cols)."""
        return self.data.shape  # type: ignore[return-value]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def resolution(self) -> tuple[float, float]:
        """Cell size as (x_size, y_size), both positive."""
        a, b, _, d, e, _ = self.transform
        return (float(np.hypot(a, d)), float(np.hypot(b, e)))

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Extent as (xmin, ymin, xmax, ymax)."""
        a, b, c, d, e, f = self.transform
        cols = np.array([0, self.width, 0, self.width])
        rows = np.array([0, 0, self.height, self.height])
        xs = a * cols + b * rows + c
        ys = d * cols + e * rows + f
        return (float(xs.min()), float(ys.min()), float(xs.max()), float(ys.max()))

    @property
    def nodata_mask(self) -> np.ndarray:
        """Boolean array, True where the cell holds no data."""
        return np.isnan(self.data)

    def cell_centers(self) -> tuple[np.ndarray, np.ndarray]:
        """Map coordinates of every cell centre.

        Returns:
            Tuple (x, y) of arrays shaped like ``data``.
        """
        a, b, c, d, e, f = self.transform
        cols, rows = np.meshgrid(
            np.arange(self.width) + 0.5, np.arange(self.height) + 0.5
        )
        x = a * cols + b * rows + c
        y = d * cols + e * rows + f
        return x, y

    def with_data(self, data: np.ndarray, band_name: Optional[str] = None) -> "RasterGrid":
        """Return a grid with new values on the same georeferencing."""
        data = np.asarray(data)
        if data.shape != self.shape:
            raise ValueError(f"data shape {data.shape} does not match grid shape {self.shape}")
        return RasterGrid(
            data=data,
            transform=self.transform,
            crs=self.crs,
            nodata=self.nodata,
            band_name=band_name if band_name is not None else self.band_name,
        )

    def __repr__(self) -> str:
        """String representation."""
        name_str = f", name='{self.band_name}'" if self.band_name else ""
        return (
            f"RasterGrid(shape={self.shape}, resolution={self.resolution}, "
            f"crs={self.crs}{name_str})"
        )
