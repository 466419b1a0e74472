"""Quick-look plots for rasters and vector layers.

Layer 4: Workflows - Public entry points with plotting.

Every function returns the matplotlib Figure and leaves showing or saving
it to the caller.
"""

import logging
from typing import Optional, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.objects.rastergrid import RasterGrid
from aquasmith.workflows.io import to_geodataframe

logger = logging.getLogger(__name__)


def _figure(ax: Optional[Axes], figsize: tuple[float, float]) -> tuple[Figure, Axes]:
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return fig, ax
    return ax.figure, ax


def plot_raster(
    grid: RasterGrid,
    ax: Optional[Axes] = None,
    title: Optional[str] = None,
    cmap: str = "viridis",
    colorbar: bool = True,
    figsize: tuple[float, float] = (8, 6),
) -> Figure:
    """Draw a raster in map coordinates; no-data cells are left blank.

    Args:
        grid: North-up raster.
        ax: Axes to draw on; a new figure is created if None.
        title: Plot title, defaults to the band name.
        cmap: Matplotlib colormap name.
        colorbar: Add a colorbar.
        figsize: Size of a newly created figure.
    """
    fig, ax = _figure(ax, figsize)
    xmin, ymin, xmax, ymax = grid.bounds
    origin = "upper" if grid.transform[4] < 0 else "lower"
    image = ax.imshow(
        np.ma.masked_invalid(grid.data),
        extent=(xmin, xmax, ymin, ymax),
        origin=origin,
        cmap=cmap,
        interpolation="nearest",
    )
    if colorbar:
        fig.colorbar(image, ax=ax, shrink=0.8)
    ax.set_title(title if title is not None else (grid.band_name or ""))
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    return fig


def plot_histogram(
    grid: RasterGrid,
    bins: int = 30,
    ax: Optional[Axes] = None,
    title: Optional[str] = None,
    figsize: tuple[float, float] = (6, 4),
) -> Figure:
    """Histogram of the valid cell values of a raster."""
    fig, ax = _figure(ax, figsize)
    values = grid.data[~grid.nodata_mask]
    ax.hist(values, bins=bins, color="steelblue", edgecolor="white")
    ax.set_title(title if title is not None else f"{grid.band_name or 'values'} distribution")
    ax.set_xlabel("value")
    ax.set_ylabel("cells")
    return fig


def plot_vector(
    layer: Union[PointSet, PolygonSet],
    column: Optional[str] = None,
    points: Optional[PointSet] = None,
    ax: Optional[Axes] = None,
    title: Optional[str] = None,
    cmap: str = "viridis",
    figsize: tuple[float, float] = (8, 6),
) -> Figure:
    """Draw a vector layer, optionally colored by an attribute.

    Args:
        layer: Polygons or points to draw.
        column: Attribute used for a choropleth / colored markers.
        points: Extra point layer drawn on top (e.g. cities over regions).
        ax: Axes to draw on; a new figure is created if None.
        title: Plot title.
        cmap: Matplotlib colormap name.
        figsize: Size of a newly created figure.
    """
    fig, ax = _figure(ax, figsize)
    gdf = to_geodataframe(layer)
    if column is not None:
        gdf.plot(
            ax=ax,
            column=column,
            cmap=cmap,
            legend=True,
            edgecolor="black",
            linewidth=0.5,
            missing_kwds={"color": "lightgrey"},
        )
    elif isinstance(layer, PolygonSet):
        gdf.plot(ax=ax, facecolor="none", edgecolor="black", linewidth=0.5)
    else:
        gdf.plot(ax=ax, color="black", markersize=8)

    if points is not None:
        to_geodataframe(points).plot(ax=ax, color="red", markersize=8)
    if title:
        ax.set_title(title)
    return fig
