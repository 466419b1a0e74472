"""Tests for quick-look plots."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.figure import Figure

from aquasmith.objects import PointSet, PolygonSet, RasterGrid
from aquasmith.workflows.plotting import plot_histogram, plot_raster, plot_vector


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def grid():
    data = np.arange(12, dtype=float).reshape(3, 4)
    data[0, 0] = np.nan
    return RasterGrid(data=data, transform=(1, 0, 0, 0, -1, 3), crs="EPSG:4326", band_name="sst")


@pytest.fixture
def regions():
    square = np.array([[0, 0], [2, 0], [2, 2], [0, 2]], dtype=float)
    return PolygonSet(
        rings=[[square], [square + [2, 0]]],
        attributes=pd.DataFrame({"rgn": ["A", "B"], "population": [300.0, np.nan]}),
        crs="EPSG:4326",
    )


class TestPlotting:
    """Tests for plotting helpers."""

    def test_plot_raster(self, grid):
        """Test raster image uses map extent and band name."""
        fig = plot_raster(grid)
        assert isinstance(fig, Figure)
        ax = fig.axes[0]
        assert ax.get_title() == "sst"
        assert list(ax.images[0].get_extent()) == [0.0, 4.0, 0.0, 3.0]

    def test_plot_raster_on_axes(self, grid):
        """Test drawing onto existing axes without a colorbar."""
        fig, ax = plt.subplots()
        out = plot_raster(grid, ax=ax, title="mean SST", colorbar=False)
        assert out is fig
        assert len(fig.axes) == 1
        assert ax.get_title() == "mean SST"

    def test_plot_histogram(self, grid):
        """Test the histogram counts only valid cells."""
        fig = plot_histogram(grid, bins=11)
        counts = [patch.get_height() for patch in fig.axes[0].patches]
        assert sum(counts) == 11

    def test_plot_vector_choropleth(self, regions):
        """Test a choropleth with a point overlay."""
        cities = PointSet(coordinates=[[1, 1], [3, 1]], crs="EPSG:4326")
        fig = plot_vector(regions, column="population", points=cities, title="Population")
        assert isinstance(fig, Figure)
        assert fig.axes[0].get_title() == "Population"

    def test_plot_vector_outline(self, regions):
        """Test plain polygon outlines."""
        fig = plot_vector(regions)
        assert len(fig.axes[0].collections) >= 1

    def test_plot_points(self):
        """Test a point layer on its own."""
        points = PointSet(coordinates=[[0, 0], [1, 1]], crs="EPSG:4326")
        fig = plot_vector(points)
        assert len(fig.axes[0].collections) == 1
