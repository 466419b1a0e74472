"""Tests for vector, table and raster file I/O."""

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import LineString, Point

from aquasmith.objects import PointSet, PolygonSet, RasterGrid
from aquasmith.primitives.geometry import polygonset_to_geometries
from aquasmith.workflows.io import (
    DEFAULT_NODATA,
    from_geodataframe,
    read_points_csv,
    read_raster,
    read_rasters,
    read_vector,
    to_geodataframe,
    write_raster,
    write_vector,
)
from aquasmith.utils.errors import FormatError


def _square(x0, y0, size):
    return np.array(
        [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]],
        dtype=float,
    )


@pytest.fixture
def regions():
    """Two regions, the second with a hole."""
    return PolygonSet(
        rings=[[_square(0, 0, 2)], [_square(2, 0, 4), _square(3, 1, 1)]],
        attributes=pd.DataFrame({"rgn": ["A", "B"], "rgn_id": [1, 2]}),
        crs="EPSG:4326",
    )


@pytest.fixture
def sst_grid():
    """A 3x4 grid with one no-data cell."""
    data = np.arange(12, dtype=float).reshape(3, 4) + 280.0
    data[0, 0] = np.nan
    return RasterGrid(
        data=data,
        transform=(0.5, 0.0, -125.0, 0.0, -0.5, 40.0),
        crs="EPSG:4326",
        band_name="sst",
    )


class TestVectorIO:
    """Tests for vector reading and writing."""

    @pytest.mark.parametrize("suffix", [".gpkg", ".shp"])
    def test_polygon_round_trip(self, tmp_path, regions, suffix):
        """Test polygons keep attributes, CRS and area through a file."""
        path = write_vector(regions, tmp_path / f"regions{suffix}")
        loaded = read_vector(path)
        assert isinstance(loaded, PolygonSet)
        assert loaded.crs == "EPSG:4326"
        assert loaded.attributes["rgn"].tolist() == ["A", "B"]
        areas = [geom.area for geom in polygonset_to_geometries(loaded)]
        assert areas == pytest.approx([4.0, 15.0])

    def test_point_round_trip(self, tmp_path):
        """Test points keep coordinates and attributes."""
        points = PointSet(
            coordinates=[[-122.4, 37.8], [-118.2, 34.1]],
            attributes=pd.DataFrame({"name": ["SF", "LA"]}),
            crs="EPSG:4326",
        )
        loaded = read_vector(write_vector(points, tmp_path / "cities.gpkg"))
        assert isinstance(loaded, PointSet)
        np.testing.assert_allclose(loaded.coordinates, points.coordinates)
        assert loaded.attributes["name"].tolist() == ["SF", "LA"]

    def test_crs_override(self, tmp_path, regions):
        """Test an explicit CRS replaces the stored one."""
        path = write_vector(regions, tmp_path / "regions.gpkg")
        assert read_vector(path, crs=3857).crs == "EPSG:3857"

    def test_creates_parent_dirs(self, tmp_path, regions):
        """Test writing into a directory that does not exist yet."""
        path = write_vector(regions, tmp_path / "nested" / "out" / "regions.gpkg")
        assert path.exists()

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FormatError."""
        with pytest.raises(FormatError, match="not found"):
            read_vector(tmp_path / "nope.shp")

    def test_corrupt_file(self, tmp_path):
        """Test an unreadable file raises FormatError."""
        path = tmp_path / "broken.geojson"
        path.write_text("this is not geojson")
        with pytest.raises(FormatError, match="Could not read"):
            read_vector(path)

    def test_unsupported_geometry(self):
        """Test line layers are rejected."""
        gdf = gpd.GeoDataFrame(geometry=[LineString([(0, 0), (1, 1)])], crs="EPSG:4326")
        with pytest.raises(FormatError, match="Unsupported geometry"):
            from_geodataframe(gdf)

    def test_mixed_geometry(self):
        """Test a layer mixing points and polygons is rejected."""
        gdf = gpd.GeoDataFrame(
            geometry=[Point(0, 0), Point(1, 1).buffer(0.5)], crs="EPSG:4326"
        )
        with pytest.raises(FormatError):
            from_geodataframe(gdf)

    def test_null_geometry(self):
        """Test null geometries are rejected."""
        gdf = gpd.GeoDataFrame(geometry=[Point(0, 0), None], crs="EPSG:4326")
        with pytest.raises(FormatError, match="null or empty"):
            from_geodataframe(gdf)

    def test_layer_without_crs(self):
        """Test a frame without CRS gives a layer with crs None."""
        gdf = gpd.GeoDataFrame({"v": [1]}, geometry=[Point(0, 0)])
        assert from_geodataframe(gdf).crs is None

    def test_to_geodataframe(self, regions):
        """Test conversion to GeoDataFrame."""
        gdf = to_geodataframe(regions)
        assert list(gdf.columns) == ["rgn", "rgn_id", "geometry"]
        assert gdf.crs.to_epsg() == 4326

    def test_to_geodataframe_type_error(self):
        """Test only vector layers convert."""
        with pytest.raises(TypeError):
            to_geodataframe("regions")


class TestPointsCSV:
    """Tests for reading point tables."""

    @pytest.fixture
    def cities_csv(self, tmp_path):
        path = tmp_path / "cities.csv"
        pd.DataFrame(
            {
                "name": ["SF", "LA", "Seattle"],
                "lon": [-122.4, -118.2, -122.3],
                "lat": [37.8, 34.1, 47.6],
                "population": [870000, 3900000, 740000],
            }
        ).to_csv(path, index=False)
        return path

    def test_read(self, cities_csv):
        """Test coordinates and remaining columns are read."""
        points = read_points_csv(cities_csv)
        assert len(points) == 3
        assert points.crs == "EPSG:4326"
        assert list(points.attributes.columns) == ["name", "population"]
        np.testing.assert_allclose(points.x, [-122.4, -118.2, -122.3])

    def test_keep_coordinates(self, cities_csv):
        """Test the coordinate columns can be kept."""
        points = read_points_csv(cities_csv, keep_coordinates=True)
        assert "lon" in points.attributes.columns

    def test_custom_columns(self, tmp_path):
        """Test other coordinate column names and separators."""
        path = tmp_path / "pts.tsv"
        path.write_text("x\ty\tv\n500000\t4100000\t1\n")
        points = read_points_csv(path, x_col="x", y_col="y", crs=32610, sep="\t")
        assert points.crs == "EPSG:32610"
        assert points.attributes["v"].tolist() == [1]

    def test_missing_column(self, cities_csv):
        """Test absent coordinate columns raise FormatError."""
        with pytest.raises(FormatError, match="not found"):
            read_points_csv(cities_csv, x_col="longitude")

    def test_non_numeric(self, tmp_path):
        """Test text coordinates raise FormatError."""
        path = tmp_path / "bad.csv"
        path.write_text("lon,lat\nwest,north\n")
        with pytest.raises(FormatError, match="numeric"):
            read_points_csv(path)

    def test_missing_values(self, tmp_path):
        """Test blank coordinates raise FormatError."""
        path = tmp_path / "gaps.csv"
        path.write_text("lon,lat\n1.0,\n2.0,3.0\n")
        with pytest.raises(FormatError, match="missing values"):
            read_points_csv(path)

    def test_empty_file(self, tmp_path):
        """Test an empty file raises FormatError."""
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(FormatError, match="Could not parse"):
            read_points_csv(path)

    def test_directory(self, tmp_path):
        """Test a directory path raises FormatError instead of an OS error."""
        with pytest.raises(FormatError, match="Could not parse"):
            read_points_csv(tmp_path)


class TestRasterIO:
    """Tests for raster reading and writing."""

    def test_round_trip(self, tmp_path, sst_grid):
        """Test values, no data, georeferencing and name survive a GeoTIFF."""
        path = write_raster(sst_grid, tmp_path / "sst.tif")
        loaded = read_raster(path)
        np.testing.assert_array_equal(loaded.data, sst_grid.data)
        assert loaded.transform == pytest.approx(sst_grid.transform)
        assert loaded.crs == "EPSG:4326"
        assert loaded.nodata == DEFAULT_NODATA
        assert loaded.band_name == "sst"

    def test_explicit_nodata(self, tmp_path, sst_grid):
        """Test a caller-supplied nodata sentinel is written."""
        path = write_raster(sst_grid, tmp_path / "sst.tif", nodata=-1.0)
        loaded = read_raster(path)
        assert loaded.nodata == -1.0
        assert np.isnan(loaded.data[0, 0])

    def test_unnamed_band_uses_stem(self, tmp_path):
        """Test a band without description is named after the file."""
        grid = RasterGrid(data=np.ones((2, 2)), transform=(1, 0, 0, 0, -1, 2), crs="EPSG:4326")
        loaded = read_raster(write_raster(grid, tmp_path / "annual_npp.tif"))
        assert loaded.band_name == "annual_npp"

    def test_read_rasters(self, tmp_path, sst_grid):
        """Test reading several files."""
        paths = [write_raster(sst_grid, tmp_path / f"sst_{year}.tif") for year in (2008, 2009)]
        grids = read_rasters(paths)
        assert len(grids) == 2

    def test_read_rasters_empty(self):
        """Test an empty path list raises FormatError."""
        with pytest.raises(FormatError):
            read_rasters([])

    def test_band_out_of_range(self, tmp_path, sst_grid):
        """Test a missing band raises FormatError."""
        path = write_raster(sst_grid, tmp_path / "sst.tif")
        with pytest.raises(FormatError, match="out of range"):
            read_raster(path, band=2)

    def test_missing_file(self, tmp_path):
        """Test a missing raster raises FormatError."""
        with pytest.raises(FormatError, match="not found"):
            read_raster(tmp_path / "nope.tif")

    def test_corrupt_file(self, tmp_path):
        """Test a non-raster file raises FormatError."""
        path = tmp_path / "broken.tif"
        path.write_text("not a tiff")
        with pytest.raises(FormatError, match="Could not read"):
            read_raster(path)
