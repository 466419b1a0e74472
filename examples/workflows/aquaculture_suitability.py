"""Aquaculture Suitability Workflow Demo.

This demo walks through the West Coast aquaculture exercise on synthetic
data:

1. Load regions, cities and rasters from disk
2. Total city population per region
3. Average yearly SST and convert to Celsius
4. Resample NPP onto the SST grid
5. Reclassify, combine and mask into a suitability map
6. Summarize suitable area per region

Real inputs (wc_regions_clean.shp, cities.csv, average_annual_sst_*.tif,
annual_npp.tif) drop straight into the same calls.
"""

import logging
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd

from aquasmith import PointSet, PolygonSet, RasterGrid
from aquasmith.primitives.raster import kelvin_to_celsius, stack_mean
from aquasmith.workflows import (
    SuitabilityAnalysis,
    plot_raster,
    plot_vector,
    population_by_region,
    read_points_csv,
    read_raster,
    read_rasters,
    read_vector,
    write_raster,
    write_vector,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def create_synthetic_inputs(data_dir: Path):
    """Write synthetic regions, cities and rasters resembling the West Coast data.

    In practice these come from the tutorial's data folder.
    """
    np.random.seed(42)

    # Five coastal regions stacked north to south, 2 degrees tall each
    names = [
        "Washington",
        "Oregon",
        "Northern California",
        "Central California",
        "Southern California",
    ]
    rings = []
    for i in range(5):
        top = 48.0 - 2.0 * i
        rings.append(
            [np.array([[-126.0, top - 2.0], [-122.0, top - 2.0], [-122.0, top], [-126.0, top]])]
        )
    regions = PolygonSet(
        rings=rings,
        attributes=pd.DataFrame({"rgn": names, "rgn_key": ["WA", "OR", "CA-N", "CA-C", "CA-S"]}),
        crs="EPSG:4326",
    )
    write_vector(regions, data_dir / "wc_regions_clean.shp")

    # Cities scattered over the regions, a few inland
    n_cities = 60
    cities = pd.DataFrame(
        {
            "name": [f"city_{i}" for i in range(n_cities)],
            "lon": np.random.uniform(-125.5, -120.5, n_cities),
            "lat": np.random.uniform(38.5, 47.5, n_cities),
            "population": np.random.randint(1_000, 500_000, n_cities),
        }
    )
    cities.to_csv(data_dir / "cities.csv", index=False)

    # SST in Kelvin on a 0.1 degree grid, warming to the south
    rows, cols = 100, 40
    transform = (0.1, 0.0, -126.0, 0.0, -0.1, 48.0)
    lat = 48.0 - 0.1 * (np.arange(rows) + 0.5)
    for year in range(2008, 2013):
        celsius = 8.0 + 0.9 * (48.0 - lat)[:, None] + np.random.normal(0, 0.5, (rows, cols))
        grid = RasterGrid(
            data=celsius + 273.15, transform=transform, crs="EPSG:4326", band_name=f"sst_{year}"
        )
        write_raster(grid, data_dir / f"average_annual_sst_{year}.tif")

    # NPP on a coarser 0.5 degree grid, higher near the coast
    npp_transform = (0.5, 0.0, -126.0, 0.0, -0.5, 48.0)
    lon = -126.0 + 0.5 * (np.arange(8) + 0.5)
    npp = 2.0 + 0.25 * (lon + 126.0)[None, :] + np.random.normal(0, 0.1, (20, 8))
    write_raster(
        RasterGrid(data=npp, transform=npp_transform, crs="EPSG:4326", band_name="npp"),
        data_dir / "annual_npp.tif",
    )


def main():
    """Run aquaculture suitability workflow demo."""
    print("=" * 80)
    print("AQUACULTURE SUITABILITY WORKFLOW")
    print("=" * 80)

    with tempfile.TemporaryDirectory() as tmp:
        data_dir = Path(tmp) / "data"
        out_dir = Path(tmp) / "output"
        create_synthetic_inputs(data_dir)

        # ============================================================
        # STEP 1: Load inputs
        # ============================================================
        print("\nSTEP 1: Loading inputs")
        print("-" * 80)
        regions = read_vector(data_dir / "wc_regions_clean.shp")
        cities = read_points_csv(data_dir / "cities.csv", x_col="lon", y_col="lat")
        sst_layers = read_rasters(sorted(data_dir.glob("average_annual_sst_*.tif")))
        npp = read_raster(data_dir / "annual_npp.tif")
        print(f"  Regions: {regions}")
        print(f"  Cities:  {cities}")
        print(f"  SST:     {len(sst_layers)} yearly layers of shape {sst_layers[0].shape}")
        print(f"  NPP:     {npp}")

        # ============================================================
        # STEP 2: Population per region
        # ============================================================
        print("\nSTEP 2: Total population per region")
        print("-" * 80)
        regions_pop = population_by_region(cities, regions, key="rgn")
        for _, row in regions_pop.attributes.iterrows():
            total = "no cities" if pd.isna(row["population"]) else f"{row['population']:,.0f}"
            print(f"  {row['rgn']:<22} {total:>12}")
        write_vector(regions_pop, out_dir / "regions_population.gpkg")

        # ============================================================
        # STEP 3: Mean SST in Celsius
        # ============================================================
        print("\nSTEP 3: Mean sea surface temperature")
        print("-" * 80)
        sst_c = kelvin_to_celsius(stack_mean(sst_layers))
        valid = sst_c.data[~sst_c.nodata_mask]
        print(f"  SST range: {valid.min():.1f} to {valid.max():.1f} C")

        # ============================================================
        # STEP 4-6: Suitability overlay and per-region area
        # ============================================================
        print("\nSTEP 4: Suitability overlay (SST 12-18 C, NPP 2.6-3.0)")
        print("-" * 80)
        result = SuitabilityAnalysis(
            sst_layers=sst_layers,
            npp=npp,
            boundary=regions,
            sst_range=(12, 18),
            npp_range=(2.6, 3.0),
            resampling="nearest",
            key="rgn",
        ).run()
        print(f"  {result}")
        print(f"  Suitable cells: {result.n_suitable}")
        print(f"  Suitable area:  {result.suitable_area:.2f} square degrees")

        print("\n  Suitable cells per region:")
        print(result.zonal.to_string(index=False))

        write_raster(result.suitability, out_dir / "suitability.tif")
        print(f"\n  Outputs written to {out_dir}")

        plot_raster(result.suitability, title="Suitable cells").savefig(out_dir / "suitability.png")
        plot_vector(regions_pop, column="population", points=cities).savefig(
            out_dir / "population.png"
        )
        print("  Figures saved")

    print("\n" + "=" * 80)
    print("Done")
    print("=" * 80)


if __name__ == "__main__":
    main()
