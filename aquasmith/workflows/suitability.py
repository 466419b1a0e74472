"""Region population summary and aquaculture suitability workflows.

Layer 4: Workflows - Public entry points.

Two analyses:

1. Population by region: join point records (cities) to the polygons
   (regions) that contain them and total a population field per region.
2. Aquaculture suitability: average yearly sea surface temperature (SST)
   layers, convert to Celsius, bring net primary productivity (NPP) onto
   the SST grid, keep cells inside the preferred SST and NPP ranges,
   multiply the two masks and clip the result to the regions.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

import numpy as np
import pandas as pd

from aquasmith.config import PipelineConfig
from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.objects.rastergrid import RasterGrid
from aquasmith.primitives.crs import crs_equal, reproject_polygons
from aquasmith.primitives.raster import (
    cell_area,
    check_alignment,
    combine,
    crop,
    kelvin_to_celsius,
    mask,
    reclassify,
    stack_mean,
    zonal_count,
)
from aquasmith.tasks.jointask import JoinTask
from aquasmith.tasks.rastertask import RasterTask
from aquasmith.utils.errors import AlignmentError, ConfigError
from aquasmith.workflows.io import (
    read_points_csv,
    read_raster,
    read_rasters,
    read_vector,
    write_raster,
    write_vector,
)

logger = logging.getLogger(__name__)

SUITABLE = 1.0


def suitability_breakpoints(lo: float, hi: float) -> list[tuple[float, float, Optional[float]]]:
    """Rules marking ``[lo, hi)`` as suitable and everything else as no data."""
    return [(-np.inf, lo, None), (lo, hi, SUITABLE), (hi, np.inf, None)]


def population_by_region(
    points: PointSet,
    regions: PolygonSet,
    key: str,
    field: str = "population",
    on_overlap: Literal["error", "first"] = "error",
) -> PolygonSet:
    """Total a point attribute per enclosing region.

    Points are reprojected into the region CRS when needed. Regions with
    no points get a null total.

    Example:
        >>> cities = read_points_csv("data/cities.csv", x_col="lon", y_col="lat")
        >>> regions = read_vector("data/wc_regions_clean.shp")
        >>> summary = population_by_region(cities, regions, key="rgn")
    """
    task = JoinTask(key=key, on_overlap=on_overlap, align_crs=True)
    return task.summarize(points, regions, field=field)


@dataclass
class SuitabilityResult:
    """Outputs of the suitability analysis.

    Attributes:
        suitability: Combined mask; 1 where both SST and NPP are suitable
            inside the regions, NaN elsewhere.
        sst: Mean SST on the analysis grid (Celsius if converted).
        npp: NPP resampled onto the analysis grid.
        sst_suitable: Reclassified SST.
        npp_suitable: Reclassified NPP.
        zonal: Suitable cell count and area per region (if a key was given).
    """

    suitability: RasterGrid
    sst: RasterGrid
    npp: RasterGrid
    sst_suitable: RasterGrid
    npp_suitable: RasterGrid
    zonal: Optional[pd.DataFrame] = None

    @property
    def n_suitable(self) -> int:
        return int((~self.suitability.nodata_mask).sum())

    @property
    def suitable_area(self) -> float:
        return self.n_suitable * cell_area(self.suitability)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"SuitabilityResult(n_suitable={self.n_suitable}, "
            f"area={self.suitable_area:.4g}, grid={self.suitability.shape})"
        )


class SuitabilityAnalysis:
    """Overlay SST and NPP rasters to find cells suitable for aquaculture.

    Example:
        >>> analysis = SuitabilityAnalysis(
        ...     sst_layers=read_rasters(sst_files),
        ...     npp=read_raster("data/annual_npp.tif"),
        ...     boundary=regions,
        ...     sst_range=(12, 18),
        ...     npp_range=(2.6, 3.0),
        ...     key="rgn",
        ... )
        >>> result = analysis.run()
        >>> result.zonal
    """

    def __init__(
        self,
        sst_layers: Sequence[RasterGrid],
        npp: RasterGrid,
        boundary: PolygonSet,
        sst_range: tuple[float, float] = (12.0, 18.0),
        npp_range: tuple[float, float] = (2.6, 3.0),
        sst_kelvin: bool = True,
        target_crs: Optional[Any] = None,
        resampling: str = "nearest",
        key: Optional[str] = None,
    ):
        """Initialize suitability analysis.

        Args:
            sst_layers: One or more aligned SST rasters to average.
            npp: NPP raster on any grid with a CRS.
            boundary: Regions that clip the result.
            sst_range: Suitable SST interval [lo, hi).
            npp_range: Suitable NPP interval [lo, hi).
            sst_kelvin: Convert SST from Kelvin to Celsius.
            target_crs: Analysis CRS; defaults to the SST CRS.
            resampling: Policy used to warp NPP (and SST, if reprojected).
            key: Region attribute for the per-region summary.
        """
        if not sst_layers:
            raise ConfigError("At least one SST layer is required")
        self.sst_layers = list(sst_layers)
        self.npp = npp
        self.boundary = boundary
        self.sst_breakpoints = suitability_breakpoints(*sst_range)
        self.npp_breakpoints = suitability_breakpoints(*npp_range)
        self.sst_kelvin = sst_kelvin
        self.target_crs = target_crs
        self.raster_task = RasterTask(resampling=resampling)
        self.key = key

    def _prepare_sst(self) -> RasterGrid:
        sst = stack_mean(self.sst_layers)
        if self.sst_kelvin:
            sst = kelvin_to_celsius(sst)
        if self.target_crs is not None and not crs_equal(sst.crs, self.target_crs):
            sst = self.raster_task.reproject(sst, self.target_crs)
        return sst

    def _align_npp(self, template: RasterGrid) -> RasterGrid:
        try:
            check_alignment(template, self.npp)
            return self.npp
        except AlignmentError:
            logger.info("NPP grid differs from SST grid; resampling NPP onto SST grid")
            return self.raster_task.resample_to_match(self.npp, template)

    def run(self) -> SuitabilityResult:
        """Run the overlay and return all intermediate layers."""
        sst = self._prepare_sst()
        npp = self._align_npp(sst)

        boundary = self.boundary
        if not crs_equal(boundary.crs, sst.crs):
            boundary = reproject_polygons(boundary, sst.crs)

        sst = crop(sst, boundary)
        npp = crop(npp, boundary)

        sst_suitable = reclassify(sst, self.sst_breakpoints)
        npp_suitable = reclassify(npp, self.npp_breakpoints)
        combined = combine(sst_suitable, npp_suitable, op="multiply")
        masked = mask(combined, boundary)
        suitability = masked.with_data(masked.data, band_name="suitability")

        zonal = zonal_count(suitability, boundary, key=self.key) if self.key else None
        result = SuitabilityResult(
            suitability=suitability,
            sst=sst,
            npp=npp,
            sst_suitable=sst_suitable,
            npp_suitable=npp_suitable,
            zonal=zonal,
        )
        logger.info(f"Suitability analysis finished: {result}")
        return result


@dataclass
class PipelineOutputs:
    """Everything produced by :func:`run_from_config`."""

    regions: PolygonSet
    regions_path: Optional[Path] = None
    suitability: Optional[SuitabilityResult] = None
    suitability_path: Optional[Path] = None
    zonal_path: Optional[Path] = None


def run_from_config(config: PipelineConfig) -> PipelineOutputs:
    """Run the configured analyses, writing results to ``output_dir``.

    Writes ``regions_population.gpkg`` when a points table is configured,
    and ``suitability.tif`` plus ``suitable_area_by_region.csv`` when the
    SST and NPP rasters are configured.
    """
    output_dir = Path(config.output_dir)
    regions = read_vector(config.regions_path)
    if not isinstance(regions, PolygonSet):
        raise ConfigError(f"regions_path must hold polygons: {config.regions_path}")
    outputs = PipelineOutputs(regions=regions)

    if config.points_path is not None:
        points = read_points_csv(
            config.points_path,
            x_col=config.points_x_col,
            y_col=config.points_y_col,
            crs=config.points_crs,
        )
        outputs.regions = population_by_region(
            points,
            regions,
            key=config.region_key,
            field=config.population_field,
            on_overlap=config.on_overlap,  # type: ignore[arg-type]
        )
        outputs.regions_path = write_vector(outputs.regions, output_dir / "regions_population.gpkg")

    if config.runs_suitability:
        analysis = SuitabilityAnalysis(
            sst_layers=read_rasters(config.sst_paths),
            npp=read_raster(config.npp_path),  # type: ignore[arg-type]
            boundary=regions,
            sst_range=config.sst_range,
            npp_range=config.npp_range,
            sst_kelvin=config.sst_kelvin,
            target_crs=config.target_crs,
            resampling=config.resampling,
            key=config.region_key,
        )
        outputs.suitability = analysis.run()
        if config.write_suitability_raster:
            outputs.suitability_path = write_raster(
                outputs.suitability.suitability, output_dir / "suitability.tif"
            )
        if outputs.suitability.zonal is not None:
            output_dir.mkdir(parents=True, exist_ok=True)
            outputs.zonal_path = output_dir / "suitable_area_by_region.csv"
            outputs.suitability.zonal.to_csv(outputs.zonal_path, index=False)
            logger.info(f"Wrote per-region suitable area to {outputs.zonal_path}")

    return outputs
