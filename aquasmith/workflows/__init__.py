"""Layer 4: Workflows - Public entry points.

Workflows provide the public entry points users call. Workflows can import
I/O libraries and plotting libraries. Put file loading and saving here.
Put plotting here.
"""

from aquasmith.workflows.io import (
    from_geodataframe,
    read_points_csv,
    read_raster,
    read_rasters,
    read_vector,
    to_geodataframe,
    write_raster,
    write_vector,
)
from aquasmith.workflows.suitability import (
    PipelineOutputs,
    SuitabilityAnalysis,
    SuitabilityResult,
    population_by_region,
    run_from_config,
    suitability_breakpoints,
)
from aquasmith.workflows.plotting import plot_histogram, plot_raster, plot_vector
from aquasmith.workflows.workflows import reproject_to

__all__ = [
    "PipelineOutputs",
    "SuitabilityAnalysis",
    "SuitabilityResult",
    "from_geodataframe",
    "plot_histogram",
    "plot_raster",
    "plot_vector",
    "population_by_region",
    "read_points_csv",
    "read_raster",
    "read_rasters",
    "read_vector",
    "reproject_to",
    "run_from_config",
    "suitability_breakpoints",
    "to_geodataframe",
    "write_raster",
    "write_vector",
]
