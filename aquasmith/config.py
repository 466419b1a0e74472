"""Pipeline configuration loaded from YAML or JSON files.

Example ``pipeline.yaml``::

    regions_path: data/wc_regions_clean.shp
    region_key: rgn
    points_path: data/cities.csv
    population_field: population
    sst_paths:
      - data/average_annual_sst_2008.tif
      - data/average_annual_sst_2009.tif
    npp_path: data/annual_npp.tif
    sst_range: [12, 18]
    npp_range: [2.6, 3.0]
    resampling: nearest
    output_dir: output

Relative paths are resolved against the directory holding the file.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from aquasmith.primitives.geometry import OVERLAP_POLICIES
from aquasmith.tasks.rastertask import resolve_resampling
from aquasmith.utils.errors import ConfigError, raise_config_error

logger = logging.getLogger(__name__)

_PATH_FIELDS = ("regions_path", "points_path", "npp_path", "output_dir")


@dataclass(frozen=True)
class PipelineConfig:
    """Inputs and parameters of the region and suitability analyses.

    Attributes:
        regions_path: Polygon layer of regions.
        region_key: Region attribute used as join and summary key.
        points_path: Delimited table of points (optional).
        points_x_col: Column with point x / longitude.
        points_y_col: Column with point y / latitude.
        points_crs: CRS of the point coordinates.
        population_field: Numeric point attribute summed per region.
        sst_paths: Sea surface temperature rasters averaged together.
        npp_path: Net primary productivity raster.
        sst_kelvin: SST rasters are in Kelvin and get converted to Celsius.
        target_crs: CRS for the raster analysis; defaults to the SST CRS.
        sst_range: Suitable SST interval [lo, hi) in degrees Celsius.
        npp_range: Suitable NPP interval [lo, hi).
        resampling: Resampling policy for warping NPP onto the SST grid.
        on_overlap: Join policy for points inside several regions.
        output_dir: Directory for written outputs.
        write_suitability_raster: Also save the suitability GeoTIFF.
    """

    regions_path: Path
    region_key: str
    points_path: Optional[Path] = None
    points_x_col: str = "lon"
    points_y_col: str = "lat"
    points_crs: str = "EPSG:4326"
    population_field: str = "population"
    sst_paths: tuple[Path, ...] = field(default_factory=tuple)
    npp_path: Optional[Path] = None
    sst_kelvin: bool = True
    target_crs: Optional[str] = None
    sst_range: tuple[float, float] = (12.0, 18.0)
    npp_range: tuple[float, float] = (2.6, 3.0)
    resampling: str = "nearest"
    on_overlap: str = "error"
    output_dir: Path = Path("output")
    write_suitability_raster: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in ("sst_range", "npp_range"):
            object.__setattr__(self, name, _interval(name, getattr(self, name)))
        if self.on_overlap not in OVERLAP_POLICIES:
            raise_config_error("on_overlap", self.on_overlap, valid_values=list(OVERLAP_POLICIES))
        resolve_resampling(self.resampling)
        if bool(self.sst_paths) != (self.npp_path is not None):
            raise ConfigError(
                "sst_paths and npp_path must be given together",
                suggestion="Provide both rasters for the suitability analysis, or neither",
            )

    @property
    def runs_suitability(self) -> bool:
        return bool(self.sst_paths)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Union[str, Path] = ".") -> "PipelineConfig":
        """Build a config from a mapping, resolving relative paths.

        Raises:
            ConfigError: On unknown or missing keys, or invalid values.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown configuration key(s): {unknown}",
                suggestion=f"Valid keys: {sorted(known)}",
            )
        missing = [k for k in ("regions_path", "region_key") if k not in data]
        if missing:
            raise ConfigError(f"Missing required configuration key(s): {missing}")

        base_dir = Path(base_dir)
        values = dict(data)
        values.setdefault("output_dir", "output")
        for key in _PATH_FIELDS:
            if values.get(key) is not None:
                values[key] = _resolve(base_dir, values[key])
        sst_paths = values.get("sst_paths") or ()
        if isinstance(sst_paths, (str, Path)):
            sst_paths = (sst_paths,)
        elif not isinstance(sst_paths, (list, tuple)):
            raise ConfigError(
                f"sst_paths must be a path or a list of paths, got {type(sst_paths).__name__}"
            )
        values["sst_paths"] = tuple(_resolve(base_dir, p) for p in sst_paths)
        return cls(**values)


def _resolve(base_dir: Path, value: Union[str, Path]) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def _interval(name: str, value: Any) -> tuple[float, float]:
    try:
        lo, hi = (float(v) for v in value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a pair of numbers [lo, hi], got {value!r}") from e
    if not lo < hi:
        raise_config_error(name, [lo, hi], constraint="lo < hi")
    return (lo, hi)


def load_config(path: Union[str, Path]) -> PipelineConfig:
    """Load a pipeline configuration from a YAML or JSON file.

    Raises:
        ConfigError: If the file is missing, unparsable or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError(
                    f"Unsupported configuration format: {suffix}",
                    suggestion="Use a .yaml, .yml or .json file",
                )
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not parse configuration {path}: {e}") from e

    config = PipelineConfig.from_dict(data or {}, base_dir=path.parent)
    logger.info(f"Loaded pipeline configuration from {path}")
    return config
