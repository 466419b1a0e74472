"""Tests for pipeline configuration loading."""

import json
from pathlib import Path

import pytest

from aquasmith.config import PipelineConfig, load_config
from aquasmith.utils.errors import ConfigError


class TestPipelineConfig:
    """Tests for PipelineConfig validation."""

    def test_defaults(self):
        """Test a minimal region-only configuration."""
        config = PipelineConfig(regions_path=Path("regions.shp"), region_key="rgn")
        assert config.sst_range == (12.0, 18.0)
        assert config.npp_range == (2.6, 3.0)
        assert not config.runs_suitability

    def test_range_must_be_ordered(self):
        """Test lo >= hi raises ConfigError."""
        with pytest.raises(ConfigError, match="sst_range"):
            PipelineConfig(regions_path=Path("r.shp"), region_key="rgn", sst_range=(18, 12))

    def test_range_must_be_pair(self):
        """Test a range with three values raises ConfigError."""
        with pytest.raises(ConfigError, match="npp_range"):
            PipelineConfig(regions_path=Path("r.shp"), region_key="rgn", npp_range=(1, 2, 3))

    def test_rasters_come_together(self):
        """Test SST without NPP raises ConfigError."""
        with pytest.raises(ConfigError, match="together"):
            PipelineConfig(
                regions_path=Path("r.shp"), region_key="rgn", sst_paths=(Path("sst.tif"),)
            )

    def test_unknown_resampling(self):
        """Test an unknown resampling name raises ConfigError."""
        with pytest.raises(ConfigError, match="resampling"):
            PipelineConfig(regions_path=Path("r.shp"), region_key="rgn", resampling="smooth")

    def test_unknown_overlap_policy(self):
        """Test an unknown overlap policy raises ConfigError."""
        with pytest.raises(ConfigError, match="on_overlap"):
            PipelineConfig(regions_path=Path("r.shp"), region_key="rgn", on_overlap="sum")


class TestLoadConfig:
    """Tests for reading configuration files."""

    def test_yaml(self, tmp_path):
        """Test a YAML file with relative paths."""
        path = tmp_path / "pipeline.yaml"
        path.write_text(
            "regions_path: data/regions.shp\n"
            "region_key: rgn\n"
            "points_path: data/cities.csv\n"
            "sst_paths:\n"
            "  - data/sst_2008.tif\n"
            "  - data/sst_2009.tif\n"
            "npp_path: data/npp.tif\n"
            "sst_range: [11, 19]\n"
            "resampling: bilinear\n"
        )
        config = load_config(path)
        assert config.regions_path == tmp_path / "data" / "regions.shp"
        assert config.points_path == tmp_path / "data" / "cities.csv"
        assert config.sst_paths == (
            tmp_path / "data" / "sst_2008.tif",
            tmp_path / "data" / "sst_2009.tif",
        )
        assert config.sst_range == (11.0, 19.0)
        assert config.output_dir == tmp_path / "output"
        assert config.runs_suitability

    def test_json(self, tmp_path):
        """Test a JSON file with an absolute output directory."""
        out_dir = tmp_path / "results"
        path = tmp_path / "pipeline.json"
        path.write_text(
            json.dumps(
                {"regions_path": "regions.gpkg", "region_key": "rgn", "output_dir": str(out_dir)}
            )
        )
        config = load_config(path)
        assert config.output_dir == out_dir
        assert config.regions_path == tmp_path / "regions.gpkg"

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "pipeline.yaml")

    def test_unsupported_suffix(self, tmp_path):
        """Test other file types raise ConfigError."""
        path = tmp_path / "pipeline.toml"
        path.write_text("regions_path = 'r.shp'")
        with pytest.raises(ConfigError, match="Unsupported"):
            load_config(path)

    def test_malformed_yaml(self, tmp_path):
        """Test a YAML syntax error raises ConfigError."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("regions_path: [unclosed\n")
        with pytest.raises(ConfigError, match="Could not parse"):
            load_config(path)

    def test_unknown_key(self, tmp_path):
        """Test an unknown key raises ConfigError."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("regions_path: r.shp\nregion_key: rgn\ncolour: blue\n")
        with pytest.raises(ConfigError, match="colour"):
            load_config(path)

    def test_missing_key(self, tmp_path):
        """Test a missing required key raises ConfigError."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("regions_path: r.shp\n")
        with pytest.raises(ConfigError, match="region_key"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        """Test a top-level list raises ConfigError."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_single_sst_path(self, tmp_path):
        """Test a scalar sst_paths value is read as one path."""
        path = tmp_path / "pipeline.yaml"
        path.write_text(
            "regions_path: r.shp\nregion_key: rgn\nsst_paths: sst.tif\nnpp_path: npp.tif\n"
        )
        config = load_config(path)
        assert config.sst_paths == (tmp_path / "sst.tif",)

    def test_sst_paths_wrong_type(self):
        """Test a non-path sst_paths value raises ConfigError."""
        with pytest.raises(ConfigError, match="sst_paths"):
            PipelineConfig.from_dict(
                {"regions_path": "r.shp", "region_key": "rgn", "sst_paths": {"a": 1}}
            )
