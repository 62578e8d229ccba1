"""Tests for the config loader functionality."""

import pytest

from boostv.utils.config import load_config, merge_config, set_nested


class TestConfigLoader:
    """Test suite for the YAML config loader."""

    def test_basic_load(self, tmp_path):
        """Test basic YAML loading without any special features."""
        config_file = tmp_path / "basic.yaml"
        config_file.write_text(
            """
base:
  num_workers: 2
  log_step: 10
analysis:
  cone_size: 0.8
  pruning:
    zcut: 0.1
"""
        )

        cfg = load_config(str(config_file))

        assert cfg["base"]["num_workers"] == 2
        assert cfg["base"]["log_step"] == 10
        assert cfg["analysis"]["cone_size"] == 0.8
        assert cfg["analysis"]["pruning"]["zcut"] == 0.1

    def test_empty(self, tmp_path):
        """Test that an empty file gives an empty configuration."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_config(str(config_file)) == {}

    def test_not_a_dict(self, tmp_path):
        """Test that a configuration must be a dictionary."""
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(str(config_file))

    def test_top_level_include(self, tmp_path):
        """Test including another YAML file at the top level."""
        base_config = tmp_path / "base.yaml"
        base_config.write_text(
            """
base:
  num_workers: 1
  seed: 0
analysis:
  cone_size: 0.8
  area:
    ghost_area: 0.01
"""
        )

        main_config = tmp_path / "main.yaml"
        main_config.write_text(
            """
include: base.yaml

analysis:
  area: null
"""
        )

        cfg = load_config(str(main_config))

        # Base values should be loaded
        assert cfg["base"]["num_workers"] == 1
        assert cfg["base"]["seed"] == 0
        assert cfg["analysis"]["cone_size"] == 0.8

        # Override should work, including with null values
        assert cfg["analysis"]["area"] is None

    def test_multiple_includes(self, tmp_path):
        """Test including multiple YAML files, the last one on top."""
        (tmp_path / "a.yaml").write_text("analysis:\n  cone_size: 0.8\n")
        (tmp_path / "b.yaml").write_text(
            "analysis:\n  cone_size: 1.2\n  max_jets: 2\n"
        )
        main_config = tmp_path / "main.yaml"
        main_config.write_text("include:\n  - a.yaml\n  - b.yaml\n")

        cfg = load_config(str(main_config))

        assert cfg["analysis"]["cone_size"] == 1.2
        assert cfg["analysis"]["max_jets"] == 2

    def test_invalid_include(self, tmp_path):
        """Test that includes must be file names."""
        main_config = tmp_path / "main.yaml"
        main_config.write_text("include: 3\n")
        with pytest.raises(ValueError):
            load_config(str(main_config))

    def test_inline_include(self, tmp_path):
        """Test including a file inline within a block using !include."""
        (tmp_path / "pruning.yaml").write_text("zcut: 0.2\nrcut_factor: 0.3\n")
        main_config = tmp_path / "main.yaml"
        main_config.write_text(
            """
analysis:
  pruning: !include pruning.yaml
"""
        )

        cfg = load_config(str(main_config))

        assert cfg["analysis"]["pruning"] == {"zcut": 0.2, "rcut_factor": 0.3}

    def test_dot_notation_override(self, tmp_path):
        """Test modifying specific parameters using dot notation."""
        base_config = tmp_path / "base.yaml"
        base_config.write_text(
            """
io:
  reader:
    name: hdf5
    file_keys: default.h5
analysis:
  nsubjettiness:
    kappa: 1.0
"""
        )

        main_config = tmp_path / "main.yaml"
        main_config.write_text(
            """
include: base.yaml

io.reader.file_keys: [a.h5, b.h5]
analysis.nsubjettiness.kappa: 2.0
analysis.trigger.match_pattern: PFHT900
"""
        )

        cfg = load_config(str(main_config))

        assert cfg["io"]["reader"]["file_keys"] == ["a.h5", "b.h5"]
        assert cfg["io"]["reader"]["name"] == "hdf5"
        assert cfg["analysis"]["nsubjettiness"]["kappa"] == 2.0
        assert cfg["analysis"]["trigger"]["match_pattern"] == "PFHT900"

    def test_nested_includes(self, tmp_path):
        """Test that included files can themselves include other files."""
        (tmp_path / "level2.yaml").write_text("level2:\n  value: 42\n")
        (tmp_path / "level1.yaml").write_text(
            "include: level2.yaml\n\nlevel1:\n  value: 10\n"
        )
        main_config = tmp_path / "main.yaml"
        main_config.write_text("include: level1.yaml\n\nlevel0:\n  value: 1\n")

        cfg = load_config(str(main_config))

        assert cfg["level0"]["value"] == 1
        assert cfg["level1"]["value"] == 10
        assert cfg["level2"]["value"] == 42

    def test_include_file_not_found(self, tmp_path):
        """Test that missing include files raise appropriate error."""
        main_config = tmp_path / "main.yaml"
        main_config.write_text("include: nonexistent.yaml\n")

        with pytest.raises(FileNotFoundError):
            load_config(str(main_config))


class TestConfigHelpers:
    """Test the dictionary manipulation helpers."""

    def test_merge_config(self):
        """Test the recursive merge, which leaves its inputs untouched."""
        base = {"analysis": {"cone_size": 0.8, "pruning": {"zcut": 0.1}}}
        override = {"analysis": {"pruning": {"rcut_factor": 0.3}}}
        merged = merge_config(base, override)

        assert merged == {
            "analysis": {"cone_size": 0.8, "pruning": {"zcut": 0.1, "rcut_factor": 0.3}}
        }
        assert "rcut_factor" not in base["analysis"]["pruning"]

    def test_set_nested(self):
        """Test setting nested values, creating blocks as needed."""
        cfg = {"analysis": {"cone_size": 0.8}}
        set_nested(cfg, "analysis.area.repeats", 3)
        assert cfg["analysis"]["area"] == {"repeats": 3}

        with pytest.raises(ValueError):
            set_nested(cfg, "analysis.cone_size.value", 1.0)
