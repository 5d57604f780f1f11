"""Tests for config module."""

from pathlib import Path
from tempfile import TemporaryDirectory

from luamod.config import IndexConfig, load_index_config


class TestIndexConfig:
    """Tests for IndexConfig dataclass."""

    def test_default_values(self):
        """Test that IndexConfig has correct default values."""
        config = IndexConfig()
        assert config.module_dirs == ["src"]
        assert config.file_suffixes == ["M.lua", "Util.lua"]
        assert config.comment_lookback == 10

    def test_custom_values(self):
        """Test creating IndexConfig with custom values."""
        config = IndexConfig(
            module_dirs=["lua", "scripts"],
            file_suffixes=["Mod.lua"],
            comment_lookback=4
        )
        assert config.module_dirs == ["lua", "scripts"]
        assert config.file_suffixes == ["Mod.lua"]
        assert config.comment_lookback == 4

    def test_defaults_are_not_shared(self):
        """Test that list defaults are independent between instances."""
        first = IndexConfig()
        first.module_dirs.append("extra")
        assert IndexConfig().module_dirs == ["src"]

    def test_module_paths(self):
        """Test module_paths resolves directories against a root."""
        config = IndexConfig(module_dirs=["src", "game/module"])
        assert config.module_paths(Path("/work")) == [
            Path("/work/src"),
            Path("/work/game/module"),
        ]


class TestLoadIndexConfig:
    """Tests for load_index_config function."""

    def test_no_config_file_returns_defaults(self):
        """Test that missing .luamod file returns default config."""
        with TemporaryDirectory() as tmpdir:
            config = load_index_config(Path(tmpdir))
            assert config == IndexConfig()

    def test_load_valid_config(self):
        """Test loading valid .luamod configuration file."""
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".luamod"
            config_path.write_text("""
index:
  module_dirs: [src/game/module, lib]
  file_suffixes: [M.lua]
  comment_lookback: 5
""")
            config = load_index_config(Path(tmpdir))
            assert config.module_dirs == ["src/game/module", "lib"]
            assert config.file_suffixes == ["M.lua"]
            assert config.comment_lookback == 5

    def test_load_partial_config(self):
        """Test loading config with only some values specified."""
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".luamod"
            config_path.write_text("""
index:
  module_dirs: scripts
""")
            config = load_index_config(Path(tmpdir))
            assert config.module_dirs == ["scripts"]
            assert config.file_suffixes == ["M.lua", "Util.lua"]
            assert config.comment_lookback == 10

    def test_invalid_values_fall_back_to_defaults(self):
        """Test that wrongly typed values are replaced by defaults."""
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".luamod"
            config_path.write_text("""
index:
  module_dirs: [1, 2]
  comment_lookback: many
""")
            config = load_index_config(Path(tmpdir))
            assert config.module_dirs == ["src"]
            assert config.comment_lookback == 10

    def test_invalid_yaml_returns_defaults(self):
        """Test that invalid YAML returns default config."""
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".luamod"
            config_path.write_text("index: [unclosed")
            config = load_index_config(Path(tmpdir))
            assert config == IndexConfig()

    def test_non_dict_section_returns_defaults(self):
        """Test that a non-mapping index section returns default config."""
        with TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / ".luamod"
            config_path.write_text("index: 42\n")
            config = load_index_config(Path(tmpdir))
            assert config == IndexConfig()

    def test_empty_file_returns_defaults(self):
        """Test that an empty config file returns default config."""
        with TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / ".luamod").write_text("")
            config = load_index_config(Path(tmpdir))
            assert config == IndexConfig()
