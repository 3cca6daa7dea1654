"""Tests for configuration settings functionality."""

import pytest
from pathlib import Path
from unittest.mock import patch

from lpc_markov.config import settings as settings_module
from lpc_markov.config.random_state import get_global_seed
from lpc_markov.config.settings import (
    Settings,
    get_config,
    set_config
)


@pytest.fixture
def clean_global_config():
    """Clear the cached global configuration around a test."""
    saved = settings_module._GLOBAL_CONFIG
    settings_module._GLOBAL_CONFIG = None
    yield
    settings_module._GLOBAL_CONFIG = saved


class TestSettingsDataclass:
    """Test suite for the Settings dataclass."""

    def test_settings_default_initialization(self):
        """Test Settings initialization with default values."""
        settings = Settings()

        assert settings.codebook_size == 64
        assert settings.n_classes == 10
        assert settings.sequence_length_range == (30, 90)
        assert settings.prediction_order == 12
        assert settings.lpc_method == "loop"
        assert settings.show_ranked is False
        assert settings.summary_name == "mm-classification.json"
        assert settings.export_formats == ["pdf", "png"]
        assert settings.output_dir == "output"
        assert settings.random_seed is None
        assert settings.verbose is False

    def test_length_range_becomes_tuple(self):
        """Test that list input (as from TOML) is normalised."""
        settings = Settings(sequence_length_range=[5, 9])
        assert settings.sequence_length_range == (5, 9)

    def test_unknown_lpc_method(self):
        """Test that only known recursions are accepted."""
        with pytest.raises(ValueError, match="Unknown lpc_method"):
            Settings(lpc_method="burg")

    def test_verbose_logs_warnings(self, caplog):
        """Test that verbose settings log validation warnings."""
        with caplog.at_level("WARNING"):
            Settings(prediction_order=50, window_length=400, verbose=True)
        assert "very high" in caplog.text

    def test_output_path_created(self, tmp_path):
        """Test that output_path creates the directory."""
        target = tmp_path / "results"
        settings = Settings(output_dir=str(target))

        assert not target.exists()
        assert settings.output_path == target
        assert target.is_dir()

    def test_update_returns_new_instance(self):
        """Test that update leaves the original unchanged."""
        base = Settings()
        changed = base.update(codebook_size=32, random_seed=3)

        assert changed.codebook_size == 32
        assert changed.random_seed == 3
        assert base.codebook_size == 64


class TestSettingsFromPreset:
    """Test suite for Settings.from_preset() method."""

    def test_minimal_preset(self):
        """Test values taken from the minimal preset."""
        settings = Settings.from_preset("minimal")

        assert settings.codebook_size == 4
        assert settings.n_classes == 3
        assert settings.prediction_order == 4
        assert settings.export_formats == ["png"]

    def test_preset_formats_are_copied(self):
        """Test that editing settings does not alter the preset."""
        settings = Settings.from_preset("isolated_words")
        settings.export_formats.append("svg")

        assert Settings.from_preset("isolated_words").export_formats == ["pdf", "png"]

    def test_unknown_preset(self):
        """Test error for an unknown preset."""
        with pytest.raises(ValueError, match="Unknown preset"):
            Settings.from_preset("birdsong")


class TestSettingsToml:
    """Test suite for TOML round trips."""

    def test_toml_round_trip(self, tmp_path):
        """Test that to_toml output loads back to equal settings."""
        original = Settings(codebook_size=32, lpc_method="reduce", show_ranked=True,
                            random_seed=11, export_formats=["png"])
        path = tmp_path / "config.toml"
        original.to_toml(path)

        assert Settings.from_toml(path) == original

    def test_seed_omitted_when_unset(self, tmp_path):
        """Test that a missing seed is not written."""
        path = tmp_path / "config.toml"
        Settings().to_toml(path)

        assert "random_seed" not in path.read_text()
        assert Settings.from_toml(path).random_seed is None

    def test_flat_keys(self, tmp_path):
        """Test that top-level keys are accepted."""
        path = tmp_path / "flat.toml"
        path.write_text('codebook_size = 8\nprediction_order = 6\n\n[analysis]\nlpc_method = "reduce"\n')

        settings = Settings.from_toml(path)

        assert settings.codebook_size == 8
        assert settings.prediction_order == 6
        assert settings.lpc_method == "reduce"

    def test_missing_file(self, tmp_path):
        """Test FileNotFoundError for a missing file."""
        with pytest.raises(FileNotFoundError):
            Settings.from_toml(tmp_path / "absent.toml")

    def test_unknown_key(self, tmp_path):
        """Test that unknown keys are rejected."""
        path = tmp_path / "bad.toml"
        path.write_text("[data]\nalphabet_size = 3\n")

        with pytest.raises(TypeError):
            Settings.from_toml(path)


class TestGlobalConfig:
    """Test suite for get_config and set_config."""

    def test_get_config_from_path(self, tmp_path, clean_global_config):
        """Test loading the global config from a file and seeding."""
        path = tmp_path / "lpc.toml"
        Settings(codebook_size=16, random_seed=21).to_toml(path)

        config = get_config(path)

        assert config.codebook_size == 16
        assert get_global_seed() == 21
        assert get_config() is config

    def test_get_config_falls_back_to_preset(self, tmp_path, clean_global_config):
        """Test preset fallback when no default file exists."""
        with patch.object(Path, "home", return_value=tmp_path), \
                patch.object(Path, "cwd", return_value=tmp_path), \
                patch.object(Path, "exists", return_value=False):
            config = get_config(preset="minimal")

        assert config.codebook_size == 4

    def test_reload(self, tmp_path, clean_global_config):
        """Test that reload replaces a cached configuration."""
        set_config(Settings(codebook_size=2))
        path = tmp_path / "lpc.toml"
        Settings(codebook_size=128).to_toml(path)

        assert get_config().codebook_size == 2
        assert get_config(path, reload=True).codebook_size == 128
