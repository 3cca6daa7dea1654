"""Tests for configuration defaults functionality.

Tests the preset configurations, validation warnings and memory estimation.
"""

import pytest

from lpc_markov.config.defaults import (
    DefaultConfig,
    ISOLATED_WORDS_CONFIG,
    SPEAKER_ID_CONFIG,
    RESEARCH_CONFIGS,
    LPC_METHODS,
    MIN_CODEBOOK_SIZE,
    RECOMMENDED_MAX_CODEBOOK,
    get_model_memory_estimate,
    validate_config
)


def _config(**overrides) -> DefaultConfig:
    values = dict(
        codebook_size=16,
        n_classes=4,
        n_train_per_class=10,
        n_test_per_class=5,
        sequence_length_range=(10, 40),
        class_bias=0.5,
        prediction_order=10,
        window_length=200,
        figure_dpi=150,
        export_formats=["png"]
    )
    values.update(overrides)
    return DefaultConfig(**values)


class TestPresetConfigurations:
    """Test suite for preset configurations."""

    def test_isolated_words_config(self):
        """Test isolated word preset values."""
        config = ISOLATED_WORDS_CONFIG

        assert isinstance(config, DefaultConfig)
        assert config.codebook_size == 64
        assert config.n_classes == 10
        assert config.prediction_order == 12
        assert config.window_length == 240
        assert config.export_formats == ["pdf", "png"]

    def test_speaker_id_config(self):
        """Test speaker identification preset values."""
        config = SPEAKER_ID_CONFIG

        assert config.codebook_size == 128
        assert config.prediction_order == 16
        assert config.sequence_length_range == (100, 300)

    def test_research_configs_dictionary(self):
        """Test RESEARCH_CONFIGS dictionary."""
        assert RESEARCH_CONFIGS["isolated_words"] is ISOLATED_WORDS_CONFIG
        assert RESEARCH_CONFIGS["speaker_id"] is SPEAKER_ID_CONFIG

        minimal = RESEARCH_CONFIGS["minimal"]
        assert minimal.codebook_size == 4
        assert minimal.n_classes == 3
        assert minimal.prediction_order == 4

    @pytest.mark.parametrize("name", list(RESEARCH_CONFIGS))
    def test_presets_validate_cleanly(self, name):
        """Test that every preset passes validation without warnings."""
        assert validate_config(RESEARCH_CONFIGS[name]) == []

    def test_lpc_methods(self):
        """Test the available recursion names."""
        assert LPC_METHODS == ["loop", "reduce"]


class TestValidateConfig:
    """Test suite for validate_config warnings."""

    def test_small_codebook(self):
        """Test warning below the minimum codebook size."""
        warnings = validate_config(_config(codebook_size=MIN_CODEBOOK_SIZE - 1))
        assert any("below minimum" in w for w in warnings)

    def test_large_codebook(self):
        """Test warning above the recommended codebook size."""
        warnings = validate_config(_config(codebook_size=RECOMMENDED_MAX_CODEBOOK + 1))
        assert any("performance" in w for w in warnings)

    def test_high_order(self):
        """Test warning for a very high prediction order."""
        warnings = validate_config(_config(prediction_order=64, window_length=512))
        assert any("very high" in w for w in warnings)

    def test_window_shorter_than_order(self):
        """Test warning when the window cannot support the order."""
        warnings = validate_config(_config(prediction_order=12, window_length=12))
        assert any("must exceed" in w for w in warnings)

    def test_bad_length_range(self):
        """Test warning for an inverted length range."""
        warnings = validate_config(_config(sequence_length_range=(50, 10)))
        assert any("sequence length range" in w for w in warnings)

    def test_bias_outside_unit_interval(self):
        """Test warning for a class bias above 1."""
        warnings = validate_config(_config(class_bias=1.5))
        assert any("Class bias" in w for w in warnings)

    def test_no_test_sequences(self):
        """Test warning when nothing would be classified."""
        warnings = validate_config(_config(n_test_per_class=0))
        assert any("nothing will be classified" in w for w in warnings)


class TestMemoryEstimate:
    """Test suite for model memory estimation."""

    def test_memory_estimate(self):
        """Test (K^2 + K) doubles per class."""
        expected = 2 * (1024 ** 2 + 1024) * 8 / 1024 ** 2
        assert get_model_memory_estimate(2, 1024) == pytest.approx(expected)

    def test_memory_grows_with_classes(self):
        """Test linear growth in the number of classes."""
        small = get_model_memory_estimate(1, 64)
        large = get_model_memory_estimate(10, 64)
        assert large == pytest.approx(10 * small)
