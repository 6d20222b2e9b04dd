"""Tests for InstrumentConfig validation."""

import pytest

from gesture_instrument import InstrumentConfig


class TestInstrumentConfig:

    def test_defaults(self):
        config = InstrumentConfig()

        assert config.note_change_threshold_px == 20
        assert config.min_note_change_interval_ms == 100
        assert (config.min_z, config.max_z) == (-0.1, 0.05)
        assert (config.left_volume_multiplier, config.right_volume_multiplier) == (0.5, 1.5)
        assert config.base_volume_percent == 70
        assert config.playback_tail_ms == 500
        assert config.waveform == "sine"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"min_z": 0.1, "max_z": 0.1},
            {"min_z": 0.2, "max_z": 0.1},
            {"note_change_threshold_px": -1},
            {"min_note_change_interval_ms": -5},
            {"base_volume_percent": 101},
            {"base_volume_percent": -1},
            {"playback_tail_ms": -1},
            {"waveform": "noise"},
        ],
    )
    def test_invalid_values_raise(self, overrides):
        with pytest.raises(ValueError):
            InstrumentConfig(**overrides)

    def test_is_frozen(self):
        config = InstrumentConfig()

        with pytest.raises(AttributeError):
            config.waveform = "square"
