"""Tests for simulation configuration loading."""

import pytest
from pydantic import ValidationError

from beamscan.config import (
    TIMING_PROFILES,
    ConveyancePolicy,
    SimulationConfig,
    TimingProfileName,
    get_simulation_config,
)


class TestDefaults:
    """Tests for default values."""

    def test_classic_timing_by_default(self, config):
        """The default profile is the 1000/1000/1200ms table."""
        assert config.timing_profile is TimingProfileName.CLASSIC
        timing = config.timing
        assert timing.ignition_delay_ms == 1000.0
        assert timing.fall_window_ms == 1000.0
        assert timing.charge_end_ms == 1200.0
        assert timing.convey_gain == 0.25
        assert timing.arrival_epsilon == 10.0

    def test_oldest_conveyance_by_default(self, config):
        assert config.conveyance_policy is ConveyancePolicy.OLDEST

    def test_spawn_defaults(self, config):
        assert config.batch_size == 12
        assert config.rejection_rate == pytest.approx(0.66)
        assert config.initial_life == 800

    def test_destination_is_bottom_center(self, config):
        """Particles are conveyed to 100px above the bottom center."""
        assert config.destination == (640.0, 700.0)

    def test_extended_profile(self):
        """The extended table lengthens the charge and loosens arrival."""
        timing = TIMING_PROFILES[TimingProfileName.EXTENDED]
        assert timing.charge_end_ms == 1500.0
        assert timing.convey_gain == 0.2
        assert timing.arrival_epsilon == 20.0


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_profile_from_env_case_insensitive(self, monkeypatch):
        """BEAMSCAN_TIMING_PROFILE accepts any case."""
        monkeypatch.setenv("BEAMSCAN_TIMING_PROFILE", "EXTENDED")
        config = SimulationConfig(_env_file=None)
        assert config.timing_profile is TimingProfileName.EXTENDED
        assert config.timing.charge_end_ms == 1500.0

    def test_numeric_override(self, monkeypatch):
        monkeypatch.setenv("BEAMSCAN_BATCH_SIZE", "20")
        monkeypatch.setenv("BEAMSCAN_VIEWPORT_WIDTH", "1920")
        config = SimulationConfig(_env_file=None)
        assert config.batch_size == 20
        assert config.destination[0] == 960.0

    def test_cached_config(self, monkeypatch):
        """get_simulation_config() is cached until cleared."""
        get_simulation_config.cache_clear()
        monkeypatch.setenv("BEAMSCAN_CONVEYANCE_POLICY", "last")
        try:
            first = get_simulation_config()
            assert first is get_simulation_config()
            assert first.conveyance_policy is ConveyancePolicy.LAST
        finally:
            get_simulation_config.cache_clear()


class TestValidation:
    """Tests for rejected values."""

    def test_rejection_rate_out_of_range(self):
        with pytest.raises(ValidationError):
            SimulationConfig(_env_file=None, rejection_rate=1.5)

    def test_unknown_profile(self):
        with pytest.raises(ValidationError):
            SimulationConfig(_env_file=None, timing_profile="turbo")

    def test_zero_batch_size(self):
        with pytest.raises(ValidationError):
            SimulationConfig(_env_file=None, batch_size=0)


def test_repr_is_compact(config):
    """The repr summarizes the knobs worth logging."""
    text = repr(config)
    assert "timing=classic" in text
    assert "conveyance=oldest" in text
