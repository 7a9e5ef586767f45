"""
Unit tests for config.py Pydantic models.

Tests validation, defaults, aliases, and environment settings.
"""

import pytest

from fireplan.config import (
    AppSettings,
    MonteCarloConfig,
    OptimizerConfig,
    ScenarioAdjustment,
)


class TestMonteCarloConfig:
    """Tests for MonteCarloConfig validation."""

    def test_defaults(self):
        """Test default values."""
        config = MonteCarloConfig()

        assert config.simulations == 1000
        assert config.return_volatility == 15.0
        assert config.inflation_volatility == 1.0
        assert config.sequence_of_returns_risk is True
        assert config.seed == 42
        assert config.n_workers is None
        assert config.percentiles == (10, 25, 50, 75, 90)

    def test_simulations_min(self):
        """Test simulations minimum validation."""
        with pytest.raises(ValueError):
            MonteCarloConfig(simulations=50)  # Less than 100

    def test_simulations_max(self):
        """Test simulations maximum validation."""
        with pytest.raises(ValueError):
            MonteCarloConfig(simulations=20_000)  # Greater than 10,000

    def test_volatility_bounds(self):
        with pytest.raises(ValueError):
            MonteCarloConfig(return_volatility=60)
        with pytest.raises(ValueError):
            MonteCarloConfig(inflation_volatility=-1)

    def test_percentiles_validation(self):
        with pytest.raises(ValueError):
            MonteCarloConfig(percentiles=())
        with pytest.raises(ValueError):
            MonteCarloConfig(percentiles=(50, 101))

    def test_camel_case_aliases(self):
        """Test the calculation API's option names are accepted."""
        config = MonteCarloConfig.model_validate({
            "simulations": 500,
            "returnVolatility": 12,
            "sequenceOfReturnsRisk": False,
        })

        assert config.return_volatility == 12
        assert config.sequence_of_returns_risk is False
        assert config.model_dump(by_alias=True)["returnVolatility"] == 12

    def test_immutable(self):
        """Test that config is frozen (immutable)."""
        config = MonteCarloConfig()

        with pytest.raises(Exception):  # Pydantic raises ValidationError
            config.simulations = 2000

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            MonteCarloConfig(trials=500)


class TestOptimizerConfig:
    """Tests for OptimizerConfig validation."""

    def test_defaults(self):
        config = OptimizerConfig()

        assert config.max_search_age == 60
        assert config.min_final_assets == 1.0
        assert config.max_evaluations == 200
        assert config.verbose is False

    def test_unbounded_evaluations(self):
        assert OptimizerConfig(max_evaluations=None).max_evaluations is None

    def test_max_evaluations_positive(self):
        with pytest.raises(ValueError):
            OptimizerConfig(max_evaluations=0)


class TestScenarioAdjustment:
    def test_defaults(self):
        scenario = ScenarioAdjustment(name="基本")

        assert scenario.return_adjustment == 0.0
        assert scenario.volatility_multiplier == 1.0

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            ScenarioAdjustment(name="")


class TestAppSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FIREPLAN_LOG_LEVEL", raising=False)
        settings = AppSettings(_env_file=None)

        assert settings.log_level == "WARNING"
        assert settings.debug is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("FIREPLAN_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FIREPLAN_N_WORKERS", "4")
        settings = AppSettings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.n_workers == 4
