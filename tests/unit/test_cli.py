"""
Unit tests for CLI module.

Tests command-line interface functionality using Click's testing utilities.
"""

import json

import pytest
from click.testing import CliRunner

from fireplan import __version__
from fireplan.cli import main
from fireplan.serialization import SCHEMA_VERSION, input_to_dict, save_input


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def household_file(tmp_path, saver_input):
    """Household file with a known answer (FIRE at 53)."""
    path = tmp_path / "household.json"
    save_input(saver_input, path)
    return path


@pytest.fixture
def advanced_file(runner, tmp_path):
    """Household file created by the advanced template."""
    path = tmp_path / "advanced.json"
    result = runner.invoke(main, ["config", "create", str(path), "--template", "advanced"])
    assert result.exit_code == 0
    return path


# ============================================================================
# BASIC TESTS
# ============================================================================

class TestBasicCommands:
    """Test basic CLI commands."""

    def test_version(self, runner):
        """Test --version flag."""
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner):
        """Test --help flag."""
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "calculate" in result.output
        assert "montecarlo" in result.output

    def test_info(self, runner):
        """Test info command."""
        result = runner.invoke(main, ["info"])

        assert result.exit_code == 0
        assert "fireplan Version" in result.output
        assert "numpy" in result.output


# ============================================================================
# CALCULATION COMMANDS
# ============================================================================

class TestCalculate:
    """Test calculate command."""

    def test_calculate_quiet(self, runner, household_file):
        result = runner.invoke(main, ["--quiet", "calculate", str(household_file)])

        assert result.exit_code == 0
        assert "fire_age=53" in result.output

    def test_calculate_table(self, runner, household_file):
        result = runner.invoke(main, ["calculate", str(household_file)])

        assert result.exit_code == 0
        assert "FIRE Calculation" in result.output

    def test_calculate_output(self, runner, household_file, tmp_path):
        output = tmp_path / "result.json"
        result = runner.invoke(main, ["calculate", str(household_file), "-o", str(output)])

        assert result.exit_code == 0
        with open(output, encoding="utf-8") as f:
            payload = json.load(f)
        assert payload["fireAge"] == 53
        assert payload["yearsToFire"] == 18

    def test_calculate_search_ceiling(self, runner, household_file):
        result = runner.invoke(
            main, ["-q", "calculate", str(household_file), "--max-search-age", "52"]
        )

        assert result.exit_code == 0
        assert "fire_age=-1" in result.output

    def test_calculate_warns_on_gaps(self, runner, tmp_path):
        path = tmp_path / "gappy.json"
        path.write_text(json.dumps({
            "currentAge": 30,
            "lifeExpectancy": 40,
            "expenseSegments": [
                {"id": "e1", "startAge": 30, "endAge": 35, "monthlyExpenses": 100000},
            ],
        }))
        result = runner.invoke(main, ["calculate", str(path)])

        assert result.exit_code == 0
        assert "no expense segment covers ages 36..40" in result.output

    def test_invalid_file(self, runner, tmp_path):
        """Test a malformed household exits with code 1."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"currentAge": 50, "lifeExpectancy": 40}))
        result = runner.invoke(main, ["calculate", str(path)])

        assert result.exit_code == 1
        assert "Error loading" in result.output
        assert "Traceback" not in result.output

    def test_debug_prints_traceback(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"currentAge": 50, "lifeExpectancy": 40}))
        result = runner.invoke(main, ["calculate", str(path)], env={"FIREPLAN_DEBUG": "1"})

        assert result.exit_code == 1
        assert "Traceback" in result.output
        assert "Error loading" in result.output

    def test_missing_file(self, runner):
        result = runner.invoke(main, ["calculate", "does-not-exist.json"])

        assert result.exit_code != 0


class TestDetails:
    """Test details command."""

    def test_details_csv(self, runner, household_file, tmp_path):
        output = tmp_path / "details.csv"
        result = runner.invoke(
            main, ["-q", "details", str(household_file), "--unit", "yen", "-o", str(output)]
        )

        assert result.exit_code == 0
        lines = output.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("age,")
        assert len(lines) == 1 + 56

    def test_details_table(self, runner, household_file):
        result = runner.invoke(main, ["details", str(household_file)])

        assert result.exit_code == 0
        assert "Yearly Detail" in result.output


class TestMonteCarlo:
    """Test montecarlo and scenarios commands."""

    def test_montecarlo(self, runner, advanced_file, tmp_path):
        output = tmp_path / "mc.json"
        result = runner.invoke(main, [
            "montecarlo", str(advanced_file),
            "-n", "100", "--workers", "1", "--seed", "5", "-o", str(output),
        ])

        assert result.exit_code == 0
        assert "Success probability" in result.output
        with open(output, encoding="utf-8") as f:
            payload = json.load(f)
        assert payload["simulations"] == 100
        assert payload["config"]["seed"] == 5

    def test_montecarlo_seed_from_environment(self, runner, saver_input, tmp_path):
        """Test FIREPLAN_SEED applies when the file's section leaves the seed unset."""
        path = tmp_path / "household.json"
        path.write_text(json.dumps({
            "schema_version": SCHEMA_VERSION,
            "input": input_to_dict(saver_input),
            "monteCarlo": {"simulations": 100},
        }), encoding="utf-8")
        output = tmp_path / "mc.json"
        result = runner.invoke(
            main,
            ["-q", "montecarlo", str(path), "--workers", "1", "-o", str(output)],
            env={"FIREPLAN_SEED": "999"},
        )

        assert result.exit_code == 0
        with open(output, encoding="utf-8") as f:
            config = json.load(f)["config"]
        assert config["seed"] == 999
        assert config["simulations"] == 100

    def test_montecarlo_invalid_simulations(self, runner, household_file):
        result = runner.invoke(main, ["montecarlo", str(household_file), "-n", "10"])

        assert result.exit_code == 1
        assert "Error during simulation" in result.output

    def test_scenarios(self, runner, household_file):
        result = runner.invoke(main, [
            "-q", "scenarios", str(household_file), "-n", "100", "--ages", "50,55",
        ])

        assert result.exit_code == 0
        assert "基本" in result.output

    def test_scenarios_bad_ages(self, runner, household_file):
        result = runner.invoke(main, ["scenarios", str(household_file), "--ages", "fifty"])

        assert result.exit_code == 1


# ============================================================================
# CONFIG COMMANDS
# ============================================================================

class TestConfigCommands:
    """Test config subcommands."""

    def test_create_basic(self, runner, tmp_path):
        path = tmp_path / "basic.json"
        result = runner.invoke(main, ["config", "create", str(path)])

        assert result.exit_code == 0
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
        assert document["schema_version"] == SCHEMA_VERSION
        assert document["input"]["currentAge"] == 35
        assert "monteCarlo" not in document

    def test_create_advanced(self, advanced_file):
        with open(advanced_file, encoding="utf-8") as f:
            document = json.load(f)

        assert document["input"]["loans"][0]["name"] == "住宅ローン"
        assert document["monteCarlo"]["simulations"] == 1000

    def test_validate(self, runner, advanced_file):
        result = runner.invoke(main, ["config", "validate", str(advanced_file)])

        assert result.exit_code == 0
        assert "Household File Valid" in result.output

    def test_validate_quiet(self, runner, household_file):
        result = runner.invoke(main, ["-q", "config", "validate", str(household_file)])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_show_json(self, runner, household_file):
        result = runner.invoke(main, ["config", "show", str(household_file), "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["currentAge"] == 35

    def test_show_table(self, runner, advanced_file):
        result = runner.invoke(main, ["config", "show", str(advanced_file)])

        assert result.exit_code == 0
        assert "Asset Holdings" in result.output
