"""
Tests for the batch driver.

Tests apply logic, analysis configuration, OSW generation and parallel job
runs. The OpenStudio CLI is mocked.
"""

import json
import subprocess
import zipfile
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from resmeasures.core.exceptions import AnalysisError, ConfigError
from resmeasures.workflow import (
    OSWRunner,
    change_building_id,
    create_osws,
    get_elapsed_time,
    load_config,
    make_apply_logic_arg,
    run_analysis,
    version_string,
)
from resmeasures.workflow.config import AnalysisConfig
from resmeasures.workflow.osw import apply_upgrade_step, build_steps
from resmeasures.workflow.runner import STATUS_FAIL, STATUS_SUCCESS, JobResult, format_progress, prepare_weather


OPENSTUDIO = "/usr/local/bin/openstudio"


def _config(**overrides) -> AnalysisConfig:
    raw = {
        "output_directory": "results",
        "weather_files_url": "https://example.org/weather.zip",
        "sampler": {"type": "residential_quota", "args": {"n_datapoints": 3}},
    }
    raw.update(overrides)
    return AnalysisConfig.model_validate(raw)


def _step_names(steps):
    return [s["measure_dir_name"] for s in steps]


# =============================================================================
# APPLY LOGIC
# =============================================================================

class TestApplyLogic:
    """Tests for apply logic argument strings."""

    def test_string(self):
        assert make_apply_logic_arg("Vintage|1950s") == "Vintage|1950s"

    def test_list_is_and(self):
        assert make_apply_logic_arg(["A|1", "B|2"]) == "(A|1&&B|2)"

    def test_and_mapping(self):
        assert make_apply_logic_arg({"and": ["A|1", "B|2"]}) == "(A|1&&B|2)"

    def test_or(self):
        assert make_apply_logic_arg({"or": ["Vintage|1950s", "Vintage|1960s"]}) == \
            "(Vintage|1950s||Vintage|1960s)"

    def test_not(self):
        assert make_apply_logic_arg({"not": "Vacancy Status|Vacant"}) == "!Vacancy Status|Vacant"

    def test_nested(self):
        logic = {"or": [["A|1", {"not": "B|2"}], "C|3"]}
        assert make_apply_logic_arg(logic) == "((A|1&&!B|2)||C|3)"

    def test_unknown_operator(self):
        with pytest.raises(ValueError, match="Unknown apply logic operator 'xor'"):
            make_apply_logic_arg({"xor": ["A|1", "B|2"]})

    def test_multiple_keys(self):
        with pytest.raises(ValueError, match="exactly one key"):
            make_apply_logic_arg({"or": ["A|1"], "and": ["B|2"]})

    def test_unsupported_type(self):
        with pytest.raises(ValueError, match="Unsupported apply logic value"):
            make_apply_logic_arg(42)


# =============================================================================
# CONFIGURATION
# =============================================================================

class TestLoadConfig:
    """Tests for loading the analysis YAML."""

    def test_load_sample(self, analysis_yml_file):
        cfg = load_config(analysis_yml_file)

        assert cfg.n_datapoints == 2
        assert cfg.upgrade_names == ["Baseline", "HeatPumpWaterHeater"]
        assert cfg.upgrades[0].options[0].lifetime == 12
        assert cfg.upgrades[0].options[0].costs[0].multiplier == "Fixed (1)"

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="does not exist"):
            load_config(temp_dir / "missing.yml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "bad.yml"
        path.write_text("sampler: [unclosed\n")

        with pytest.raises(ConfigError, match="Could not parse"):
            load_config(path)

    def test_not_a_mapping(self, temp_dir):
        path = temp_dir / "list.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping at the top level"):
            load_config(path)

    def test_missing_output_directory(self, temp_dir):
        path = temp_dir / "no_output.yml"
        path.write_text("sampler:\n  args:\n    n_datapoints: 1\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.field == "output_directory"

    def test_non_positive_datapoints(self, temp_dir):
        path = temp_dir / "zero.yml"
        path.write_text("output_directory: out\nsampler:\n  args:\n    n_datapoints: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.field == "sampler.args.n_datapoints"

    def test_measure_steps_need_dir_name(self, temp_dir):
        path = temp_dir / "steps.yml"
        path.write_text(
            "output_directory: out\n"
            "sampler:\n  args:\n    n_datapoints: 1\n"
            "workflow_generator:\n  args:\n    measures:\n      - arguments: {}\n"
        )

        with pytest.raises(ConfigError, match="measure_dir_name"):
            load_config(path)

    def test_upgrade_needs_options(self, temp_dir):
        path = temp_dir / "upgrade.yml"
        path.write_text(
            "output_directory: out\n"
            "sampler:\n  args:\n    n_datapoints: 1\n"
            "upgrades:\n  - upgrade_name: Nothing\n    options: []\n"
        )

        with pytest.raises(ConfigError):
            load_config(path)

    def test_downselect_needs_logic(self, temp_dir):
        """A downselect sampler without logic is rejected while loading."""
        path = temp_dir / "downselect.yml"
        path.write_text(
            "output_directory: out\n"
            "sampler:\n  type: residential_quota_downselect\n  args:\n    n_datapoints: 1\n"
        )

        with pytest.raises(ConfigError, match="requires 'args.logic'") as exc_info:
            load_config(path)
        assert exc_info.value.field == "sampler"


# =============================================================================
# OSW GENERATION
# =============================================================================

class TestBuildSteps:
    """Tests for the shared step layout."""

    def test_default_steps(self):
        """Controls, BuildExistingModel, then simulation output."""
        steps = build_steps(_config())

        assert _step_names(steps) == [
            "ResidentialSimulationControls",
            "BuildExistingModel",
            "SimulationOutputReport",
        ]
        assert steps[1]["arguments"] == {"building_id": 1, "workflow_json": "measure-info.json"}

    def test_measures_follow_build_existing_model(self, analysis_yml_file):
        cfg = load_config(analysis_yml_file)
        steps = build_steps(cfg)

        assert _step_names(steps) == [
            "ResidentialSimulationControls",
            "BuildExistingModel",
            "ResidentialMiscPlugLoads",
            "SimulationOutputReport",
            "TimeseriesCSVExport",
            "QOIReport",
        ]
        assert steps[2]["arguments"] == {"mult": 1.0}
        assert steps[4]["arguments"] == {"reporting_frequency": "Hourly"}

    def test_downselect_logic(self, analysis_yml_file):
        cfg = load_config(analysis_yml_file)
        steps = build_steps(cfg)

        assert steps[1]["arguments"]["downselect_logic"] == \
            "(Geometry Building Type RECS|Single-Family Detached&&Vacancy Status|Occupied)"

    def test_downselect_resample_unsupported(self):
        cfg = _config(sampler={"type": "residential_quota_downselect",
                               "args": {"n_datapoints": 1, "logic": "A|1", "resample": True}})

        with pytest.raises(AnalysisError, match="resample"):
            build_steps(cfg)

    def test_unknown_generator_key(self):
        cfg = _config(workflow_generator={"args": {"make_coffee": {}}})

        with pytest.raises(AnalysisError, match="Unknown workflow generator key 'make_coffee'"):
            build_steps(cfg)


class TestApplyUpgradeStep:
    """Tests for the ApplyUpgrade step."""

    def test_arguments(self, analysis_yml_file):
        cfg = load_config(analysis_yml_file)
        step = apply_upgrade_step(cfg.upgrades[0])

        assert step["measure_dir_name"] == "ApplyUpgrade"
        args = step["arguments"]
        assert args["run_measure"] == 1
        assert args["upgrade_name"] == "Heat Pump Water Heater"
        assert args["option_1"] == "Water Heater|Electric Heat Pump, 50 gal"
        assert args["option_1_lifetime"] == 12
        assert args["option_1_apply_logic"] == "(Water Heater|Electric Standard||Water Heater|Gas Standard)"
        assert args["option_1_cost_1_value"] == 1200
        assert args["option_1_cost_1_multiplier"] == "Fixed (1)"
        assert args["package_apply_logic"] == "!Vacancy Status|Vacant"


class TestCreateOSWs:
    """Tests for writing OSW files."""

    def test_one_osw_per_scenario(self, analysis_yml_file, temp_dir):
        cfg = load_config(analysis_yml_file)
        results_dir = temp_dir / "results"
        results_dir.mkdir()

        paths = create_osws(cfg, analysis_yml_file, results_dir)

        assert list(paths) == ["Baseline", "HeatPumpWaterHeater"]
        assert paths["Baseline"].name == "project_testing-Baseline.osw"
        assert (results_dir / "osw" / "Baseline").is_dir()
        assert (results_dir / "osw" / "HeatPumpWaterHeater").is_dir()

    def test_upgrade_osw_layout(self, analysis_yml_file, temp_dir):
        """ApplyUpgrade sits right after BuildExistingModel."""
        cfg = load_config(analysis_yml_file)
        results_dir = temp_dir / "results"
        results_dir.mkdir()

        paths = create_osws(cfg, analysis_yml_file, results_dir)
        baseline = json.loads(paths["Baseline"].read_text())
        upgrade = json.loads(paths["HeatPumpWaterHeater"].read_text())

        assert baseline["measure_paths"] == ["../../../measures"]
        assert baseline["run_options"] == {"skip_zip_results": True}
        assert "ApplyUpgrade" not in _step_names(baseline["steps"])
        assert _step_names(upgrade["steps"])[:4] == [
            "ResidentialSimulationControls",
            "BuildExistingModel",
            "ApplyUpgrade",
            "ResidentialMiscPlugLoads",
        ]

    def test_change_building_id(self, analysis_yml_file, temp_dir):
        cfg = load_config(analysis_yml_file)
        results_dir = temp_dir / "results"
        results_dir.mkdir()
        osw = create_osws(cfg, analysis_yml_file, results_dir)["Baseline"]

        change_building_id(osw, 7)

        steps = json.loads(osw.read_text())["steps"]
        assert steps[1]["arguments"]["building_id"] == "7"


# =============================================================================
# RUNNER
# =============================================================================

class TestFormatting:
    """Tests for elapsed time and progress lines."""

    def test_seconds(self):
        assert get_elapsed_time(12.34, 0.0) == "12.3s"

    def test_minutes(self):
        assert get_elapsed_time(90.0, 0.0) == "1.5min"

    def test_exactly_sixty_seconds(self):
        assert get_elapsed_time(60.0, 0.0) == "60.0s"

    def test_progress_line(self):
        line = format_progress(4, 3, 120, "1.5min")
        assert line == "[Parallel(n_jobs=4)]:   3 / 120 | elapsed:   1.5min"

    def test_version(self):
        assert version_string().startswith("resmeasures v")


class TestJobResult:
    """Tests for result rows."""

    def test_rows(self):
        result = JobResult("Baseline", 12, 3, STATUS_SUCCESS,
                           characteristics={"build_existing_model.vintage": "1980s"},
                           outputs={"simulation_output_report.total_site_energy_mbtu": 80.1})

        assert result.osw_name == "0012-Baseline.osw"
        assert result.characteristics_row() == {
            "OSW": "0012-Baseline.osw", "job_id": 3, "completed_status": "Success",
            "build_existing_model.vintage": "1980s",
        }
        assert result.output_row()["simulation_output_report.total_site_energy_mbtu"] == 80.1


def _write_out_osw(worker_dir: Path, building_id: str, status: str = STATUS_SUCCESS) -> None:
    out = {
        "completed_status": status,
        "steps": [
            {"measure_dir_name": "ResidentialSimulationControls", "result": {"step_values": []}},
            {"measure_dir_name": "BuildExistingModel",
             "result": {"step_values": [{"name": "building_id", "value": building_id},
                                        {"name": "vintage", "value": "1980s"}]}},
            {"measure_dir_name": "SimulationOutputReport",
             "result": {"step_values": [{"name": "total_site_energy_mbtu", "value": 81.5}]}},
        ],
    }
    (worker_dir / "out.osw").write_text(json.dumps(out))


def _fake_openstudio(returncode: int = 0):
    """subprocess.run replacement that writes out.osw into the worker folder."""
    def _run(cmd, capture_output=True, text=True, cwd=None, timeout=None):
        osw = json.loads(Path(cmd[-1]).read_text())
        building_id = osw["steps"][1]["arguments"]["building_id"]
        _write_out_osw(Path(cwd), building_id)
        run_dir = Path(cwd) / "run"
        run_dir.mkdir(exist_ok=True)
        (run_dir / "measures.osw").write_text("{}")
        return subprocess.CompletedProcess(cmd, returncode, stdout="simulation ok\n", stderr="")
    return _run


class TestOSWRunner:
    """Tests for running a single OSW."""

    def test_openstudio_not_found(self):
        with patch("resmeasures.workflow.runner.shutil.which", return_value=None), \
             patch("resmeasures.workflow.runner.settings.openstudio_path", None):
            with pytest.raises(AnalysisError, match="openstudio not found"):
                OSWRunner()

    def test_collect_step_values(self, temp_dir):
        _write_out_osw(temp_dir, "5")

        characteristics, outputs, status = OSWRunner.collect_step_values(temp_dir / "out.osw")

        assert status == STATUS_SUCCESS
        assert characteristics == {"build_existing_model.building_id": "5",
                                   "build_existing_model.vintage": "1980s"}
        assert outputs == {"simulation_output_report.total_site_energy_mbtu": 81.5}

    def test_missing_out_osw_fails(self, temp_dir):
        assert OSWRunner.collect_step_values(temp_dir / "out.osw") == ({}, {}, STATUS_FAIL)

    def test_truncated_out_osw_fails(self, temp_dir):
        """An out.osw cut off mid-write is a failed job, not an error."""
        (temp_dir / "out.osw").write_text('{"completed_status": "Success", "steps": [')
        assert OSWRunner.collect_step_values(temp_dir / "out.osw") == ({}, {}, STATUS_FAIL)

    def test_non_object_out_osw_fails(self, temp_dir):
        (temp_dir / "out.osw").write_text("[]")
        assert OSWRunner.collect_step_values(temp_dir / "out.osw") == ({}, {}, STATUS_FAIL)

    def test_run_and_check(self, temp_dir):
        osw = temp_dir / "in.osw"
        osw.write_text(json.dumps({"steps": [{}, {"arguments": {"building_id": "2"}}]}))

        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO):
            runner = OSWRunner()
        with patch("resmeasures.workflow.runner.subprocess.run", side_effect=_fake_openstudio()) as mock_run:
            status, characteristics, outputs, log = runner.run_and_check(osw, temp_dir, "", measures_only=True)

        assert status == STATUS_SUCCESS
        assert mock_run.call_args[0][0] == [OPENSTUDIO, "run", "--measures_only", "-w", str(osw)]
        assert characteristics["build_existing_model.building_id"] == "2"
        assert "simulation ok" in log

    def test_nonzero_exit_fails(self, temp_dir):
        osw = temp_dir / "in.osw"
        osw.write_text(json.dumps({"steps": [{}, {"arguments": {"building_id": "2"}}]}))

        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO):
            runner = OSWRunner()
        with patch("resmeasures.workflow.runner.subprocess.run", side_effect=_fake_openstudio(returncode=1)):
            status, _, _, _ = runner.run_and_check(osw, temp_dir, "")

        assert status == STATUS_FAIL

    def test_timeout_fails(self, temp_dir):
        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO):
            runner = OSWRunner(timeout_seconds=5)
        with patch("resmeasures.workflow.runner.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(cmd="openstudio", timeout=5)):
            status, characteristics, outputs, log = runner.run_and_check(temp_dir / "in.osw", temp_dir, "")

        assert status == STATUS_FAIL
        assert characteristics == {} and outputs == {}
        assert "timed out after 5 s" in log


class TestRunAnalysis:
    """Tests for a full (mocked) analysis."""

    @pytest.fixture
    def weather_zip(self, analysis_yml_file):
        """weather.zip next to the YAML file."""
        zip_path = analysis_yml_file.parent / "weather.zip"
        with zipfile.ZipFile(zip_path, "w") as archive:
            archive.writestr("weather/data.csv", "wmo,filename\n725650,denver.epw\n")
            archive.writestr("weather/denver.epw", "LOCATION,Denver\n")
        return zip_path

    def test_run_analysis(self, analysis_yml_file, weather_zip, temp_dir):
        """Two scenarios x two buildings, four result rows per table."""
        weather_dir = temp_dir / "weather_out"
        lines = []

        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO), \
             patch("resmeasures.workflow.runner.subprocess.run", side_effect=_fake_openstudio()):
            summary = run_analysis(analysis_yml_file, n_threads=2, weather_dir=weather_dir,
                                   progress_callback=lines.append)

        assert summary.n_failed == 0
        assert (weather_dir / "data.csv").exists()
        assert len(lines) == 4
        assert lines[-1].startswith("[Parallel(n_jobs=2)]: 4 / 4")

        characteristics = pd.read_csv(summary.characteristics_csv)
        assert list(characteristics["OSW"]) == [
            "0001-Baseline.osw", "0001-HeatPumpWaterHeater.osw",
            "0002-Baseline.osw", "0002-HeatPumpWaterHeater.osw",
        ]
        assert set(characteristics["completed_status"]) == {"Success"}
        assert set(characteristics["job_id"]) <= {1, 2}

        outputs = pd.read_csv(summary.output_csv)
        assert "simulation_output_report.total_site_energy_mbtu" in outputs.columns

        log = summary.cli_log.read_text()
        assert "Building ID: 2. Upgrade Name: HeatPumpWaterHeater." in log
        assert (summary.results_dir / "osw" / "Baseline" / "1-measures.osw").exists()

    def test_failures_counted(self, analysis_yml_file, weather_zip, temp_dir):
        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO), \
             patch("resmeasures.workflow.runner.subprocess.run", side_effect=_fake_openstudio(returncode=1)):
            summary = run_analysis(analysis_yml_file, n_threads=1, weather_dir=temp_dir / "w",
                                   progress_callback=lambda line: None)

        assert summary.n_failed == 4

    def test_existing_output_directory(self, analysis_yml_file):
        (analysis_yml_file.parent / "results").mkdir()

        with pytest.raises(AnalysisError, match="already exists"):
            run_analysis(analysis_yml_file, n_threads=1)

    def test_missing_weather_source(self, temp_dir):
        path = temp_dir / "no_weather.yml"
        path.write_text("output_directory: out\nsampler:\n  args:\n    n_datapoints: 1\n")

        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO):
            with pytest.raises(AnalysisError, match="weather_files_url"):
                run_analysis(path, n_threads=1, weather_dir=temp_dir / "weather_missing")

    def test_truncated_out_osw_still_writes_results(self, analysis_yml_file, weather_zip, temp_dir, caplog):
        """A crashed simulation leaves a partial out.osw; the batch still finishes."""
        def crashed_openstudio(cmd, capture_output=True, text=True, cwd=None, timeout=None):
            (Path(cwd) / "out.osw").write_text('{"completed_status": "Succ')
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="segfault\n")

        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO), \
             patch("resmeasures.workflow.runner.subprocess.run", side_effect=crashed_openstudio), \
             caplog.at_level("WARNING", logger="resmeasures.workflow.runner"):
            summary = run_analysis(analysis_yml_file, n_threads=2, weather_dir=temp_dir / "w",
                                   progress_callback=lambda line: None)

        assert summary.n_failed == 4
        assert set(pd.read_csv(summary.characteristics_csv)["completed_status"]) == {STATUS_FAIL}
        assert len(pd.read_csv(summary.output_csv)) == 4
        assert "segfault" in summary.cli_log.read_text()
        assert caplog.text.count("Failures detected") == 1

    def test_job_exception_becomes_failure(self, analysis_yml_file, weather_zip, temp_dir):
        """Errors while preparing a job fail that job only."""
        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO), \
             patch("resmeasures.workflow.runner.subprocess.run", side_effect=_fake_openstudio()), \
             patch("resmeasures.workflow.runner.change_building_id", side_effect=KeyError("steps")):
            summary = run_analysis(analysis_yml_file, n_threads=2, weather_dir=temp_dir / "w",
                                   progress_callback=lambda line: None)

        assert summary.n_failed == 4
        rows = pd.read_csv(summary.characteristics_csv)
        assert list(rows["OSW"]) == [
            "0001-Baseline.osw", "0001-HeatPumpWaterHeater.osw",
            "0002-Baseline.osw", "0002-HeatPumpWaterHeater.osw",
        ]
        assert "Job failed: KeyError" in summary.cli_log.read_text()

    def test_empty_weather_directory_is_populated(self, analysis_yml_file, weather_zip, temp_dir):
        """A weather folder left empty by an earlier run is filled again."""
        weather_dir = temp_dir / "w"
        weather_dir.mkdir()

        with patch.object(OSWRunner, "_find_openstudio", return_value=OPENSTUDIO), \
             patch("resmeasures.workflow.runner.subprocess.run", side_effect=_fake_openstudio()):
            run_analysis(analysis_yml_file, n_threads=1, weather_dir=weather_dir,
                         progress_callback=lambda line: None)

        assert (weather_dir / "denver.epw").exists()

    def test_existing_weather_is_reused(self, analysis_yml_file, temp_dir):
        weather_dir = temp_dir / "w"
        weather_dir.mkdir()
        (weather_dir / "denver.epw").write_text("LOCATION,Denver\n")

        with patch("resmeasures.workflow.runner.unzip_weather") as mock_unzip, \
             patch("resmeasures.workflow.runner.fetch_weather") as mock_fetch:
            prepare_weather(_config(), analysis_yml_file.parent, weather_dir)

        mock_unzip.assert_not_called()
        mock_fetch.assert_not_called()
