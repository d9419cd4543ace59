"""
Workflow (OSW) generation.

One OSW file is written per scenario: ``Baseline`` plus each upgrade. Steps
are laid out as

    0      simulation controls
    1      BuildExistingModel
    2      ApplyUpgrade (upgrades only)
    2+i    configured measures
    ...    simulation output, other generator keys, reporting measures
"""

from pathlib import Path
from typing import Any, Dict, List
import json
import logging

from ..core.exceptions import AnalysisError
from .apply_logic import make_apply_logic_arg
from .config import QUOTA_DOWNSELECT, AnalysisConfig, UpgradeConfig

logger = logging.getLogger(__name__)

MEASURE_DIR_NAMES = {
    "residential_simulation_controls": "ResidentialSimulationControls",
    "simulation_output": "SimulationOutputReport",
    "timeseries_csv_export": "TimeseriesCSVExport",
    "server_directory_cleanup": "ServerDirectoryCleanup",
}

BUILD_EXISTING_MODEL = "BuildExistingModel"
APPLY_UPGRADE = "ApplyUpgrade"
MEASURE_PATHS = ["../../../measures"]


def _step(entry: Dict[str, Any]) -> Dict[str, Any]:
    step = {"measure_dir_name": entry["measure_dir_name"]}
    if "arguments" in entry:
        step["arguments"] = entry["arguments"]
    return step


def build_steps(cfg: AnalysisConfig) -> List[Dict[str, Any]]:
    """Steps shared by every scenario (no ApplyUpgrade)."""
    workflow_args: Dict[str, Any] = {"residential_simulation_controls": {}, "simulation_output": {}}
    workflow_args.update(cfg.workflow_generator.args)

    steps = []
    for key, arguments in workflow_args.items():
        if key == "reporting_measures":
            steps.extend(_step(entry) for entry in arguments)
        elif key != "measures":
            if key not in MEASURE_DIR_NAMES:
                raise AnalysisError(f"Unknown workflow generator key '{key}'.")
            steps.append({"measure_dir_name": MEASURE_DIR_NAMES[key], "arguments": arguments})

    steps.insert(1, {"measure_dir_name": BUILD_EXISTING_MODEL,
                     "arguments": {"building_id": 1, "workflow_json": "measure-info.json"}})

    for i, entry in enumerate(workflow_args.get("measures", [])):
        steps.insert(2 + i, _step(entry))

    if cfg.sampler.type == QUOTA_DOWNSELECT:
        if cfg.sampler.args.resample:
            raise AnalysisError(f"Not supporting {QUOTA_DOWNSELECT}'s 'resample' at this time.")
        steps[1]["arguments"]["downselect_logic"] = make_apply_logic_arg(cfg.sampler.args.logic)

    return steps


def apply_upgrade_step(upgrade: UpgradeConfig) -> Dict[str, Any]:
    """The ApplyUpgrade step for one upgrade: options, lifetimes, apply logic and costs."""
    args: Dict[str, Any] = {"run_measure": 1, "upgrade_name": upgrade.upgrade_name}
    for opt_num, option in enumerate(upgrade.options, start=1):
        args[f"option_{opt_num}"] = option.option
        if option.lifetime is not None:
            args[f"option_{opt_num}_lifetime"] = option.lifetime
        if option.apply_logic is not None:
            args[f"option_{opt_num}_apply_logic"] = make_apply_logic_arg(option.apply_logic)
        for cost_num, cost in enumerate(option.costs, start=1):
            for name in ("value", "multiplier"):
                value = getattr(cost, name)
                if value is not None:
                    args[f"option_{opt_num}_cost_{cost_num}_{name}"] = value
    if upgrade.package_apply_logic is not None:
        args["package_apply_logic"] = make_apply_logic_arg(upgrade.package_apply_logic)
    return {"measure_dir_name": APPLY_UPGRADE, "arguments": args}


def create_osws(cfg: AnalysisConfig, yml_path: Path, results_dir: Path) -> Dict[str, Path]:
    """
    Write one OSW per scenario into ``results_dir``.

    Also creates ``results_dir/osw/{scenario}`` for the per-building
    workflows collected after each job.

    Returns:
        Scenario name -> OSW path, Baseline first
    """
    base = Path(yml_path).name.split(".")[0]
    osw_paths: Dict[str, Path] = {}

    for upgrade_idx, upgrade_name in enumerate(cfg.upgrade_names):
        (results_dir / "osw" / upgrade_name).mkdir(parents=True)

        steps = build_steps(cfg)
        if upgrade_idx > 0:
            steps.insert(2, apply_upgrade_step(cfg.upgrades[upgrade_idx - 1]))

        osw = {
            "measure_paths": MEASURE_PATHS,
            "run_options": {"skip_zip_results": True},
            "steps": steps,
        }
        path = results_dir / f"{base}-{upgrade_name}.osw"
        path.write_text(json.dumps(osw, indent=2))
        osw_paths[upgrade_name] = path
        logger.info(f"Wrote {path.name} ({len(steps)} steps)")

    return osw_paths


def change_building_id(osw_path: Path, building_id: int) -> None:
    """Point the BuildExistingModel step of an OSW at one building."""
    osw = json.loads(osw_path.read_text())
    for step in osw["steps"]:
        if step["measure_dir_name"] == BUILD_EXISTING_MODEL:
            step["arguments"]["building_id"] = str(building_id)
    osw_path.write_text(json.dumps(osw, indent=2))
